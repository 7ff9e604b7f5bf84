import asyncio
from contextlib import suppress
from typing import Sequence

from loguru import logger

from pdf_toolkit import config
from pdf_toolkit.exceptions import ProcessFailedError, ProcessingError

_UNSET = object()
MASK = "***"


def display_command(cmd: Sequence[str], secrets: Sequence[str] = ()) -> str:
    """Command line for logs, with every argument containing a secret masked."""
    secrets = [s for s in secrets if s]
    return " ".join(MASK if any(s in arg for s in secrets) else arg for arg in cmd)


async def run_binary(binary: str, args: Sequence[str], timeout=_UNSET, ok_returncodes=(0,), secrets=()) -> str:
    """
    Run an external binary without a shell and return its stdout.

    Raises ProcessFailedError when the exit status is not in
    ``ok_returncodes``. ``timeout`` falls back to PROCESS_TIMEOUT, which is
    unset by default. Arguments containing any of ``secrets`` are masked in
    the log.
    """
    if timeout is _UNSET:
        timeout = config.PROCESS_TIMEOUT
    cmd = [binary, *[str(arg) for arg in args]]
    logger.debug(f"Running {display_command(cmd, secrets)}")

    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ProcessingError(f"Failed to start {binary}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        raise ProcessingError(f"{binary} timed out after {timeout:g}s")
    finally:
        # timed out or cancelled: the child must not outlive its workspace
        if proc.returncode is None:
            with suppress(ProcessLookupError):
                proc.kill()
            await proc.wait()

    out = stdout.decode("utf-8", errors="replace")
    err = stderr.decode("utf-8", errors="replace")
    if proc.returncode not in ok_returncodes:
        logger.warning(f"{binary} exited with {proc.returncode}: {err.strip()}")
        raise ProcessFailedError(binary, proc.returncode, err)
    return out
