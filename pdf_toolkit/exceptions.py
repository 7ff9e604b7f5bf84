"""
Error taxonomy for the toolkit API.

    ToolkitError (base)
    ├── MissingInputError       - 400, required form field absent
    ├── NoValidWorkError        - 400, nothing left to do after validation
    ├── MissingDependencyError  - 501, external binary not installed
    └── ProcessingError         - 500, the work itself failed
        └── ProcessFailedError  - external process exited non-zero
"""

from typing import Optional


class ToolkitError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingInputError(ToolkitError):
    status_code = 400


class NoValidWorkError(ToolkitError):
    status_code = 400


class MissingDependencyError(ToolkitError):
    status_code = 501

    def __init__(self, tool: str, env_var: Optional[str] = None):
        self.tool = tool
        message = f"{tool} binary not found."
        if env_var:
            message = f"{message} Set {env_var} or install {tool}."
        super().__init__(message)


class ProcessingError(ToolkitError):
    status_code = 500


class ProcessFailedError(ProcessingError):
    def __init__(self, binary: str, returncode: int, stderr: str = ""):
        self.binary = binary
        self.returncode = returncode
        self.stderr = stderr
        message = f"{binary} exited with status {returncode}"
        if stderr.strip():
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
