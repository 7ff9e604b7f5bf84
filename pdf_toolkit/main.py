import sys

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from pdf_toolkit import config
from pdf_toolkit.api import router
from pdf_toolkit.exceptions import ToolkitError
from pdf_toolkit.middleware import (
    RequestLoggingMiddleware,
    toolkit_error_handler,
    unhandled_error_handler,
    validation_error_handler,
)


def setup_logging(level: str = None):
    logger.remove()
    logger.add(sys.stderr, level=level or config.LOG_LEVEL)


def create_app() -> FastAPI:
    app = FastAPI(
        title="PDF Toolkit API",
        description="Server-side tools for the PDF toolkit: redaction, qpdf security, LibreOffice conversion, text extraction and OCR.",
        version="1.0.0",
    )

    # empty allow-list means every origin may call the API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.add_exception_handler(ToolkitError, toolkit_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(router)

    @app.get("/healthz")
    async def healthz():
        """Liveness check"""
        return {"status": "ok"}

    return app


setup_logging()
app = create_app()


def run():
    import uvicorn

    logger.info(f"PDF Toolkit API listening on http://{config.HOST}:{config.PORT}")
    if config.PROCESS_TIMEOUT is None:
        logger.info("No timeout configured for external processes")
    uvicorn.run(app, host=config.HOST, port=config.PORT)


if __name__ == "__main__":
    run()
