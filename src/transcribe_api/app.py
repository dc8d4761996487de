"""FastAPI application factory."""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from transcribe_api.error_mapping import error_record, to_error_response
from transcribe_api.exceptions import PipelineError
from transcribe_api.logging import setup_logging
from transcribe_api.routes import transcribe_router, upload_router

logger = setup_logging()


async def _pipeline_error_handler(request: Request, exc: PipelineError) -> JSONResponse:
    logger.warning(
        "Request rejected",
        extra={"path": request.url.path, "error_kind": exc.kind, "error": exc.message},
    )
    return to_error_response(error_record(exc))


async def _http_error_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = [error.get("msg", "invalid value") for error in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={"error": "; ".join(messages) or "Invalid request"},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500, content={"error": "Failed to transcribe audio"}
    )


def create_app(lifespan=None) -> FastAPI:
    """Builds the application with routes and JSON error handlers."""
    app = FastAPI(title="Transcription Service", lifespan=lifespan)
    app.include_router(upload_router)
    app.include_router(transcribe_router)

    app.add_exception_handler(PipelineError, _pipeline_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
