"""Entry point for the chunk assembler service."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from assembler.cleanup_task import StaleChunkCleaner
from assembler.config import ASSEMBLER_HOST, ASSEMBLER_PORT, CHUNK_DIR
from assembler.routes.upload_routes import router as upload_router
from assembler.service_locator import get_chunk_merger
from common.exceptions import ChunkingError, ValidationError
from common.logging_config import setup_logging

logger = setup_logging('assembler')

app = FastAPI(
    title="chunkrelay assembler",
    description="Receives file chunks and reassembles them into the original file",
    version="1.0.0"
)

cleanup_task = StaleChunkCleaner(CHUNK_DIR, locks=get_chunk_merger().locks)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    logger.info("Assembler service starting up...")
    await cleanup_task.start()


@app.on_event("shutdown")
async def shutdown_event():
    await cleanup_task.stop()
    logger.info("Assembler service stopped")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"service": "chunkrelay-assembler", "status": "running"}


app.include_router(upload_router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(f"Validation error: {exc} [request_id={request_id}] path={request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "code": exc.code}
    )


@app.exception_handler(ChunkingError)
async def chunking_error_handler(request: Request, exc: ChunkingError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(f"Chunking error: {exc} [request_id={request_id}] path={request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "code": exc.code}
    )


def main() -> None:
    uvicorn.run(app, host=ASSEMBLER_HOST, port=ASSEMBLER_PORT)


if __name__ == "__main__":
    main()
