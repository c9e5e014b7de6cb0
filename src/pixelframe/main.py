"""
PixelFrame Main Application
===========================

FastAPI entry point exposing the data-in-image codec over HTTP.

Request and response bodies are raw bytes; nothing touches the
filesystem. Codec calls are blocking and run in the threadpool.

Endpoints:
    GET  /         - Service information
    GET  /health   - Liveness probe
    POST /encode   - Raw payload in, PNG out (?compress=true|false)
    POST /decode   - PNG in, raw payload out
    POST /inspect  - PNG in, FrameInfo JSON out (payload not verified)

Error Mapping:
    400 - Malformed input (empty payload, not a frame, not a PNG)
    413 - Request body larger than server.max_body_bytes
    422 - Integrity failure (checksum mismatch, bad compressed payload)
    500 - Filesystem or encoder failure
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from pixelframe.config import settings
from pixelframe.codec import (
    ChecksumMismatchError,
    CodecError,
    DecompressionError,
    ImageIOError,
    decode_bytes_from_png,
    encode_bytes_to_png,
    inspect_png,
)
from pixelframe.models import FrameInfo


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

_startup_time: float = time.time()

# Counters
_encode_count: int = 0
_decode_count: int = 0
_error_count: int = 0


class PayloadTooLargeForServer(Exception):
    """Raised when a request body exceeds server.max_body_bytes."""

    def __init__(self, size: int, limit: int) -> None:
        super().__init__(f"Request body of {size} bytes exceeds limit of {limit}")
        self.size = size
        self.limit = limit


def status_for_error(error: CodecError) -> int:
    """Map a codec error to an HTTP status code."""
    if isinstance(error, (ChecksumMismatchError, DecompressionError)):
        return 422
    if isinstance(error, ImageIOError):
        return 500
    return 400


async def _read_body(request: Request) -> bytes:
    limit = settings.server.max_body_bytes

    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise PayloadTooLargeForServer(int(declared), limit)

    body = await request.body()
    if len(body) > limit:
        raise PayloadTooLargeForServer(len(body), limit)
    return body


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    global _startup_time

    _startup_time = time.time()
    logger.info(f"Starting {settings.app.name} {settings.app.version}")
    logger.info(
        f"Codec defaults: use_compression={settings.codec.use_compression}, "
        f"png_compression={settings.codec.png_compression}"
    )

    yield

    logger.info(
        f"Shutdown complete (encoded={_encode_count}, decoded={_decode_count}, "
        f"errors={_error_count})"
    )


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="PixelFrame",
    description="Lossless data-in-image codec",
    version=settings.app.version,
    lifespan=lifespan,
)


@app.exception_handler(CodecError)
async def codec_error_handler(request: Request, exc: CodecError) -> JSONResponse:
    global _error_count
    _error_count += 1

    status_code = status_for_error(exc)
    if status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.url.path} rejected: {exc.kind}: {exc}")

    return JSONResponse(exc.to_dict(), status_code=status_code)


@app.exception_handler(PayloadTooLargeForServer)
async def body_too_large_handler(
    request: Request, exc: PayloadTooLargeForServer
) -> JSONResponse:
    global _error_count
    _error_count += 1
    logger.warning(f"{request.url.path} rejected: {exc}")
    return JSONResponse(
        {"error": "request_too_large", "detail": str(exc)},
        status_code=413,
    )


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "PixelFrame",
        "version": settings.app.version,
        "name": settings.app.name,
        "status": "running",
        "use_compression": settings.codec.use_compression,
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness probe - is the process alive?

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "encoded": _encode_count,
        "decoded": _decode_count,
        "errors": _error_count,
    })


@app.post("/encode")
async def encode(request: Request, compress: Optional[bool] = None) -> Response:
    """
    Embed the request body in a PNG.

    The `compress` query parameter overrides codec.use_compression.
    """
    global _encode_count

    payload = await _read_body(request)
    use_compression = settings.codec.use_compression if compress is None else compress

    png, (width, height) = await run_in_threadpool(
        encode_bytes_to_png,
        payload,
        use_compression,
        settings.codec.png_compression,
    )

    _encode_count += 1
    logger.info(f"Encoded {len(payload)} bytes into {width}x{height} PNG")

    return Response(
        content=png,
        media_type="image/png",
        headers={
            "X-Image-Width": str(width),
            "X-Image-Height": str(height),
        },
    )


@app.post("/decode")
async def decode(request: Request) -> Response:
    """Recover the payload embedded in the PNG request body."""
    global _decode_count

    data = await _read_body(request)
    payload = await run_in_threadpool(decode_bytes_from_png, data)

    _decode_count += 1
    logger.info(f"Decoded {len(payload)} bytes from {len(data)}-byte PNG")

    return Response(content=payload, media_type="application/octet-stream")


@app.post("/inspect")
async def inspect(request: Request) -> JSONResponse:
    """Describe the frame header in the PNG request body."""
    data = await _read_body(request)
    header, (width, height) = await run_in_threadpool(inspect_png, data)

    info = FrameInfo.from_header(header, width=width, height=height)
    return JSONResponse(info.model_dump(mode="json"))


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "pixelframe.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
    )
