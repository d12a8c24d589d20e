"""FastAPI application: POST /render and GET /health."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mathtile.core import RenderService
from mathtile.errors.exceptions import InvalidRequestError
from mathtile.types import ServiceConfig

logger = logging.getLogger(__name__)


def create_app(
    config: ServiceConfig | None = None,
    service: RenderService | None = None,
) -> FastAPI:
    """Build the app. The RenderService is created at startup and closed on shutdown."""
    config = config or (service.config if service is not None else ServiceConfig())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.service = service if service is not None else RenderService(config)
        logger.info(
            "Render service ready (cache capacity %d, ttl %.0fs, tile size %d)",
            config.cache_capacity,
            config.cache_ttl_seconds,
            config.max_tile_size,
        )
        try:
            yield
        finally:
            app.state.service.close()
            logger.info("Render service stopped")

    app = FastAPI(title="mathtile", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_body_size(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > config.max_body_bytes:
            return _error(413, f"Request body exceeds {config.max_body_bytes} bytes")
        return await call_next(request)

    @app.exception_handler(InvalidRequestError)
    async def invalid_request(request: Request, exc: InvalidRequestError) -> JSONResponse:
        return _error(400, exc.message)

    @app.post("/render")
    async def render(request: Request) -> JSONResponse:
        body = await _read_body(request, config.max_body_bytes)
        if body is None:
            return _error(413, f"Request body exceeds {config.max_body_bytes} bytes")
        try:
            payload = json.loads(body)
        except ValueError as e:
            raise InvalidRequestError("Request body must be valid JSON") from e
        if not isinstance(payload, dict):
            raise InvalidRequestError("Request body must be a JSON object")

        service: RenderService = request.app.state.service
        outcome = await service.render(
            payload.get("latex"),
            font_size=payload.get("fontSize"),
            pixel_density=payload.get("pixelDensity"),
        )
        if not outcome.ok or outcome.result is None:
            logger.error("Render failed: %s", outcome.error)
            return _error(500, outcome.error or "Render failed")

        return JSONResponse({"success": True, "cached": outcome.cached, **outcome.result.to_wire()})

    @app.get("/health")
    async def health(request: Request) -> dict:
        stats = request.app.state.service.cache.stats()
        return {"status": "ok", "cache": {**stats.model_dump(), "hit_rate": stats.hit_rate}}

    return app


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


async def _read_body(request: Request, limit: int) -> bytes | None:
    """Read the request body, or return None once more than ``limit`` bytes arrive.

    Chunked uploads carry no Content-Length, so the bytes are counted as they stream in.
    """
    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            return None
        chunks.append(chunk)
    return b"".join(chunks)
