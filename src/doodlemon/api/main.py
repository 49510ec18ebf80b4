"""Doodlemon - FastAPI Application.

This module defines the FastAPI application factory, all REST API routes,
and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Creature operations** are performed by
  :class:`~doodlemon.core.service.CreatureService`, built once per app in the
  lifespan handler and stored on ``app.state``.
- **Persistence** is a single SQLite file; the gallery list is served from
  a TTL cache that every mutation patches instead of invalidating.
- **Generated images** are written below ``images_dir`` and served by
  FastAPI's ``StaticFiles`` at ``images_url_prefix``.
- **Errors** raised by the core are mapped to HTTP statuses by exception
  handlers: validation 400, not found 404, generation 502.

Endpoints
---------
========  ====================================  ==============================
Method    Path                                  Purpose
========  ====================================  ==============================
GET       ``/api/health``                       Liveness probe
GET       ``/api/gallery``                      All creatures, newest first
POST      ``/api/generate``                     Doodle -> creature
PATCH     ``/api/creatures/{id}/like``          Add one like
DELETE    ``/api/creatures/{id}``               Delete a creature
POST      ``/api/creatures/{id}/action-image``  Action image for one power
GET       ``/api/stats``                        Gallery statistics
========  ====================================  ==============================

Usage
-----
CLI (installed entry point)::

    doodlemon

Direct invocation::

    python -m doodlemon.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from doodlemon import __version__
from doodlemon.api.models import (
    ActionImageRequest,
    ActionImageResponse,
    DeleteResponse,
    GenerateRequest,
)
from doodlemon.core.config import DoodlemonConfig, config
from doodlemon.core.errors import GenerationError, NotFoundError, ValidationError
from doodlemon.core.models import Creature
from doodlemon.core.service import CreatureService

logger = logging.getLogger(__name__)


def _service(request: Request) -> CreatureService:
    return request.app.state.service


def create_app(
    app_config: DoodlemonConfig | None = None,
    service: CreatureService | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        app_config: Configuration to use; defaults to the global ``config``.
        service: Prebuilt service (tests inject one with a fake generator).
            When omitted, one is built from ``app_config`` at startup.

    Returns:
        The configured FastAPI application.
    """
    cfg = app_config or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Build the creature service on startup."""
        app.state.service = service or CreatureService.from_config(cfg)
        logger.info("CreatureService initialised.")
        yield

    app = FastAPI(
        title="Doodlemon",
        description="Turn doodles into creatures and browse them in a gallery.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[cfg.cors_origin],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Saved images are addressed by URLs under images_url_prefix.
    app.mount(
        cfg.images_url_prefix,
        StaticFiles(directory=str(cfg.images_dir)),
        name="images",
    )

    # -- Error mapping --------------------------------------------------------

    @app.exception_handler(ValidationError)
    async def _validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(NotFoundError)
    async def _not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": "Not found"})

    @app.exception_handler(GenerationError)
    async def _generation_error(_request: Request, exc: GenerationError) -> JSONResponse:
        logger.error(f"Generation failed: {exc}")
        return JSONResponse(status_code=502, content={"error": "Failed to generate image"})

    # -- Routes ---------------------------------------------------------------

    @app.get("/api/health")
    def health() -> dict:
        return {"ok": True}

    @app.get("/api/gallery")
    def get_gallery(request: Request) -> list[Creature]:
        """Return every creature, newest first, through the gallery cache."""
        return _service(request).get_gallery()

    @app.post("/api/generate")
    def generate(req: GenerateRequest, request: Request) -> Creature:
        """Generate a creature from a doodle.

        Falls back to a simulated creature when the model fails, so the
        only error response is a 400 for an invalid doodle.
        """
        return _service(request).generate(req.doodle_data, req.gemini_api_key)

    @app.patch("/api/creatures/{creature_id}/like")
    def like(creature_id: int, request: Request) -> Creature:
        return _service(request).record_like(creature_id)

    @app.delete("/api/creatures/{creature_id}")
    def delete(creature_id: int, request: Request) -> DeleteResponse:
        _service(request).delete_record(creature_id)
        return DeleteResponse()

    @app.post("/api/creatures/{creature_id}/action-image")
    def action_image(
        creature_id: int,
        req: ActionImageRequest,
        request: Request,
    ) -> ActionImageResponse:
        """Return (generating if needed) the action image for one power.

        Raises:
            ValidationError: When no power name is given (400).
        """
        power_name = req.power_name()
        if not power_name:
            raise ValidationError("power (name) required")

        result = _service(request).get_or_create_action_image(
            creature_id,
            power_name,
            power_description=req.power_description(),
            api_key=req.gemini_api_key,
            force=req.force,
        )
        return ActionImageResponse(image_url=result.url, cached=result.cached)

    @app.get("/api/stats")
    def stats(request: Request) -> dict:
        return _service(request).stats()

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~doodlemon.core.config.config`
    (``DOODLEMON_SERVER_HOST``, ``DOODLEMON_SERVER_PORT``,
    ``DOODLEMON_LOG_LEVEL``). Registered as the ``doodlemon`` console script.
    """
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "doodlemon.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
