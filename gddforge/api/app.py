"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gddforge import __version__
from gddforge.api import ai_routes, content_routes
from gddforge.config.models import GDDForgeConfig
from gddforge.drafter import CompletionService, EnhancementService, GenerationService
from gddforge.drafter.streaming import ProviderFactory
from gddforge.errors import GDDForgeError, ValidationError
from gddforge.llm.registry import ModelRegistry
from gddforge.preferences import PreferencesService
from gddforge.store.sqlite_store import SQLiteSectionStore

logger = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GDDForgeError)
    async def handle_gddforge_error(request: Request, exc: GDDForgeError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc)
        else:
            logger.info("%s %s -> %s", request.method, request.url.path, exc.code)
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = ValidationError(_describe_validation_error(exc))
        return JSONResponse(status_code=error.status_code, content=error.to_payload())


def create_app(
    config: GDDForgeConfig | None = None,
    *,
    store: SQLiteSectionStore | None = None,
    registry: ModelRegistry | None = None,
    provider_factory: ProviderFactory | None = None,
) -> FastAPI:
    """Build the app with services wired once from config.

    Tests inject a store, a registry with a fake environment and a
    provider factory returning fake providers.
    """
    config = config or GDDForgeConfig()
    registry = registry or ModelRegistry(
        config.providers, default_model_id=config.llm.default_model
    )
    owns_store = store is None
    store = store or SQLiteSectionStore(config.storage.db_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        if owns_store:
            store.close()

    app = FastAPI(title="gddforge", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.registry = registry
    app.state.store = store
    service_args = dict(
        registry=registry,
        settings=config.llm,
        policy=config.generation,
        provider_factory=provider_factory,
    )
    app.state.generation = GenerationService(**service_args)
    app.state.enhancement = EnhancementService(**service_args)
    app.state.completion = CompletionService(**service_args)
    app.state.preferences = PreferencesService(store, registry)

    register_exception_handlers(app)
    app.include_router(ai_routes.router)
    app.include_router(content_routes.router)
    return app
