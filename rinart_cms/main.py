from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import get_settings
from .core.logging import configure_logging
from .db import dispose_engine, init_db
from .api.errors import register_exception_handlers
from .api.routes.auth import router as auth_router
from .api.routes.content import router as content_router
from .api.routes.media import router as media_router
from .api.routes.projects import router as projects_router
from .api.routes.public import router as public_router
from .api.routes.seo import router as seo_router
from .api.routes.settings import router as settings_router
from .api.routes.team import router as team_router
from .api.routes.uploads import router as uploads_router
from .services.catalogs import PublicCaches
from .services.revalidation import RevalidationService
from .telemetry import configure_tracing, setup_prometheus


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()
    app = FastAPI(title=settings.project_name, version="0.1.0")

    allow_origins = settings.cors_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in allow_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.caches = PublicCaches.create(settings.cache_ttl_seconds)
    app.state.revalidation = RevalidationService.from_settings()

    @app.on_event("startup")
    async def _startup() -> None:
        await init_db()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await dispose_engine()

    @app.get("/healthz")
    def healthz() -> dict[str, str | bool]:
        return {"ok": True, "service": "rinart-cms"}

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(projects_router)
    app.include_router(media_router)
    app.include_router(team_router)
    app.include_router(seo_router)
    app.include_router(settings_router)
    app.include_router(content_router)
    app.include_router(public_router)
    app.include_router(uploads_router)

    if settings.enable_prometheus_metrics:
        setup_prometheus(app)
    configure_tracing(app)

    return app


app = create_app()
