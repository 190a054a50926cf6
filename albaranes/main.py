from fastapi import FastAPI

from albaranes.core.config import settings
from albaranes.core.error_sink import ErrorSink, LoggerSink, build_error_sink
from albaranes.core.errors import register_error_handlers
from albaranes.core.logger import logger
from albaranes.db.base import init_db

# =========================
# ROUTERS
# =========================
from albaranes.routers.users import router as users_router
from albaranes.routers.clients import router as clients_router
from albaranes.routers.projects import router as projects_router
from albaranes.routers.delivery_notes import router as delivery_notes_router

# =========================
# MIDDLEWARE
# =========================
from albaranes.middleware.error_reporting import ErrorReportingMiddleware


def create_app(error_sink: ErrorSink | None = None) -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME)

    register_error_handlers(app)
    app.add_middleware(ErrorReportingMiddleware, sink=error_sink or LoggerSink())

    # ============================================================
    # STARTUP
    # ============================================================
    @app.on_event("startup")
    def on_startup():
        init_db()
        logger.info(">>> Sistema listo")

    @app.get("/")
    async def root():
        return {"name": settings.PROJECT_NAME, "env": settings.ENV}

    # ============================================================
    # ROUTERS
    # ============================================================
    app.include_router(users_router, prefix=settings.API_PREFIX)
    app.include_router(clients_router, prefix=settings.API_PREFIX)
    app.include_router(projects_router, prefix=settings.API_PREFIX)
    app.include_router(delivery_notes_router, prefix=settings.API_PREFIX)

    return app


app = create_app(build_error_sink(settings.ERROR_WEBHOOK_URL, settings.HTTP_TIMEOUT))
