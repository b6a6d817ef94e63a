"""FastAPI application entry point for the ChatLens analytics service."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatlens_analytics import __version__
from chatlens_analytics.config import Settings, get_settings
from chatlens_analytics.logging_config import setup_logging
from chatlens_analytics.models import HealthResponse
from chatlens_analytics.routes.chats import router as chats_router
from chatlens_analytics.routes.dashboard import router as dashboard_router
from chatlens_analytics.routes.sentiment import router as sentiment_router
from chatlens_analytics.store import ChatStore


def create_app(settings: Settings | None = None, store: ChatStore | None = None) -> FastAPI:
    """Build the application with its own chat store."""
    settings = settings or get_settings()

    app = FastAPI(
        title="ChatLens Analytics Service",
        description=(
            "Activity and sentiment dashboards for exported WhatsApp chats. "
            "Ingests parsed messages and sentiment output, serves filtered "
            "dashboard view-models."
        ),
        version=__version__,
    )
    app.state.settings = settings
    app.state.store = store or ChatStore()

    # -----------------------------------------------------------------------
    # CORS -- the dashboard front end is served from a different origin.
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(chats_router)
    app.include_router(dashboard_router)
    app.include_router(sentiment_router)

    # -----------------------------------------------------------------------
    # Health check
    # -----------------------------------------------------------------------
    @app.get("/health", response_model=HealthResponse, tags=["health"])
    def health() -> HealthResponse:
        """Simple liveness probe."""
        return HealthResponse(status="ok", version=__version__)

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "chatlens_analytics.main:app",
        host=settings.api_host,
        port=settings.api_port,
    )
