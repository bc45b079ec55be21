import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request

from dal.scientist_dal import ScientistDAL
from routes.media_route import router as media_router
from routes.scientist_route import router as scientist_router
from routes.wordpress_route import router as wordpress_router
from services.asset_resolver import AssetResolver
from services.asset_store import LocalAssetStore
from services.color_picker import ColorPicker
from services.content_normalizer import ContentNormalizer
from services.image_transform import ImageTransformer
from services.scientist_service import ScientistService
from services.wordpress_gateway import WordPressGateway
from utils.config import Settings
from utils.cors import install_cors
from utils.database_init import ConnectionSupervisor, DatabaseSession
from utils.errors import register_error_handlers

LOGGER = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the database session, kept alive by a reconnecting supervisor task
      - the image store, resolver and transformer
      - the scientist service
      - the WordPress gateway and its async HTTP client
    and attach them to `app.state`.

    Serving starts only once the first database connection succeeds.
    """
    settings: Settings = app.state.settings

    session = DatabaseSession(settings.database_path)
    supervisor = ConnectionSupervisor(
        session,
        retry_delay=settings.db_retry_delay,
        heartbeat_interval=settings.db_heartbeat_interval,
    )
    supervisor.start()
    await supervisor.wait_until_connected()
    app.state.db_session = session
    app.state.db_supervisor = supervisor

    app.state.asset_store = LocalAssetStore(settings.media_dir)
    app.state.asset_resolver = AssetResolver(settings.asset_base_url)
    app.state.image_transformer = ImageTransformer()
    app.state.scientist_service = ScientistService(
        ScientistDAL(session),
        app.state.asset_store,
        app.state.color_picker,
    )

    http_client = httpx.AsyncClient(timeout=settings.wp_timeout, transport=app.state.http_transport)
    app.state.wordpress_gateway = WordPressGateway(http_client, settings.wp_url, ContentNormalizer())

    LOGGER.info("Server ready on port %s", settings.port)
    LOGGER.info("WordPress URL: %s", settings.wp_url)
    LOGGER.info("CORS origins: %s", ", ".join(settings.cors_origins))

    try:
        yield
    finally:
        LOGGER.info("Shutting down")
        await http_client.aclose()
        await supervisor.stop()


def create_app(
    settings: Optional[Settings] = None,
    *,
    color_picker: Optional[ColorPicker] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    Args:
        settings: Configuration; read from the environment when omitted.
        color_picker: Source of default record colors (seed it for reproducible output).
        http_transport: Optional transport for the WordPress HTTP client.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.color_picker = color_picker or ColorPicker()
    app.state.http_transport = http_transport

    register_error_handlers(app)
    install_cors(app, settings.cors_origins)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        LOGGER.info("Request received: %s %s", request.method, request.url.path)
        return await call_next(request)

    @app.get(f"{settings.api_prefix}/health")
    async def health(request: Request):
        """
        Simple health check that reports whether the database link is up.
        """
        session = getattr(request.app.state, "db_session", None)
        return {
            "status": "ok",
            "message": "Scientist API is running",
            "database": bool(session and session.is_connected),
        }

    # Register application routers
    app.include_router(scientist_router, prefix=settings.api_prefix)
    app.include_router(wordpress_router, prefix=settings.api_prefix)
    app.include_router(media_router)

    return app


def run() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


app = create_app()


if __name__ == "__main__":
    run()
