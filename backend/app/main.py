from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from app.config import Settings, settings as default_settings
from app.database import build_engine, build_session_maker, init_db, close_db
from app.errors import register_error_handlers
from app.routes import auth, users, categories, category_requests, blogs, comments, likes, admin
from app.services.cache import cache_service


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    settings = app.state.settings
    logger.info("Starting blog API...")

    try:
        await init_db(app.state.engine)
        logger.info("Database initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    await cache_service.connect(url=settings.redis_url, enabled=settings.enable_cache, ttl=settings.cache_ttl)

    yield

    logger.info("Shutting down...")
    await cache_service.disconnect()
    await close_db(app.state.engine)


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Blog API",
        description="Blogging platform backend: blogs, categories, comments, likes and moderation",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url, echo=settings.database_echo)
    app.state.session_maker = build_session_maker(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(categories.router)
    app.include_router(category_requests.router)
    app.include_router(blogs.router)
    app.include_router(comments.router)
    app.include_router(likes.router)
    app.include_router(admin.router)

    @app.get("/api/health")
    async def health():
        """Health check endpoint"""
        return {
            "success": True,
            "status": "healthy",
            "cache": cache_service.connected,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=default_settings.api_host, port=default_settings.api_port)
