import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
import httpx
import redis.asyncio as redis
from redis.exceptions import RedisError

from app.db.session import engine, Base
from app.db.models.payment import Payment # noqa
from .routers import production
from .routers.payment import qr, callback
from app.core.config import get_settings

settings = get_settings()

# Configure Logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG_MODE else logging.INFO,
    format="%(asctime)s - [%(levelname)s] - %(name)s - %(message)s",
    handlers=[
        logging.FileHandler("app.log"),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


# Lifespan events
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 FastAPI application starting up...")

    app.state.http_client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)
    logger.info("HTTP client initialized successfully.")

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Payment tables ensured.")

    # Redis is only used for webhook deduplication
    app.state.redis_client = None
    if settings.REDIS_HOST:
        try:
            app.state.redis_client = redis.from_url(
                settings.REDIS_HOST,
                decode_responses=True
            )
            await app.state.redis_client.ping()
            logger.info("Successfully connected to Redis.")
        except RedisError as e:
            logger.error(f"Error connecting to Redis: {e}")
            app.state.redis_client = None

    logger.info("FastAPI startup complete.")
    yield

    await app.state.http_client.aclose()
    if app.state.redis_client:
        await app.state.redis_client.aclose()
        logger.info("Redis connection closed.")
    await engine.dispose()
    logger.info("Resources cleaned up. Application shutting down.")


# FastAPI App
app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    logger.info("Root endpoint accessed.")
    return {"message": f"{settings.APP_NAME} is running."}


# Routers
app.include_router(qr.router, prefix="/payments", tags=["payments"])
app.include_router(callback.router, prefix="/webhook", tags=["webhook"])
app.include_router(production.router, prefix="/production", tags=["production"])
