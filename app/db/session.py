from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from app.core.config import Settings, get_settings

class Base(DeclarativeBase):
    pass

from sqlalchemy.engine.url import make_url

def _get_db_config(settings: Settings):
    url = settings.POSTGRES_DB_URL
    if not url:
        raise RuntimeError("POSTGRES_DB_URL is not set.")

    url_obj = make_url(url)

    # Ensure driver is asyncpg
    if url_obj.drivername.startswith("postgres"):
        url_obj = url_obj.set(drivername="postgresql+asyncpg")

    connect_args = {}

    # asyncpg does not support 'sslmode' in query params
    # We strip it and pass 'ssl' in connect_args
    query_params = dict(url_obj.query)
    if "sslmode" in query_params:
        ssl_mode = query_params.pop("sslmode")
        url_obj = url_obj.set(query=query_params)

        if ssl_mode == "require":
            connect_args["ssl"] = "require"
        elif ssl_mode == "disable":
            connect_args["ssl"] = False
        else:
            connect_args["ssl"] = ssl_mode

    return url_obj, connect_args


def build_engine(settings: Settings):
    db_url, connect_args = _get_db_config(settings)
    return create_async_engine(
        db_url,
        echo=settings.DEBUG_MODE,
        future=True,
        connect_args=connect_args
    )


def build_sessionmaker(bind) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )


engine = build_engine(get_settings())
SessionLocal = build_sessionmaker(engine)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session
