from typing import Annotated, AsyncGenerator

from fastapi import Depends

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import settings

Base = declarative_base()


def _connect_args(url: str) -> dict:
    # asyncpg only; sqlite drivers reject the ssl keyword
    if url.startswith("postgresql+asyncpg"):
        return {"ssl": settings.POSTGRES_SSLMODE == "require"}
    return {}


engine = create_async_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,               # drop dead connections before use
    pool_recycle=1800,
    connect_args=_connect_args(settings.DATABASE_URL),
)

async_session_factory = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as sess:
        yield sess

# Routes only need `db: SessionDep` to get a request-scoped session.
SessionDep = Annotated[AsyncSession, Depends(get_db)]
