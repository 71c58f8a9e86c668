from typing import AsyncIterator, Optional
from fastapi import Request
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

import config


def build_engine(database_url: Optional[str] = None) -> AsyncEngine:
    url = database_url or config.DATABASE_URL

    # Fail fast when no database is configured
    if not url:
        raise ValueError("DATABASE_URL is not set. Please check your .env file.")

    return create_async_engine(url, echo=config.SQL_ECHO, future=True)


def build_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine):
    async with engine.begin() as conn:
        # This creates the tables if they don't exist
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    async_session = request.app.state.session_factory
    async with async_session() as session:
        yield session
