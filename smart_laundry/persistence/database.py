"""Database engine and session management."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from smart_laundry.enterprise.config.settings import StorageSettings


class Base(DeclarativeBase):
    pass


metadata = Base.metadata


def init_engine(settings: StorageSettings) -> Engine:
    """Create the engine for ``settings.url`` and make sure tables exist."""

    engine = create_engine(settings.url, echo=settings.echo)
    metadata.create_all(engine)
    return engine


def make_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False)


def dispose_engine(engine: Optional[Engine]) -> None:
    if engine is not None:
        engine.dispose()
