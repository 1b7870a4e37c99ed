from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import get_db_settings
from .models import Base

settings = get_db_settings()

if settings.is_sqlite:
    sqlite_kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in settings.db_uri:
        # In-memory databases live on a single connection; share it across threads.
        sqlite_kwargs["poolclass"] = StaticPool
    engine = create_engine(settings.db_uri, echo=settings.db_echo, future=True, **sqlite_kwargs)
else:
    engine = create_engine(
        settings.db_uri,
        echo=settings.db_echo,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=True,
        future=True,
    )

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)


@contextmanager
def get_session() -> Generator[Session, None, None]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
