from __future__ import annotations

from contextlib import contextmanager

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)


def init_engine(database_url: str, echo: bool = False):
    engine = create_engine(database_url, pool_pre_ping=True, echo=echo, future=True)
    SessionLocal.configure(bind=engine)
    logger.bind(dialect=engine.dialect.name).debug("Database engine initialized")
    return engine


def _ensure_initialized() -> None:
    if SessionLocal.kw.get("bind") is None:
        raise RuntimeError("Database engine not initialized. Call init_engine() before use.")


@contextmanager
def get_session(factory=None):
    if factory is None:
        _ensure_initialized()
        factory = SessionLocal
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.debug("Session rolled back")
        raise
    finally:
        session.close()
