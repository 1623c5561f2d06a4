from typing import Any, Dict

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings

_IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _normalize_database_url(raw_url: str) -> str:
    url = (raw_url or "").strip()
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://") :]
    if url.startswith("postgresql://") and "+psycopg" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def build_engine(raw_url: str) -> Engine:
    url = _normalize_database_url(raw_url)
    options: Dict[str, Any] = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite"):
        # store calls hop threads via asyncio.to_thread
        options["connect_args"] = {"check_same_thread": False}
        if url in _IN_MEMORY_URLS:
            options["poolclass"] = StaticPool
    return create_engine(url, **options)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind, future=True)


DATABASE_URL = _normalize_database_url(settings.DATABASE_URL)
engine = build_engine(DATABASE_URL)
SessionLocal = build_session_factory(engine)
