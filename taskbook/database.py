from contextlib import contextmanager

from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

from .config import DATABASE_URL

# Table classes must be imported before create_tables() reads the metadata
from .models import Account, AuthSession, Profile, Task  # noqa: F401


def build_engine(url: str = DATABASE_URL):
    """SQLite for local runs; any other URL is treated as hosted Postgres."""
    if url.startswith("sqlite"):
        # FastAPI's threadpool hands one connection to several threads
        return create_engine(url, echo=False, connect_args={"check_same_thread": False})
    return create_engine(url, echo=False, pool_pre_ping=True, poolclass=NullPool)


def make_session_factory(bind):
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = build_engine()
SessionLocal = make_session_factory(engine)


@contextmanager
def get_session(session_factory=None):
    """Yield a session from ``session_factory`` (default ``SessionLocal``) and close it."""
    session = (session_factory or SessionLocal)()
    try:
        yield session
    finally:
        session.close()


def create_tables(bind=None):
    SQLModel.metadata.create_all(bind=bind or engine)
