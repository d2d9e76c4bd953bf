# brewguide_backend/app/db/session.py

# [DB Session] Engine + helpers
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session
from brewguide_backend.app.config import DB_URL  # absolute import (exported by app/config/__init__.py)

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def make_engine(url: str = DB_URL):
    # SQLite needs check_same_thread=False for typical FastAPI usage
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    kwargs = {}
    if url in _MEMORY_URLS:
        # one shared connection, otherwise every checkout sees an empty database
        kwargs["poolclass"] = StaticPool
    return create_engine(url, echo=False, connect_args=connect_args, **kwargs)


# Create the engine
engine = make_engine()


def init_db(bind=None) -> None:
    # Ensure table definitions are registered before create_all
    from . import models  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)


def get_session():
    with Session(engine) as session:
        yield session
