from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from src.server.settings.config import settings


def make_engine(database_url: str, echo: bool = False) -> Engine:
    connect_args = {}
    kwargs = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        # in-memory sqlite: every connection must see the same database
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=echo, connect_args=connect_args, **kwargs)


engine = make_engine(settings.database_url, echo=settings.debug)


def init_db(bind: Engine = None) -> None:
    # Make sure the table models are registered before create_all
    from src.server.models import catalog  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)
