"""Database bootstrap helpers.

Engines and session factories are built explicitly and handed to the stores;
nothing here holds a process-wide connection.
"""

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""

    pass


def build_engine(dsn: str) -> Engine:
    """Create an engine for `dsn`.

    In-memory SQLite needs a single shared connection, otherwise every session
    would see its own empty database.
    """

    if dsn.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if dsn in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(dsn, **kwargs)
    return create_engine(dsn, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    # `expire_on_commit=False` keeps ORM rows readable after commit in stores.
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_schema(engine: Engine) -> None:
    """Create all tables for local runs and tests; production uses Alembic."""

    # Registers the payment tables on Base.metadata.
    import orderpay.services.payments.models  # noqa: F401

    Base.metadata.create_all(engine)
