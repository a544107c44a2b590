from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for all models
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL.

    In-memory SQLite needs a single shared connection (StaticPool),
    otherwise every new connection would see an empty database.
    check_same_thread=False lets the threadpool touch the same connection.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    """
    Session factory for database operations.

    expire_on_commit=False keeps loaded attributes readable after commit,
    so records can be converted to response models outside the transaction.
    """
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """
    Initialize database schema.
    Creates all tables defined in models.
    """
    # Import models so they register with Base.metadata
    from storefront import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
