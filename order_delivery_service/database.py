from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for SQLAlchemy models
Base = declarative_base()


def create_db_engine(database_url):
    """Create the SQLAlchemy engine for a database URL"""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise every session sees an empty database
            return create_engine(
                url, connect_args={"check_same_thread": False}, poolclass=StaticPool
            )
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True)


def create_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine):
    """Create the tables for all models"""
    from . import models  # noqa: F401  registers the tables on Base

    Base.metadata.create_all(bind=engine)
