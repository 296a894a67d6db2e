"""
Connection Engine (SQLAlchemy)

Purpose
-------
Centralizes database initialization for the application:
- Builds a SQLAlchemy connection URL from environment-backed settings.
- Wraps the Engine (connection pool + SQL execution entry point) and a session
  factory in a `Database` object that is constructed and disposed explicitly.
- Defines shared MetaData for table and schema objects.
- Exposes a Declarative Base class for ORM models.

Notes
-----
- Uses `URL.create(...)` to avoid hardcoding credentials and to keep configuration
  environment-driven (e.g., via `.env`, container secrets, or deployment vars).
- A `Database` is owned by whoever builds it (the app lifespan, a script, a test
  fixture); nothing here creates an engine at import time.
- All ORM models must inherit from `declarativeBase` to participate in schema creation.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.schema import MetaData

from tyrebot.database.config.config import Settings

logger = logging.getLogger(__name__)

metadata = MetaData()
"""
Metadata object: Stores schema-level information about tables, constraints, indexes, etc. Shared across all models.
"""

declarativeBase = declarative_base(metadata=metadata)
"""Declarative Base: Root class for ORM models.
All model classes should inherit from this to gain ORM features and automatic schema generation.
"""


def build_connection_url(settings: Settings):
    """
    Construct the SQLAlchemy connection URL from Settings.

    `DATABASE_URL` wins when present; otherwise the URL is assembled from the
    `DB_*` pieces.
    """
    if settings.DATABASE_URL:
        return settings.DATABASE_URL
    return URL.create(
        drivername=settings.DB_DRIVER_NAME,
        username=settings.DB_USERNAME,
        password=settings.DB_PASSWORD,
        host=settings.DB_HOST,
        port=settings.DB_PORT,
        database=settings.DB_DATABASE_NAME,
    )


class Database:
    """
    Owner of one SQLAlchemy Engine and its session factory.

    Parameters
    ----------
    url : str | URL
        SQLAlchemy connection URL.
    **engine_options
        Forwarded to `create_engine` (pool class, connect_args, echo, ...).

    Lifecycle
    ---------
    - `create_all()` creates every table registered on `declarativeBase`.
    - `dispose()` closes pooled connections; call it on application shutdown.
    """

    def __init__(self, url, **engine_options):
        self.engine: Engine = create_engine(url, **engine_options)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(build_connection_url(settings), pool_pre_ping=True)

    def new_session(self) -> Session:
        return self.session_factory()

    def create_all(self) -> None:
        # Entities must be imported so their tables register on the metadata
        import tyrebot.database.entities  # noqa: F401

        metadata.create_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()
        logger.info("Database engine disposed")
