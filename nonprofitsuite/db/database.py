"""
Database engine and session management.

Builds the SQLAlchemy engine from environment configuration, falls back to an
in-memory SQLite database under pytest, and exposes the ``get_db`` FastAPI
dependency.
"""
import logging
import os
import sys

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def _get_database_url() -> str:
    if os.getenv("DATABASE_URL"):
        return os.getenv("DATABASE_URL")

    db_user = os.getenv("POSTGRES_USER")
    db_password = os.getenv("POSTGRES_PASSWORD")
    db_host = os.getenv("POSTGRES_HOST")
    db_port = os.getenv("POSTGRES_PORT")
    db_name = os.getenv("POSTGRES_DB")

    if not all([db_user, db_password, db_host, db_port, db_name]):
        missing = [
            name
            for name, value in (
                ("POSTGRES_USER", db_user),
                ("POSTGRES_PASSWORD", db_password),
                ("POSTGRES_HOST", db_host),
                ("POSTGRES_PORT", db_port),
                ("POSTGRES_DB", db_name),
            )
            if not value
        ]
        raise ValueError(f"Missing required database environment variables: {', '.join(missing)}")

    return f"postgresql+psycopg://{db_user}:{db_password}@{db_host}:{db_port}/{db_name}"


def _is_pytest_runtime() -> bool:
    """Best-effort detection that we're executing under pytest.

    ``PYTEST_CURRENT_TEST`` is only set while a test runs, so also look for
    the pytest package in ``sys.modules`` which is present from collection on.
    """
    if os.getenv("PYTEST_RUNNING") == "1":
        return True
    if "PYTEST_CURRENT_TEST" in os.environ:
        return True
    return "pytest" in sys.modules


# Test override strategy:
# 1. NONPROFITSUITE_TEST_DB wins when set.
# 2. Under pytest, force in-memory sqlite shared through StaticPool.
# 3. Otherwise DATABASE_URL or the POSTGRES_* parts.
explicit_test_db = os.getenv("NONPROFITSUITE_TEST_DB")

if explicit_test_db:
    DATABASE_URL = explicit_test_db
    _engine_kwargs = {"connect_args": {"check_same_thread": False}} if DATABASE_URL.startswith("sqlite") else {}
elif _is_pytest_runtime():
    DATABASE_URL = "sqlite+pysqlite:///:memory:"
    _engine_kwargs = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
else:
    DATABASE_URL = _get_database_url()
    _engine_kwargs = {"connect_args": {"check_same_thread": False}} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_SCHEMA_INIT_DONE = False


def ensure_sqlite_schema() -> None:
    """Create tables on SQLite, where no migrations are run."""
    global _SCHEMA_INIT_DONE
    if _SCHEMA_INIT_DONE:
        return
    if str(engine.url).startswith("sqlite"):
        from nonprofitsuite.db import models  # local import to avoid a cycle at module load

        models.Base.metadata.create_all(bind=engine)
        logger.debug("sqlite_schema_created: url=%s", engine.url)
    _SCHEMA_INIT_DONE = True


def get_db():
    """Dependency to get a database session."""
    ensure_sqlite_schema()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
