from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from sqlalchemy.pool import StaticPool

from settings import get_settings

Base = declarative_base()

# Important: prevent attribute expiration on commit so ORM instances remain usable
# after the session is closed (records are read back after session_scope exits).
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)

engine: Engine | None = None


def configure_engine(url: str) -> Engine:
    """(Re)bind the session factory to a new database URL.

    SQLite files get their parent directory created; in-memory SQLite shares a
    single connection so every session sees the same tables.
    """
    global engine
    parsed = make_url(url)
    kwargs = {}
    if parsed.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if parsed.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
        else:
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    if engine is not None:
        engine.dispose()
    engine = create_engine(url, **kwargs)
    SessionLocal.configure(bind=engine)
    logger.debug("Database engine bound to {}", parsed.render_as_string(hide_password=True))
    return engine


def init_db(url: str | None = None):
    """Bind the engine (from settings unless given) and create tables."""
    import models  # noqa: F401  registers tables on Base.metadata
    bound = configure_engine(url or get_settings().database_url)
    Base.metadata.create_all(bind=bound)


@contextmanager
def session_scope():
    """Provide a transactional scope around a series of operations.

    Ensures commit on success and rollback on exception, and always closes
    the session. Usage:

        with session_scope() as db:
            db.add(obj)
    """
    db: Session = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
