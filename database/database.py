# database/database.py
import math
from typing import Callable, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from config.settings import settings

T = TypeVar("T")


def _safe_asin(value):
    # float rounding can push the haversine term a hair past 1.0
    return math.asin(min(1.0, max(-1.0, value)))


# SQLite ships without trigonometric functions
_SQLITE_FUNCTIONS = {
    "sin": math.sin,
    "cos": math.cos,
    "asin": _safe_asin,
    "sqrt": math.sqrt,
}


def _register_sqlite_functions(dbapi_connection, connection_record):
    for name, fn in _SQLITE_FUNCTIONS.items():
        dbapi_connection.create_function(name, 1, fn)


def build_engine(db_url: str) -> Engine:
    if db_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            # one shared in-memory database for every session
            kwargs["poolclass"] = StaticPool
        engine = create_engine(db_url, **kwargs)
        event.listen(engine, "connect", _register_sqlite_functions)
        return engine

    return create_engine(
        db_url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    # rows are handed back to services after the session closes
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


# default engine, built from settings
engine = build_engine(settings.DB_URL)
SessionLocal = build_session_factory(engine)

Base = declarative_base()


class TransactionRunner:
    """Runs a unit of work inside a single database transaction.

    The callback receives the transactional session. The transaction is
    committed when the callback returns and rolled back when it raises.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def __call__(self, work: Callable[[Session], T]) -> T:
        with self.session_factory() as db:
            with db.begin():
                return work(db)
