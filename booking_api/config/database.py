"""Database configuration and connection setup"""
import logging
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

from booking_api.config.settings import Settings

logger = logging.getLogger(__name__)

SERIALIZABLE = "SERIALIZABLE"


class Database:
    """
    Engine and session factory owned by the application lifespan.

    Created at process start, disposed at shutdown. Request handlers get
    sessions through ``get_db``; the booking allocator and lifecycle open
    their own transactions through ``transaction()``.
    """

    def __init__(
            self,
            url: str,
            pool_size: int = 10,
            max_overflow: int = 20,
            lock_timeout_seconds: float = 5.0,
            echo: bool = False,
    ):
        self.url = url
        self.lock_timeout_seconds = lock_timeout_seconds

        if url.startswith("sqlite"):
            self.engine = create_engine(
                url,
                connect_args={
                    "check_same_thread": False,
                    "timeout": lock_timeout_seconds,
                },
                echo=echo,
            )
            _configure_sqlite_transactions(self.engine)
        else:
            # Create database engine with connection pooling
            self.engine = create_engine(
                url,
                poolclass=QueuePool,
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=True,
                echo=echo,
            )

        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )

    @classmethod
    def from_settings(cls, settings: Settings, url: Optional[str] = None) -> "Database":
        return cls(
            url or settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            lock_timeout_seconds=settings.BOOKING_LOCK_TIMEOUT_SECONDS,
        )

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def session(self) -> Session:
        return self.SessionLocal()

    def transaction(self, serializable: bool = False) -> Session:
        """
        Open a session whose transaction is already started.

        With ``serializable`` the transaction runs at SERIALIZABLE isolation
        and waits at most ``lock_timeout_seconds`` for row locks.
        """
        db = self.SessionLocal()
        try:
            if serializable:
                db.connection(execution_options={"isolation_level": SERIALIZABLE})
                if self.dialect_name == "postgresql":
                    timeout_ms = int(self.lock_timeout_seconds * 1000)
                    db.execute(text(f"SET LOCAL lock_timeout = '{timeout_ms}ms'"))
            else:
                db.connection()
        except Exception:
            db.close()
            raise
        return db

    def ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def create_tables(self) -> None:
        """Create all tables from the ORM metadata (tests and local runs)"""
        from booking_api.models import Base

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created")

    def dispose(self) -> None:
        self.engine.dispose()


def _configure_sqlite_transactions(engine: Engine) -> None:
    """
    Let SQLAlchemy emit BEGIN itself so SERIALIZABLE transactions can take
    the write lock up front with BEGIN IMMEDIATE.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get("isolation_level") == SERIALIZABLE:
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def get_db(request: Request) -> Iterator[Session]:
    """Database dependency for FastAPI"""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
