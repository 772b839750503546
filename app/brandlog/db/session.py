import time

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.brandlog.core.config import settings
from app.brandlog.core.db_timing import add_db_time, get_db_time_ms


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    if get_db_time_ms() is None:
        return
    conn.info["query_start_time"] = time.perf_counter()


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    start = conn.info.pop("query_start_time", None)
    if start is None:
        return
    add_db_time((time.perf_counter() - start) * 1000)


def build_engine(database_url: str) -> Engine:
    """Engine with FK enforcement on SQLite and per-request statement timing."""
    is_sqlite = database_url.startswith("sqlite")
    connect_args = {"check_same_thread": False} if is_sqlite else {}
    built = create_engine(
        database_url,
        echo=False,
        future=True,
        connect_args=connect_args,
        pool_pre_ping=not is_sqlite,
    )
    if is_sqlite:
        event.listen(built, "connect", _enable_sqlite_foreign_keys)
    event.listen(built, "before_cursor_execute", _before_cursor_execute)
    event.listen(built, "after_cursor_execute", _after_cursor_execute)
    return built


engine = build_engine(settings.DATABASE_URL)

# routers serialize ORM objects after the service has committed
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
