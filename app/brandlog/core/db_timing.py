from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

# A mutable holder: endpoints run in copied contexts (threadpool, child tasks)
# and must add to the same total the middleware reads.
_db_time_ms: ContextVar[list[float] | None] = ContextVar("db_time_ms", default=None)


@contextmanager
def db_timer() -> Iterator[None]:
    """Accumulate statement time for the current request context."""
    token = _db_time_ms.set([0.0])
    try:
        yield
    finally:
        _db_time_ms.reset(token)


def add_db_time(delta_ms: float) -> None:
    holder = _db_time_ms.get()
    if holder is None:
        return
    holder[0] += delta_ms


def get_db_time_ms() -> float | None:
    holder = _db_time_ms.get()
    if holder is None:
        return None
    return holder[0]
