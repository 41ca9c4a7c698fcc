# ABOUTME: Bounded-concurrency map used by batch lookups.
# ABOUTME: Caps simultaneous outbound work while preserving input order.

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def run_bounded(fn: Callable[[T], R], items: Iterable[T], max_concurrency: int = 5) -> list[R]:
    """Apply ``fn`` to every item using at most ``max_concurrency`` threads.

    Results come back in input order. ``fn`` is expected to turn per-item
    failures into result values; an exception escaping ``fn`` propagates.
    """
    work = list(items)
    if not work:
        return []
    workers = max(1, min(max_concurrency, len(work)))
    if workers == 1:
        return [fn(item) for item in work]
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="folio-batch") as pool:
        return list(pool.map(fn, work))
