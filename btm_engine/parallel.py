"""Run independent computations sequentially or on a thread pool."""

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def map_independent(
    func: Callable[[T], R],
    items: Iterable[T],
    concurrency: str | None = "thread",
    max_workers: int | None = None,
) -> list[R]:
    """Apply ``func`` to each item, preserving input order.

    Args:
        func: Computation with no shared mutable state.
        items: Inputs to evaluate.
        concurrency: ``"thread"`` to use a thread pool, ``None`` to run inline.
        max_workers: Maximum pool size when ``concurrency`` is enabled.

    Returns:
        Results in the same order as ``items``.

    Raises:
        ValueError: If ``concurrency`` is not ``"thread"`` or ``None``.
    """
    if concurrency is None:
        return [func(item) for item in items]
    if concurrency != "thread":
        raise ValueError("concurrency must be 'thread' or None.")

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(func, items))
