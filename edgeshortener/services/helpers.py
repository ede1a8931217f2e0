from concurrent.futures import ThreadPoolExecutor
from collections.abc import Callable, Sequence


def fan_out[T, R](func: Callable[[T], R], items: Sequence[T], max_workers: int) -> list[R]:
    """Apply `func` to every item concurrently and return results in input order

    `func` must not raise: batch callers turn per-item errors into results.
    A single item runs inline.
    """
    if len(items) <= 1 or max_workers <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as pool:
        return list(pool.map(func, items))
