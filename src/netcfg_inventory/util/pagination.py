from __future__ import annotations

from typing import Callable, Generator, List, Sequence, Tuple, TypeVar

T = TypeVar("T")

Fetch = Callable[[str | None], Tuple[Sequence[T], str | None]]


def paginate(fetch: Fetch[T]) -> Generator[T, None, None]:
    """
    Generic paginator yielding items from a fetch(next_token) function.
    The fetch function must return (items, next_token). If next_token
    is falsy, pagination stops. An empty page with a token keeps going.
    """
    token: str | None = None
    while True:
        items, next_token = fetch(token)
        for it in items:
            yield it
        if not next_token:
            break
        token = next_token


def fetch_all(fetch: Fetch[T]) -> List[T]:
    """Concatenate every page returned by fetch, in server order."""
    return list(paginate(fetch))
