"""Order-preserving deduplication."""

from collections.abc import Callable, Hashable, Iterable
from typing import TypeVar

T = TypeVar("T")


def deduplicate_stable(
    items: Iterable[T], key: Callable[[T], Hashable] | None = None
) -> list[T]:
    """
    Drop items whose key was already seen, keeping the first occurrence.

    Args:
        items: Items to deduplicate
        key: Function computing the identity of an item (defaults to the item)

    Returns:
        Items in their original relative order with duplicates removed
    """
    result: list[T] = []
    seen: set[Hashable] = set()
    for item in items:
        k = key(item) if key is not None else item
        if k not in seen:
            seen.add(k)
            result.append(item)
    return result
