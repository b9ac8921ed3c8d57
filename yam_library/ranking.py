"""
Frequency ranking used to find the tags the user likes most.
"""

from typing import Dict, Generic, Hashable, Iterable, List, TypeVar

T = TypeVar("T", bound=Hashable)


class TagCounter(Generic[T]):
    """
    Mapping from value to number of occurrences.

    Values are remembered in first-occurrence order, and ranking uses a
    stable sort so values with the same count keep that order.
    """

    def __init__(self, items: Iterable[T] = ()):
        self._counts: Dict[T, int] = {}
        self.update(items)

    def update(self, items: Iterable[T]):
        for item in items:
            self._counts[item] = self._counts.get(item, 0) + 1

    def count(self, item: T) -> int:
        return self._counts.get(item, 0)

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, item) -> bool:
        return item in self._counts

    def most_common(self, n: int) -> List[T]:
        """Return the `n` most frequent values, ties in first-occurrence order"""
        if n <= 0:
            return []
        # sorted() is stable and the dict keeps insertion order
        ranked = sorted(self._counts.items(), key=lambda entry: entry[1], reverse=True)
        return [value for value, _ in ranked[:n]]


def most_frequent(items: Iterable[T], n: int) -> List[T]:
    """
    Get the `n` most frequent elements in `items`.

    Example:
        >>> most_frequent(["a", "b", "a", "c", "b", "a"], 2)
        ['a', 'b']
    """
    return TagCounter(items).most_common(n)


top_n = most_frequent
