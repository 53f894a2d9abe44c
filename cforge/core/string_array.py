"""
StringArray: growable, append-only, owned sequence of strings.

Used for the discovered source list and the compiled object list.
Entries are never removed individually; ``destroy()`` releases the
whole array at the end of a build.
"""
from typing import Iterable, Iterator, List


class StringArray:
    """Ordered collection of strings with amortized geometric growth."""

    def __init__(self, initial_capacity: int = 8):
        if initial_capacity < 1:
            initial_capacity = 1
        self._items: List[str] = []
        self._capacity = initial_capacity
        self._destroyed = False

    @classmethod
    def from_iterable(cls, items: Iterable[str], initial_capacity: int = 8) -> "StringArray":
        arr = cls(initial_capacity)
        for item in items:
            arr.append(item)
        return arr

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def items(self) -> List[str]:
        """Snapshot copy; mutating it does not touch the array."""
        return list(self._items)

    def append(self, item: str) -> None:
        """Store a copy of *item*, doubling capacity when full."""
        if self._destroyed:
            raise RuntimeError("StringArray used after destroy()")
        if not isinstance(item, str):
            raise TypeError(f"StringArray holds str, got {type(item).__name__}")
        if len(self._items) == self._capacity:
            self._capacity *= 2
        self._items.append(str(item))

    def destroy(self) -> None:
        """Release every stored string, then the array itself."""
        self._items.clear()
        self._capacity = 0
        self._destroyed = True

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))

    def __getitem__(self, index: int) -> str:
        return self._items[index]

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"StringArray(count={self.count}, capacity={self.capacity})"
