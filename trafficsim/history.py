from collections import deque
from itertools import islice
from typing import Deque, Generic, Iterable, Iterator, Tuple, TypeVar

T = TypeVar("T")


class BoundedHistory(Generic[T]):
    """용량을 넘으면 가장 오래된 항목부터 버리는 순서 보존 버퍼"""

    def __init__(self, capacity: int):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._items: Deque[T] = deque(maxlen=capacity)

    def append(self, item: T) -> None:
        self._items.append(item)

    def extend(self, items: Iterable[T]) -> None:
        self._items.extend(items)

    def recent(self, count: int) -> Tuple[T, ...]:
        """마지막 count 개 항목 (버퍼는 변경하지 않음)"""
        if count <= 0:
            return ()
        size = len(self._items)
        if count >= size:
            return tuple(self._items)
        return tuple(islice(self._items, size - count, size))

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)
