from __future__ import annotations

from itertools import islice

from .types import *

# --- accessors ---
from .extensions.insert import InsertAccessor
from .extensions.terminal import TerminalAccessor

# --- main enumerable class ---

class Enumerable(Generic[T]):
    """
    a lazy, re-runnable pipeline over a source iterable.

    nothing is pulled until the enumerable is iterated, and every iteration
    runs the pipeline again from the source. an enumerable built over a
    one-shot iterator can therefore only be enumerated once.
    """
    def __init__(self, data_func: Callable[[], Iterable[T]]):
        """init with a function that returns a fresh iterable when called"""
        self._data_func = data_func
        # --- initialize accessors ---
        self.insert = InsertAccessor(self)
        self.to = TerminalAccessor(self)

    def _get_source(self) -> Iterable[T]:
        """the raw iterable for one run. sized sources keep their len()."""
        return self._data_func()

    def __iter__(self) -> Iterator[T]:
        return iter(self._get_source())

    def take(self, count: int) -> 'Enumerable[T]':
        """take the first 'count' elements without pulling the rest"""
        return Enumerable(lambda: islice(self._get_source(), max(count, 0)))

    def side_effect(self, action: Action[T]) -> 'Enumerable[T]':
        """
        performs an action for each element as it passes through, without
        modifying it. lazy; handy for counting pulls or debugging pipelines.
        """
        def lazy_side_effect_generator():
            for item in self._get_source():
                action(item)
                yield item

        return Enumerable(lazy_side_effect_generator)

    def __repr__(self) -> str:
        return f"Enumerable(data_func={getattr(self._data_func, '__name__', self._data_func)!r})"
