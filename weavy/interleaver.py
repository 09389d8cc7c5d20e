"""
the merge pass.

an Interleaver walks the source once, front to back, and drops each
insertion item in right before the source element its offset names. offsets
are in source-index terms, so nothing has to be shifted as items go in and
the whole pass is o(n + k).
"""
from __future__ import annotations

import logging

import numpy as np

from .types import *
from .errors import OutOfRangeOffset
from .normalize import normalize_insertions, normalize_columns, resolve_source_length

logger = logging.getLogger(__name__)

_MISSING = object()


class Interleaver(Generic[T]):
    """
    lazy, single-pass merge of a source iterable and a set of insertion requests.

    usage:
        >>> list(Interleaver('abc', [(0, 'x'), (2, 'y')]))
        ['x', 'a', 'b', 'y', 'c']

    the object is its own iterator and cannot be restarted. errors for
    offsets past a known source length are raised here, in the constructor;
    for sources of unknown length they surface on the pull that runs out of
    source, according to options.end_of_stream_policy.
    """

    def __init__(self, source: Iterable[T], insertions: InsertionSource,
                 options: Optional[InterleaveOptions] = None, **overrides: Any):
        self.options = InterleaveOptions.resolve(options, **overrides)
        known_length = resolve_source_length(source, self.options.source_length)
        requests = normalize_insertions(
            insertions, known_length,
            trust_sorted_input=self.options.trust_sorted_input,
            end_of_stream_policy=self.options.end_of_stream_policy,
        )
        self._setup(source, requests, known_length)

    @classmethod
    def from_columns(cls, source: Iterable[T], offsets: Union[np.ndarray, Iterable[int]],
                     items: Iterable[T], options: Optional[InterleaveOptions] = None,
                     **overrides: Any) -> 'Interleaver[T]':
        """build from parallel offset and item columns (offsets may be a numpy array)"""
        interleaver = cls.__new__(cls)
        interleaver.options = InterleaveOptions.resolve(options, **overrides)
        known_length = resolve_source_length(source, interleaver.options.source_length)
        requests = normalize_columns(
            offsets, items, known_length,
            trust_sorted_input=interleaver.options.trust_sorted_input,
            end_of_stream_policy=interleaver.options.end_of_stream_policy,
        )
        interleaver._setup(source, requests, known_length)
        return interleaver

    def _setup(self, source: Iterable[T], requests: List[Insertion], known_length: Optional[int]):
        self._source = iter(source)
        self._requests = requests
        self._known_length = known_length
        self._i = 0  # next unconsumed source index
        self._j = 0  # next unplaced request
        self._emitted = 0
        self._source_done = False
        self._done = False
        self._lookahead: Any = _MISSING

    # --- iterator protocol ---

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        if self._lookahead is not _MISSING:
            value, self._lookahead = self._lookahead, _MISSING
            return value
        return self._advance()

    def has_next(self) -> bool:
        """
        whether another element exists. may pull one source element ahead and
        keeps it for the next __next__ call.
        """
        if self._lookahead is not _MISSING:
            return True
        try:
            self._lookahead = self._advance()
        except StopIteration:
            return False
        return True

    def __length_hint__(self) -> int:
        buffered = 0 if self._lookahead is _MISSING else 1
        pending = len(self._requests) - self._j
        if self._known_length is not None and not self._source_done:
            return max(0, self._known_length - self._i) + pending + buffered
        return pending + buffered

    # --- merge step ---

    def _advance(self) -> T:
        if self._done:
            raise StopIteration

        requests = self._requests
        if self._j < len(requests):
            request = requests[self._j]
            # offset < i only happens when a trusted order was not actually sorted
            if request.offset <= self._i:
                self._j += 1
                self._emitted += 1
                return request.item

        if not self._source_done:
            try:
                element = next(self._source)
            except StopIteration:
                self._source_done = True
                self._on_source_exhausted()
            else:
                self._i += 1
                self._emitted += 1
                return element

        # source is exhausted, i == n; everything left is at or past the end
        if self._j < len(requests):
            request = requests[self._j]
            if request.offset > self._i and not self.options.clamps:
                self._done = True
                raise OutOfRangeOffset(request.offset, self._i)
            self._j += 1
            self._emitted += 1
            return request.item

        self._done = True
        raise StopIteration

    def _on_source_exhausted(self):
        if self._known_length is not None and self._known_length != self._i:
            logger.warning(f"source declared {self._known_length} element(s) but produced {self._i}")
        logger.debug(f"source exhausted after {self._i} element(s), "
                     f"{len(self._requests) - self._j} insertion(s) left for the end")

    # --- state ---

    @property
    def source_index(self) -> int:
        """number of source elements consumed so far"""
        return self._i

    @property
    def insertion_index(self) -> int:
        """number of insertion requests placed so far"""
        return self._j

    @property
    def emitted(self) -> int:
        # lookahead counts as produced by the merge, not yet handed out
        return self._emitted - (0 if self._lookahead is _MISSING else 1)

    @property
    def pending(self) -> int:
        return len(self._requests) - self._j

    @property
    def source_length(self) -> Optional[int]:
        """n, if it was known upfront or has been discovered by exhausting the source"""
        if self._source_done:
            return self._i
        return self._known_length

    @property
    def exhausted(self) -> bool:
        return self._done and self._lookahead is _MISSING

    def __repr__(self) -> str:
        return (f"Interleaver(source_index={self._i}, insertion_index={self._j}/{len(self._requests)}, "
                f"source_length={self.source_length}, exhausted={self.exhausted})")


def interleave(source: Iterable[T], insertions: InsertionSource,
               options: Optional[InterleaveOptions] = None, **overrides: Any) -> Interleaver[T]:
    """functional shorthand for Interleaver(...)"""
    return Interleaver(source, insertions, options, **overrides)
