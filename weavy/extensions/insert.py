from __future__ import annotations
import typing
import numpy as np
from collections.abc import Mapping as MappingABC
from ..types import *
from ..interleaver import Interleaver
from ..streams import splice as splice_data

if typing.TYPE_CHECKING:
    from ..enumerable import Enumerable


def _snapshot(insertions: InsertionSource) -> InsertionSource:
    # a generator of requests would be spent after the first enumeration
    return insertions if isinstance(insertions, MappingABC) else list(insertions)


class InsertAccessor(Generic[T]):
    def __init__(self, enumerable_instance: 'Enumerable[T]'):
        self._enumerable = enumerable_instance

    def at(self, offset: int, item: T, **config: Any) -> 'Enumerable[T]':
        """insert a single item before source element `offset`"""
        return self.many([Insertion(offset, item)], **config)

    def many(self, insertions: InsertionSource, **config: Any) -> 'Enumerable[T]':
        """
        insert every (offset, item) request in one pass. offsets refer to this
        sequence, not to the output of the insertion itself.
        config keywords override InterleaveOptions fields.
        """
        from ..enumerable import Enumerable
        options = InterleaveOptions.resolve(**config)
        requests = _snapshot(insertions)
        return Enumerable(lambda: Interleaver(self._enumerable._get_source(), requests, options))

    def columns(self, offsets: Iterable[int], items: Iterable[T], **config: Any) -> 'Enumerable[T]':
        """insert from parallel offset/item columns, e.g. a numpy array of offsets"""
        from ..enumerable import Enumerable
        options = InterleaveOptions.resolve(**config)
        offset_column, item_column = np.asarray(offsets), list(items)
        return Enumerable(lambda: Interleaver.from_columns(
            self._enumerable._get_source(), offset_column, item_column, options))

    def splice(self, insertions: InsertionSource, **config: Any) -> 'Enumerable[T]':
        """insert whole sequences, flattened in place"""
        from ..enumerable import Enumerable
        options = InterleaveOptions.resolve(**config)
        requests = _snapshot(insertions)
        return Enumerable(lambda: splice_data(self._enumerable._get_source(), requests, options))
