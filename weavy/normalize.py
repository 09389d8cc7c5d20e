"""
insertion request normalization.

turns whatever the caller hands over (pairs, Insertion tuples, a dict of
offset -> item, or parallel offset/item columns) into a list of Insertion
ordered by ascending offset. equal offsets keep their input order, which is
what makes the merge pass stable.
"""
from __future__ import annotations

import logging
import numbers
from collections.abc import Iterator as IteratorABC, Mapping as MappingABC, Sized

import numpy as np

from .types import *
from .errors import InvalidInsertion, OutOfRangeOffset

logger = logging.getLogger(__name__)


def _offset_key(request: Insertion) -> int:
    return request.offset


def _coerce_offset(offset: Any, position: int) -> int:
    # bool is an Integral too, but True as an offset is always a bug
    if isinstance(offset, bool) or not isinstance(offset, numbers.Integral):
        raise InvalidInsertion(f"offset must be an int, got {type(offset).__name__}", position)
    offset = int(offset)
    if offset < 0:
        raise InvalidInsertion(f"offset must be >= 0, got {offset}", position)
    return offset


def _coerce_request(request: Any, position: int) -> Insertion:
    if isinstance(request, Insertion):
        offset = request.offset
        checked = _coerce_offset(offset, position)
        # well-formed requests are kept as they are, no copy
        return request if type(offset) is int else Insertion(checked, request.item)
    try:
        offset, item = request
    except (TypeError, ValueError):
        raise InvalidInsertion(f"expected an (offset, item) pair, got {request!r}", position) from None
    return Insertion(_coerce_offset(offset, position), item)


def _check_range(requests: List[Insertion], source_length: int,
                 policy: EndOfStreamPolicy) -> List[Insertion]:
    """reject or clamp offsets past a known source length. o(k)."""
    if policy is EndOfStreamPolicy.REJECT:
        for request in requests:
            if request.offset > source_length:
                raise OutOfRangeOffset(request.offset, source_length)
        return requests

    clamped = 0
    result = []
    for request in requests:
        if request.offset > source_length:
            clamped += 1
            request = Insertion(source_length, request.item)
        result.append(request)
    if clamped:
        logger.warning(f"clamped {clamped} insertion(s) past the end of a source of length {source_length}")
    return result


def resolve_source_length(source: Iterable[Any], source_length: Optional[int] = None) -> Optional[int]:
    """
    the length of the source if it can be known without consuming it.
    an explicit source_length wins; iterators and unsized iterables give None.
    """
    if source_length is not None:
        return source_length
    if isinstance(source, IteratorABC) or not isinstance(source, Sized):
        return None
    return len(source)


def normalize_insertions(requests: InsertionSource,
                         source_length: Optional[int] = None,
                         *,
                         trust_sorted_input: bool = False,
                         end_of_stream_policy: Union[EndOfStreamPolicy, str] = EndOfStreamPolicy.REJECT
                         ) -> List[Insertion]:
    """
    validate and stably order insertion requests by offset.

    with trust_sorted_input the sort is skipped (o(k) instead of o(k log k)).
    if the promise is broken the merge still emits every item exactly once,
    just not where it was asked for. out-of-range offsets are only checked
    here when source_length is known, otherwise the merge pass handles them.
    """
    policy = EndOfStreamPolicy.coerce(end_of_stream_policy)
    pairs = requests.items() if isinstance(requests, MappingABC) else requests
    normalized = [_coerce_request(request, position) for position, request in enumerate(pairs)]

    if not trust_sorted_input:
        # list.sort is stable, same-offset requests stay fifo
        normalized.sort(key=_offset_key)

    if source_length is not None:
        normalized = _check_range(normalized, source_length, policy)

    logger.debug(f"normalized {len(normalized)} insertion(s) "
                 f"({'trusted order' if trust_sorted_input else 'sorted'}, source_length={source_length})")
    return normalized


def normalize_columns(offsets: Union[np.ndarray, Iterable[int]],
                      items: Iterable[Any],
                      source_length: Optional[int] = None,
                      *,
                      trust_sorted_input: bool = False,
                      end_of_stream_policy: Union[EndOfStreamPolicy, str] = EndOfStreamPolicy.REJECT
                      ) -> List[Insertion]:
    """
    same contract as normalize_insertions, for offsets and items held in two
    parallel columns. the offsets are validated and sorted with numpy.
    """
    policy = EndOfStreamPolicy.coerce(end_of_stream_policy)
    offset_array = np.asarray(offsets)
    item_list = list(items)

    if offset_array.ndim != 1:
        raise InvalidInsertion(f"offsets must be one-dimensional, got shape {offset_array.shape}")
    if len(offset_array) != len(item_list):
        raise InvalidInsertion(f"got {len(offset_array)} offsets for {len(item_list)} items")
    if len(offset_array) == 0:
        return []
    if not np.issubdtype(offset_array.dtype, np.integer):
        raise InvalidInsertion(f"offsets must have an integer dtype, got {offset_array.dtype}")

    negative = offset_array < 0
    if negative.any():
        position = int(np.argmax(negative))
        raise InvalidInsertion(f"offset must be >= 0, got {int(offset_array[position])}", position)

    if trust_sorted_input:
        order = range(len(offset_array))
    else:
        order = np.argsort(offset_array, kind='stable')

    normalized = [Insertion(int(offset_array[i]), item_list[i]) for i in order]

    if source_length is not None:
        normalized = _check_range(normalized, source_length, policy)

    logger.debug(f"normalized {len(normalized)} columnar insertion(s) "
                 f"({'trusted order' if trust_sorted_input else 'sorted'}, source_length={source_length})")
    return normalized
