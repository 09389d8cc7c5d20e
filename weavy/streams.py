"""
insertion over readers, writers and strings.

copy_with_insertions streams an origin file-like into a target file-like,
splicing whole insertion streams in at origin offsets without ever holding
more than one buffer in memory. insert_into_string does the same for an
in-memory str or bytes, and splice does it for any iterable whose
insertions are themselves iterables.
"""
from __future__ import annotations

import errno
import logging

from .types import *
from .errors import InvalidInsertion, OutOfRangeOffset
from .interleaver import Interleaver
from .normalize import normalize_insertions, resolve_source_length

logger = logging.getLogger(__name__)

# size of the chunks copied from readers to writers
BUFFER_SIZE = 1024

_CHUNK_TYPES = (str, bytes, bytearray, memoryview)


def _write_all(target: Any, data: Any) -> int:
    """
    write data fully; raw streams may accept only part of it per call.
    returns the count actually written, which is len(data) unless this raises.
    """
    view = memoryview(data) if not isinstance(data, str) else data
    total = 0
    while len(view):
        written = target.write(view)
        if written is None:
            # non-blocking raw stream that would block
            raise BlockingIOError(errno.EAGAIN, "write would block", total)
        if written == 0:
            raise OSError(f"write returned 0 after {total} of {len(data)} unit(s)")
        if written >= len(view):
            total += len(view)
            break
        total += written
        view = view[written:]
    return total


def _copy_item(item: Any, target: Any, buffer_size: int) -> int:
    if isinstance(item, _CHUNK_TYPES):
        return _write_all(target, item) if len(item) else 0
    if not hasattr(item, 'read'):
        raise InvalidInsertion(f"stream insertions must be str, bytes or readable, got {type(item).__name__}")

    copied = 0
    while True:
        chunk = item.read(buffer_size)
        if not chunk:
            return copied
        copied += _write_all(target, chunk)


def copy_with_insertions(origin: Any, target: Any, insertions: InsertionSource,
                         *, buffer_size: int = BUFFER_SIZE,
                         options: Optional[InterleaveOptions] = None, **overrides: Any) -> int:
    """
    copy `origin` into `target`, writing each insertion at its origin offset.

    offsets count bytes for binary streams and characters for text streams.
    reads from the origin never cross the next insertion offset, so each
    insertion lands exactly where it was asked for. returns the number of
    bytes (or characters) written.
    """
    if buffer_size <= 0:
        raise ValueError("buffer_size must be > 0")

    config = InterleaveOptions.resolve(options, **overrides)
    requests = normalize_insertions(
        insertions, config.source_length,
        trust_sorted_input=config.trust_sorted_input,
        end_of_stream_policy=config.end_of_stream_policy,
    )

    position = 0
    written = 0
    origin_done = False

    for request in requests:
        # copy from the origin until the insertion point (or until it runs dry)
        while not origin_done and position < request.offset:
            chunk = origin.read(min(buffer_size, request.offset - position))
            if not chunk:
                origin_done = True
                break
            position += len(chunk)
            written += _write_all(target, chunk)

        if request.offset > position:
            if not config.clamps:
                raise OutOfRangeOffset(request.offset, position)
            logger.debug(f"appending insertion for offset {request.offset} at end of origin ({position})")

        written += _copy_item(request.item, target, buffer_size)

    # all insertions placed, finish the origin
    while not origin_done:
        chunk = origin.read(buffer_size)
        if not chunk:
            break
        position += len(chunk)
        written += _write_all(target, chunk)

    logger.debug(f"copied {position} origin unit(s) and {len(requests)} insertion(s), {written} written")
    return written


def insert_into_string(origin: Union[str, bytes], insertions: InsertionSource,
                       *, options: Optional[InterleaveOptions] = None, **overrides: Any) -> Union[str, bytes]:
    """
    insert substrings at character (or byte) offsets of origin in one pass.
    the origin is sliced between consecutive offsets and the pieces joined once.
    """
    config = InterleaveOptions.resolve(options, **overrides)
    requests = normalize_insertions(
        insertions, len(origin),
        trust_sorted_input=config.trust_sorted_input,
        end_of_stream_policy=config.end_of_stream_policy,
    )
    if not requests:
        return origin

    pieces = []
    position = 0
    for request in requests:
        if request.offset > position:
            pieces.append(origin[position:request.offset])
            position = request.offset
        pieces.append(request.item)
    pieces.append(origin[position:])

    joiner = '' if isinstance(origin, str) else b''
    return joiner.join(pieces)


class _Spliced:
    """marks an insertion whose elements go into the output one by one"""
    __slots__ = ('items',)

    def __init__(self, items: Iterable[Any]):
        self.items = items


def splice(source: Iterable[T], insertions: InsertionSource,
           options: Optional[InterleaveOptions] = None, **overrides: Any) -> Iterator[T]:
    """
    like Interleaver, but every insertion item is an iterable whose elements
    are emitted in place. validation happens now, output is produced lazily.
    """
    config = InterleaveOptions.resolve(options, **overrides)
    known_length = resolve_source_length(source, config.source_length)
    requests = normalize_insertions(
        insertions, known_length,
        trust_sorted_input=config.trust_sorted_input,
        end_of_stream_policy=config.end_of_stream_policy,
    )
    marked = [Insertion(request.offset, _Spliced(request.item)) for request in requests]
    # already ordered (or deliberately trusted) and range-checked above
    merged = Interleaver(source, marked, config.replace(trust_sorted_input=True, source_length=known_length))

    def spliced_data():
        for value in merged:
            if isinstance(value, _Spliced):
                yield from value.items
            else:
                yield value

    return spliced_data()
