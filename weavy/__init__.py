r"""
'                                    _
'   __      _____  __ ___   ___   _ | |
'   \ \ /\ / / _ \/ _` \ \ / / | | || |
'    \ V  V /  __/ (_| |\ V /| |_| ||_|
'     \_/\_/ \___|\__,_| \_/  \__, |(_)
'                             |___/
"""

# expose the merge pass
from .interleaver import Interleaver, interleave

# expose normalization
from .normalize import normalize_insertions, normalize_columns, resolve_source_length

# expose stream and string inserters
from .streams import copy_with_insertions, insert_into_string, splice, BUFFER_SIZE

# expose the fluent api
from .enumerable import Enumerable
from .factories import (
    from_iterable,
    from_range,
    empty,
    weavy,
    W,
    w,
)

# expose supporting data classes and errors
from .types import Insertion, InterleaveOptions, EndOfStreamPolicy
from .errors import InterleaveError, InvalidInsertion, OutOfRangeOffset

# define what `import *` does
__all__ = [
    "Interleaver",
    "interleave",
    "normalize_insertions",
    "normalize_columns",
    "resolve_source_length",
    "copy_with_insertions",
    "insert_into_string",
    "splice",
    "BUFFER_SIZE",
    "Enumerable",
    "from_iterable",
    "from_range",
    "empty",
    "weavy",
    "W",
    "w",
    "Insertion",
    "InterleaveOptions",
    "EndOfStreamPolicy",
    "InterleaveError",
    "InvalidInsertion",
    "OutOfRangeOffset",
]
