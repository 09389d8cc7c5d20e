from __future__ import annotations

from dataclasses import dataclass, fields, replace as dataclass_replace
from enum import Enum
from typing import (
    TypeVar, Generic, Callable, Iterator, Iterable, Any, Optional, Union,
    Dict, List, Tuple, NamedTuple, Mapping
)

T = TypeVar('T')
U = TypeVar('U')

Predicate = Callable[[T], bool]
Selector = Callable[[T], U]
Action = Callable[[T], Any]


class Insertion(NamedTuple):
    """one insertion request: put `item` right before source element `offset`"""
    offset: int
    item: Any


# anything the normalizer accepts as a request set
InsertionSource = Union[
    Iterable[Union[Insertion, Tuple[int, Any]]],
    Mapping[int, Any],
]


class EndOfStreamPolicy(str, Enum):
    """what to do with an offset that lands past the end of the source"""
    REJECT = 'reject'
    CLAMP = 'clamp'

    @classmethod
    def coerce(cls, value: Union['EndOfStreamPolicy', str]) -> 'EndOfStreamPolicy':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            allowed = ', '.join(p.value for p in cls)
            raise ValueError(f"unknown end_of_stream_policy '{value}', expected one of: {allowed}") from None


@dataclass
class InterleaveOptions:
    """configuration for one interleave pass"""
    trust_sorted_input: bool = False  # skip the sort, caller promises ascending offsets
    end_of_stream_policy: EndOfStreamPolicy = EndOfStreamPolicy.REJECT
    source_length: Optional[int] = None  # explicit n for sources without len()

    def __post_init__(self):
        self.end_of_stream_policy = EndOfStreamPolicy.coerce(self.end_of_stream_policy)
        self.trust_sorted_input = bool(self.trust_sorted_input)
        if self.source_length is not None:
            if isinstance(self.source_length, bool) or not isinstance(self.source_length, int):
                raise ValueError(f"source_length must be an int, got {type(self.source_length).__name__}")
            if self.source_length < 0:
                raise ValueError(f"source_length must be >= 0, got {self.source_length}")

    @property
    def clamps(self) -> bool:
        return self.end_of_stream_policy is EndOfStreamPolicy.CLAMP

    def replace(self, **changes: Any) -> 'InterleaveOptions':
        """copy with some fields changed; unknown names raise TypeError"""
        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise TypeError(f"unknown interleave option(s): {', '.join(sorted(unknown))}")
        return dataclass_replace(self, **changes)

    @classmethod
    def resolve(cls, options: Optional['InterleaveOptions'] = None, **overrides: Any) -> 'InterleaveOptions':
        """merge an optional base config with keyword overrides"""
        base = options if options is not None else cls()
        return base.replace(**overrides) if overrides else base
