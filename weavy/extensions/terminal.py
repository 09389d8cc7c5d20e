from __future__ import annotations
import typing
import numpy as np
import pandas as pd
from ..types import *

if typing.TYPE_CHECKING:
    from ..enumerable import Enumerable

class TerminalAccessor(Generic[T]):
    def __init__(self, enumerable_instance: 'Enumerable[T]'):
        self._enumerable = enumerable_instance

    def list(self) -> List[T]:
        """convert to list"""
        return list(self._enumerable)

    def tuple(self) -> Tuple[T, ...]:
        """convert to tuple"""
        return tuple(self._enumerable)

    def array(self, dtype: Optional[Any] = None) -> np.ndarray:
        """convert to numpy array"""
        return np.array(self.list(), dtype=dtype)

    def pandas(self, name: Optional[str] = None) -> pd.Series:
        """convert to pandas series"""
        return pd.Series(self.list(), name=name)

    def string(self, sep: str = '') -> str:
        """join the elements as text"""
        return sep.join(str(item) for item in self._enumerable)

    def bytes(self) -> bytes:
        """join byte chunks; ints are taken as single byte values"""
        return b''.join(bytes([item]) if isinstance(item, int) else bytes(item) for item in self._enumerable)

    def count(self, predicate: Optional[Predicate[T]] = None) -> int:
        """count elements, consuming one full pass"""
        if predicate is None: return sum(1 for _ in self._enumerable)
        return sum(1 for x in self._enumerable if predicate(x))

    def first(self, predicate: Optional[Predicate[T]] = None) -> T:
        """get first element, pulling no further than needed"""
        for item in self._enumerable:
            if predicate is None or predicate(item): return item
        if predicate is None: raise ValueError("sequence contains no elements")
        raise ValueError("no element satisfies the condition")

    def first_or_default(self, predicate: Optional[Predicate[T]] = None,
                         default: Optional[T] = None) -> Optional[T]:
        """get first element or default"""
        try: return self.first(predicate)
        except ValueError: return default
