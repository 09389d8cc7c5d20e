r'''
.------..------..------.
|g.--. ||e.--. ||n.--. |
| :/\: || (\/) || :(): |
| :\/: || :\/: || ()() |
| '--'g|| '--'e|| '--'n|
`------'`------'`------'
'''

import numpy as np
from faker import Faker
from typing import Any, Iterable, Iterator, List, Optional, Tuple
from weavy import Insertion


class Generator:
    """seeded source and insertion-request generator for tests."""

    def __init__(self, seed: Optional[int] = None):
        self._fake = Faker()
        if seed is not None:
            self._fake.seed_instance(seed)
            self._rng = np.random.default_rng(seed)
        else:
            self._rng = np.random.default_rng()

    def source(self, n: int) -> List[str]:
        """n distinct words; the index suffix keeps every element traceable."""
        return [f"{self._fake.word()}#{i}" for i in range(n)]

    def offsets(self, n: int, k: int, sort: bool = False) -> np.ndarray:
        """k offsets drawn uniformly from [0, n], duplicates included."""
        offsets = self._rng.integers(0, n + 1, size=k)
        return np.sort(offsets, kind='stable') if sort else offsets

    def insertions(self, n: int, k: int, sort: bool = False) -> List[Insertion]:
        offsets = self.offsets(n, k, sort=sort)
        return [Insertion(int(offset), f"+{self._fake.word()}@{j}") for j, offset in enumerate(offsets)]

    def clustered_insertions(self, n: int, k: int, clusters: int = 3) -> List[Insertion]:
        """k requests piled onto a few offsets, to exercise the stable tie-break."""
        hot = self._rng.integers(0, n + 1, size=max(clusters, 1))
        picks = self._rng.choice(hot, size=k)
        return [Insertion(int(offset), f"+{self._fake.word()}@{j}") for j, offset in enumerate(picks)]


def reference_merge(source: Iterable[Any], insertions: Iterable[Tuple[int, Any]]) -> List[Any]:
    """
    the slow, obviously-correct answer: list.insert from the back,
    so earlier offsets are never shifted. o(n * k).
    """
    result = list(source)
    ordered = sorted(insertions, key=lambda request: request[0])
    for offset, item in reversed(ordered):
        result.insert(offset, item)
    return result


class CountingInsertion(Insertion):
    """an Insertion that counts every read of its offset, across all instances."""
    __slots__ = ()
    reads = 0

    @property
    def offset(self) -> int:
        CountingInsertion.reads += 1
        return tuple.__getitem__(self, 0)

    @classmethod
    def reset(cls) -> None:
        cls.reads = 0


class CountingIterator:
    """wraps an iterable and counts how often it is pulled."""

    def __init__(self, data: Iterable[Any]):
        self._iterator = iter(data)
        self.pulls = 0
        self.exhausted = False

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        self.pulls += 1
        try:
            return next(self._iterator)
        except StopIteration:
            self.exhausted = True
            raise
