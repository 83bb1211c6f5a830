"""Base abstraction for numeric functions over small integer domains."""

import math
from abc import ABC, abstractmethod
from typing import Iterator, Tuple

import numpy as np

from .shape import Arity, TableShape

INITIAL_MIN_VALUE = math.inf
INITIAL_MAX_VALUE = -math.inf


class TabularFunction(ABC):
    """
    Abstract numeric function f: Index^k -> Real.

    Every concrete function exposes its per-dimension extents, its arity and
    the running minimum / maximum over all values ever written to it.
    """

    def __init__(self, dims):
        self._shape = dims if isinstance(dims, TableShape) else TableShape(dims)
        self._min_value = INITIAL_MIN_VALUE
        self._max_value = INITIAL_MAX_VALUE

    @property
    def dims(self) -> Tuple[int, ...]:
        return self._shape.dims

    @property
    def arity(self) -> Arity:
        return self._shape.arity

    @property
    def min_value(self) -> float:
        """Smallest value ever passed to set_value (+inf before any write)."""
        return self._min_value

    @property
    def max_value(self) -> float:
        """Largest value ever passed to set_value (-inf before any write)."""
        return self._max_value

    def _track_bounds(self, value: float) -> None:
        # Runs before zero-elision, so zero writes move the bounds too.
        if value > self._max_value:
            self._max_value = value
        if value < self._min_value:
            self._min_value = value

    @abstractmethod
    def iter_entries(self) -> Iterator[Tuple[Tuple[int, ...], float]]:
        """Yield (index_tuple, value) for every stored non-zero entry."""
        pass

    @abstractmethod
    def count_entries(self) -> int:
        """Return the number of stored non-zero entries."""
        pass

    def density(self) -> float:
        """Fraction of the domain holding a non-zero value."""
        size = self._shape.size
        if size == 0:
            return 0.0
        return self.count_entries() / size

    def to_dense(self) -> np.ndarray:
        """
        Returns the function as a float64 array of shape dims.

        Intended for small domains and debugging; the array holds every
        coordinate, including the zeros.
        """
        out = np.zeros(self.dims, dtype=float)
        for idx, value in self.iter_entries():
            out[idx] = value
        return out

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(dims={list(self.dims)}, "
                f"entries={self.count_entries()})")
