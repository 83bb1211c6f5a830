"""Shape configuration for tabular functions."""

import operator
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Arity(Enum):
    """Number of integer coordinates a function takes."""
    UNARY = 1
    BINARY = 2
    TERNARY = 3


SUPPORTED_ARITIES = tuple(a.value for a in Arity)


@dataclass(frozen=True)
class TableShape:
    """
    Per-dimension extents of a tabular function.

    dims : extents of each coordinate, e.g. (n_states, n_actions, n_states)
           for a transition function. Between one and three non-negative ints.
    """
    dims: Tuple[int, ...]

    def __post_init__(self):
        dims = tuple(self.dims)
        if len(dims) not in SUPPORTED_ARITIES:
            raise ValueError(
                f"dims must have length 1, 2 or 3, got {len(dims)}"
            )
        normalized = []
        for d in dims:
            if isinstance(d, bool):
                raise TypeError(f"dims must be integers, got {d!r}")
            try:
                d = operator.index(d)
            except TypeError:
                raise TypeError(f"dims must be integers, got {d!r}") from None
            if d < 0:
                raise ValueError(f"dims must be non-negative, got {d}")
            normalized.append(d)
        object.__setattr__(self, "dims", tuple(normalized))

    @property
    def arity(self) -> Arity:
        return Arity(len(self.dims))

    @property
    def size(self) -> int:
        """Number of coordinates in the full domain."""
        total = 1
        for d in self.dims:
            total *= d
        return total
