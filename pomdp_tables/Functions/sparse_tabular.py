"""Sparse tabular functions for POMDP rewards, transitions and observations.

Three shapes are supported:

    R(s)          -> SparseUnaryFunction    (immediate reward)
    R(s, a)       -> SparseBinaryFunction   (reward function)
    T(s, a, s')   -> SparseTernaryFunction  (transition function)
    O(a, s', o)   -> SparseTernaryFunction  (observation function)

Only non-zero values are stored. The outer coordinates index a dense list (or
grid) of rows, and each row is a dict from the last coordinate to the value.
Writing 0.0 removes the key, and reading an absent key returns 0.0.

Tables are filled once while a model is loaded and then only read. Iterating
a row while writing to it is not supported.
"""

import math
import operator
from typing import Dict, Iterator, List, Mapping, Tuple

import numpy as np
from scipy.sparse import csr_matrix

from .function import Arity, TabularFunction
from .shape import TableShape

Row = Dict[int, float]


def _check_index(i, extent: int, axis: int) -> int:
    """Validate one coordinate. Negative indices are rejected, not wrapped."""
    if isinstance(i, bool):
        raise TypeError(f"Index must be an integer, got {i!r}")
    i = operator.index(i)
    if i < 0 or i >= extent:
        raise IndexError(
            f"Index {i} out of range for axis {axis} with extent {extent}"
        )
    return i


def _put(row: Row, key: int, value: float) -> None:
    if value != 0.0:
        row[key] = value
    else:
        row.pop(key, None)


class SparseTabularFunction(TabularFunction):
    """
    Common base of the sparse tables.

    Use from_dims() to get the table matching the length of dims, or
    construct SparseUnaryFunction / SparseBinaryFunction /
    SparseTernaryFunction directly.
    """

    ARITY: Arity

    def __init__(self, dims):
        super().__init__(dims)
        if self._shape.arity is not self.ARITY:
            raise ValueError(
                f"{type(self).__name__} needs {self.ARITY.value} dims, "
                f"got {self._shape.arity.value}"
            )

    @classmethod
    def from_dims(cls, dims) -> "SparseTabularFunction":
        """
        Build an empty table.

        On SparseTabularFunction the class is picked from len(dims). On a
        concrete subclass dims must match that subclass, else ValueError.
        """
        shape = dims if isinstance(dims, TableShape) else TableShape(dims)
        if cls is not SparseTabularFunction:
            return cls(shape)
        return _TABLES_BY_ARITY[shape.arity](shape)

    @classmethod
    def from_mapping(cls, dims, entries: Mapping) -> "SparseTabularFunction":
        """
        Build a table from {key: value}.

        Keys are ints for arity-1 tables and index tuples otherwise. Entries
        go through set_value, so zeros are dropped but still count towards
        min_value / max_value.
        """
        table = cls.from_dims(dims)
        for key, value in entries.items():
            if not isinstance(key, tuple):
                key = (key,)
            table.set_value(*key, value)
        return table


class SparseUnaryFunction(SparseTabularFunction):
    """f(i), e.g. an immediate reward R(s)."""

    ARITY = Arity.UNARY

    def __init__(self, dims):
        super().__init__(dims)
        self._row: Row = {}

    def value_at(self, arg1) -> float:
        arg1 = _check_index(arg1, self.dims[0], 0)
        return self._row.get(arg1, 0.0)

    def set_value(self, arg1, value: float) -> None:
        arg1 = _check_index(arg1, self.dims[0], 0)
        value = float(value)
        self._track_bounds(value)
        _put(self._row, arg1, value)

    def get_non_zero_entries(self) -> Iterator[Tuple[int, float]]:
        return iter(self._row.items())

    def count_non_zero_entries(self) -> int:
        return len(self._row)

    def count_entries(self) -> int:
        return len(self._row)

    def iter_entries(self):
        for i, value in self._row.items():
            yield (i,), value


class SparseBinaryFunction(SparseTabularFunction):
    """f(i, j), e.g. a reward R(s, a). One row per first coordinate."""

    ARITY = Arity.BINARY

    def __init__(self, dims):
        super().__init__(dims)
        self._rows: List[Row] = [{} for _ in range(self.dims[0])]

    def value_at(self, arg1, arg2) -> float:
        arg1 = _check_index(arg1, self.dims[0], 0)
        arg2 = _check_index(arg2, self.dims[1], 1)
        return self._rows[arg1].get(arg2, 0.0)

    def set_value(self, arg1, arg2, value: float) -> None:
        arg1 = _check_index(arg1, self.dims[0], 0)
        arg2 = _check_index(arg2, self.dims[1], 1)
        value = float(value)
        self._track_bounds(value)
        _put(self._rows[arg1], arg2, value)

    def get_non_zero_entries(self, arg1) -> Iterator[Tuple[int, float]]:
        arg1 = _check_index(arg1, self.dims[0], 0)
        return iter(self._rows[arg1].items())

    def count_non_zero_entries(self, arg1) -> int:
        arg1 = _check_index(arg1, self.dims[0], 0)
        return len(self._rows[arg1])

    def count_entries(self) -> int:
        return sum(len(row) for row in self._rows)

    def iter_entries(self):
        for i, row in enumerate(self._rows):
            for j, value in row.items():
                yield (i, j), value

    def to_sparse_matrix(self) -> csr_matrix:
        """Returns the table as a dims[0] x dims[1] CSR matrix."""
        rows, cols, data = [], [], []
        for (i, j), value in self.iter_entries():
            rows.append(i)
            cols.append(j)
            data.append(value)
        return csr_matrix(
            (np.asarray(data, dtype=float),
             (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))),
            shape=self.dims,
        )


class SparseTernaryFunction(SparseTabularFunction):
    """
    f(i, j, k), e.g. a transition T(s, a, s') or observation O(a, s', o).

    The first two coordinates select a row in a dims[0] x dims[1] grid; the
    row maps the third coordinate to the value.
    """

    ARITY = Arity.TERNARY

    def __init__(self, dims):
        super().__init__(dims)
        self._grid: List[List[Row]] = [
            [{} for _ in range(self.dims[1])] for _ in range(self.dims[0])
        ]

    def _row(self, arg1, arg2) -> Row:
        arg1 = _check_index(arg1, self.dims[0], 0)
        arg2 = _check_index(arg2, self.dims[1], 1)
        return self._grid[arg1][arg2]

    def value_at(self, arg1, arg2, arg3) -> float:
        row = self._row(arg1, arg2)
        arg3 = _check_index(arg3, self.dims[2], 2)
        return row.get(arg3, 0.0)

    def set_value(self, arg1, arg2, arg3, value: float) -> None:
        row = self._row(arg1, arg2)
        arg3 = _check_index(arg3, self.dims[2], 2)
        value = float(value)
        self._track_bounds(value)
        _put(row, arg3, value)

    def get_non_zero_entries(self, arg1, arg2) -> Iterator[Tuple[int, float]]:
        """Iterate (k, f(arg1, arg2, k)) over the non-zero entries of a row."""
        return iter(self._row(arg1, arg2).items())

    def count_non_zero_entries(self, arg1, arg2) -> int:
        return len(self._row(arg1, arg2))

    def count_entries(self) -> int:
        count = 0
        for grid_row in self._grid:
            for row in grid_row:
                count += len(row)
        return count

    def iter_entries(self):
        for i, grid_row in enumerate(self._grid):
            for j, row in enumerate(grid_row):
                for k, value in row.items():
                    yield (i, j, k), value

    def slice_matrix(self, arg2) -> csr_matrix:
        """
        Returns the dims[0] x dims[2] matrix M[i, k] = f(i, arg2, k).

        For a transition function T(s, a, s') this is the transition matrix
        of action arg2.
        """
        arg2 = _check_index(arg2, self.dims[1], 1)
        rows, cols, data = [], [], []
        for i, grid_row in enumerate(self._grid):
            for k, value in grid_row[arg2].items():
                rows.append(i)
                cols.append(k)
                data.append(value)
        return csr_matrix(
            (np.asarray(data, dtype=float),
             (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))),
            shape=(self.dims[0], self.dims[2]),
        )

    def row_sum(self, arg1, arg2) -> float:
        return math.fsum(self._row(arg1, arg2).values())

    def stochastic_violations(
        self,
        tol: float = 1e-9,
        allow_empty: bool = True,
    ) -> List[Tuple[int, int, float]]:
        """
        Rows that are not probability distributions over the third coordinate.

        Parameters
        ----------
        tol : float
            Allowed deviation of a row sum from 1.0.
        allow_empty : bool
            Skip rows with no entries (e.g. actions not enabled in a state).

        Returns
        -------
        list of (i, j, row_sum)
        """
        violations = []
        for i, grid_row in enumerate(self._grid):
            for j, row in enumerate(grid_row):
                if not row and allow_empty:
                    continue
                total = math.fsum(row.values())
                if abs(total - 1.0) > tol:
                    violations.append((i, j, total))
        return violations


_TABLES_BY_ARITY = {
    Arity.UNARY: SparseUnaryFunction,
    Arity.BINARY: SparseBinaryFunction,
    Arity.TERNARY: SparseTernaryFunction,
}
