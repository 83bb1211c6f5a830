"""Sparse tabular functions over small integer domains."""

from .shape import Arity, TableShape
from .function import TabularFunction, INITIAL_MIN_VALUE, INITIAL_MAX_VALUE
from .sparse_tabular import (
    SparseTabularFunction,
    SparseUnaryFunction,
    SparseBinaryFunction,
    SparseTernaryFunction,
)

__all__ = [
    'TableShape',
    'Arity', 'TabularFunction', 'INITIAL_MIN_VALUE', 'INITIAL_MAX_VALUE',
    'SparseTabularFunction',
    'SparseUnaryFunction', 'SparseBinaryFunction', 'SparseTernaryFunction',
]
