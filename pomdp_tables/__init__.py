"""
Sparse Tabular Functions for POMDPs

A library for storing the numeric functions of discrete decision
processes (rewards, transitions, observations) as sparse tables keyed
by small integers.

Modules:
- Functions: Sparse tabular functions of arity 1, 2 and 3
- Models: POMDP tables built from dict-of-dicts models
"""

from . import Functions
from . import Models

__all__ = ['Functions', 'Models']
__version__ = '0.1.0'
