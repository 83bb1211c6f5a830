"""POMDP models backed by sparse tabular functions."""

from .pomdp import TabularPOMDP, tabular_pomdp_from_dicts

__all__ = [
    'TabularPOMDP', 'tabular_pomdp_from_dicts',
]
