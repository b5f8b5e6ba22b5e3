"""
Variable module.
Implements the variable store and token resolution/substitution.
"""

from .store import StoreOperation, VariableStore, parse_assignment
from .substitution import Resolver, extract_tokens, substitute

__all__ = [
    'Resolver',
    'StoreOperation',
    'VariableStore',
    'extract_tokens',
    'parse_assignment',
    'substitute',
]
