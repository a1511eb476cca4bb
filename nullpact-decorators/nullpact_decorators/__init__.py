"""
nullpact Decorators

Lightweight Python decorators for declaring nullness contracts.
"""

from .decorators import contract, Contract

__version__ = "0.1.0"
__all__ = ['contract', 'Contract']
