"""
Middle Square Weyl Sequence random number generator.
"""

from .core import MswsPRNG, MswsState, next32, next32_bounded, next64, next_bytes, seed

__version__ = "1.0.0"

__all__ = ['MswsPRNG', 'MswsState', 'next32', 'next32_bounded', 'next64',
           'next_bytes', 'seed', '__version__']
