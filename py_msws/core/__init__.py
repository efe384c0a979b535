"""
Core generator functionality.
"""

from .msws_prng import (
    DIV, MASK32, MASK64, SEED_CONSTANT, WARMUP_ROUNDS,
    MswsState, MswsPRNG,
    next32, next32_bounded, next64, next_bytes, seed, divisor_for,
)

__all__ = ['DIV', 'MASK32', 'MASK64', 'SEED_CONSTANT', 'WARMUP_ROUNDS',
           'MswsState', 'MswsPRNG',
           'next32', 'next32_bounded', 'next64', 'next_bytes', 'seed', 'divisor_for']
