"""
Random number generation utilities.

This module holds the process-wide default MSWS generator and the default
seed derivation used when no seed is supplied.
"""

import os
import time
from typing import Optional

import structlog

from ..core.msws_prng import MASK32, MswsPRNG

logger = structlog.get_logger()

# Fallback when the OS entropy source is unavailable
DEFAULT_SEED_BASE = 0x8FF46D8E

# Global PRNG instance
_prng = None


def make_seed() -> int:
    """
    Derive a 32-bit seed from OS entropy, the clock and the process id.

    Returns:
        Seed in [0, 2^32)
    """
    seed = DEFAULT_SEED_BASE
    try:
        seed = int.from_bytes(os.urandom(4), "little")
    except NotImplementedError:
        logger.warning("OS entropy source unavailable, using clock and pid only")

    seed ^= (int(time.time()) << 16) & MASK32
    seed ^= os.getpid() & 0xFFFF
    return seed & MASK32


def set_random_seed(seed: Optional[int] = None) -> MswsPRNG:
    """
    Reseed the global MSWS generator.

    Args:
        seed: 32-bit seed; a fresh one from make_seed() when omitted

    Returns:
        The new global MswsPRNG instance
    """
    global _prng

    if seed is None:
        seed = make_seed()
    _prng = MswsPRNG(seed)
    logger.debug("Global PRNG reseeded", seed=seed)
    return _prng


def get_prng() -> MswsPRNG:
    """
    Get the current global MSWS generator, creating one on first use.

    Returns:
        MswsPRNG instance
    """
    global _prng
    if _prng is None:
        set_random_seed()
    return _prng
