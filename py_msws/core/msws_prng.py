"""
Middle Square Weyl Sequence PRNG.

The state is three 64-bit words (x, w, s). Each step squares x, adds the
Weyl sequence w += s, and swaps the 32-bit halves of the result:

    x = x*x + (w += s); x = (x >> 32) | (x << 32)

The low 32 bits of the new x are the output. All arithmetic wraps modulo 2^64,
which is part of the algorithm and not an implementation detail.

Not suitable for cryptographic use.
"""

import operator
import sys
from dataclasses import dataclass
from typing import Optional

import numpy as np

MASK32 = 0xFFFFFFFF
MASK64 = 0xFFFFFFFFFFFFFFFF

# Odd constant added to the shifted seed to form the Weyl increment
SEED_CONSTANT = 0xB5AD4ECEDA1CE2A9

# Number of outputs discarded after seeding
WARMUP_ROUNDS = 13

# Divisors for bounded draws with max < 64: DIV[i] = ceil(2^32 / i), with
# indices 0 and 1 pinned to 0xFFFFFFFF
DIV = (
    0xFFFFFFFF, 0xFFFFFFFF, 0x80000000, 0x55555556,
    0x40000000, 0x33333334, 0x2AAAAAAB, 0x24924925,
    0x20000000, 0x1C71C71D, 0x1999999A, 0x1745D175,
    0x15555556, 0x13B13B14, 0x12492493, 0x11111112,
    0x10000000, 0x0F0F0F10, 0x0E38E38F, 0x0D79435F,
    0x0CCCCCCD, 0x0C30C30D, 0x0BA2E8BB, 0x0B21642D,
    0x0AAAAAAB, 0x0A3D70A4, 0x09D89D8A, 0x097B425F,
    0x0924924A, 0x08D3DCB1, 0x08888889, 0x08421085,
    0x08000000, 0x07C1F07D, 0x07878788, 0x07507508,
    0x071C71C8, 0x06EB3E46, 0x06BCA1B0, 0x06906907,
    0x06666667, 0x063E7064, 0x06186187, 0x05F417D1,
    0x05D1745E, 0x05B05B06, 0x0590B217, 0x0572620B,
    0x05555556, 0x0539782A, 0x051EB852, 0x05050506,
    0x04EC4EC5, 0x04D4873F, 0x04BDA130, 0x04A7904B,
    0x04924925, 0x047DC120, 0x0469EE59, 0x0456C798,
    0x04444445, 0x04325C54, 0x04210843, 0x04104105,
)


@dataclass
class MswsState:
    """Generator state: output accumulator, Weyl accumulator and Weyl increment."""

    x: int = 0
    w: int = 0
    s: int = 0

    def copy(self) -> "MswsState":
        return MswsState(self.x, self.w, self.s)


def next32(state: MswsState) -> int:
    """Advance the state by one step and return a 32-bit output."""
    state.w = (state.w + state.s) & MASK64
    x = (state.x * state.x + state.w) & MASK64
    x = (x >> 32) | ((x << 32) & MASK64)
    state.x = x
    return x & MASK32


def divisor_for(max_value: int) -> int:
    """Return the divisor that maps a 32-bit draw onto [0, max_value)."""
    if max_value < 64:
        return DIV[max_value]
    return MASK32 // max_value + 1


def next32_bounded(state: MswsState, max_value: int) -> int:
    """
    Return a value in [0, max_value).

    The draw is reduced by integer division rather than modulo, which keeps
    the result free of the low-bit bias a modulo reduction would introduce.

    Args:
        state: Generator state, advanced by one step
        max_value: Exclusive upper bound, in [1, 2^32)

    Returns:
        Integer in [0, max_value)
    """
    max_value = operator.index(max_value)
    if not 1 <= max_value <= MASK32:
        raise ValueError(f"max_value must be in [1, 2^32), got {max_value}")

    value = next32(state) // divisor_for(max_value)
    if max_value == 1:
        # DIV[1] lets a draw of 0xFFFFFFFF through as 1
        return 0
    return value


def next64(state: MswsState) -> int:
    """Return a 64-bit output built from two steps, the first in the high half."""
    high = next32(state)
    low = next32(state)
    return (high << 32) | low


def _fill_words(state: MswsState, view: np.ndarray) -> None:
    words = view.view(np.uint32)
    for i in range(len(words)):
        words[i] = next32(state)


def _fill_rolling(state: MswsState, view: np.ndarray) -> None:
    # Bytes of each word are taken in native order so both paths agree
    little = sys.byteorder == "little"
    word = 0
    for i in range(len(view)):
        shift = i & 3
        if shift == 0:
            word = next32(state)
        if little:
            view[i] = (word >> (8 * shift)) & 0xFF
        else:
            view[i] = (word >> (8 * (3 - shift))) & 0xFF


def next_bytes(state: MswsState, buffer, length: Optional[int] = None) -> None:
    """
    Fill a writable buffer with output bytes.

    Every 4 bytes consume one 32-bit output, laid out in the platform's native
    byte order; a trailing partial word is truncated. When the length is a
    multiple of 4 and the buffer is 4-byte aligned, whole words are written
    through a uint32 view, otherwise bytes are written one at a time. Both
    paths produce the same bytes.

    Args:
        state: Generator state
        buffer: Writable buffer (bytearray, memoryview, numpy uint8 array)
        length: Number of bytes to fill from the start of the buffer;
            defaults to the whole buffer
    """
    size = memoryview(buffer).nbytes
    if length is None:
        length = size
    if length < 0 or length > size:
        raise ValueError(f"length must be in [0, {size}] for this buffer, got {length}")
    if length == 0:
        return

    view = np.frombuffer(buffer, dtype=np.uint8, count=length)
    if length % 4 == 0 and view.ctypes.data % 4 == 0:
        _fill_words(state, view)
    else:
        _fill_rolling(state, view)


def seed(external_seed: int) -> MswsState:
    """
    Build a ready-to-use state from a 32-bit seed.

    The Weyl increment is (seed << 1) + SEED_CONSTANT, which is always odd.
    Seeds are not filtered, so the output sequence stays identical to the
    C reference for every seed. The first WARMUP_ROUNDS outputs are discarded.

    Args:
        external_seed: Seed value in [0, 2^32)

    Returns:
        Seeded MswsState
    """
    external_seed = operator.index(external_seed)
    if not 0 <= external_seed <= MASK32:
        raise ValueError(f"seed must be in [0, 2^32), got {external_seed}")

    state = MswsState(0, 0, ((external_seed << 1) + SEED_CONSTANT) & MASK64)
    for _ in range(WARMUP_ROUNDS):
        next32(state)

    return state


class MswsPRNG:
    """
    Middle Square Weyl Sequence generator owning a single state.

    Instances are not thread-safe; use one per thread or guard access
    with a lock.
    """

    def __init__(self, seed_value: int):
        """Initialize from a 32-bit seed."""
        self.seed = operator.index(seed_value)
        self.state = seed(seed_value)
        # Transitions drawn since seeding, warm-up excluded
        self.call_count = 0

    def uint32(self) -> int:
        """Next 32-bit unsigned value."""
        self.call_count += 1
        return next32(self.state)

    def bounded(self, max_value: int) -> int:
        """Next value in [0, max_value)."""
        value = next32_bounded(self.state, max_value)
        self.call_count += 1
        return value

    def uint64(self) -> int:
        """Next 64-bit unsigned value."""
        self.call_count += 2
        return next64(self.state)

    def fill(self, buffer, length: Optional[int] = None) -> None:
        """Fill a writable buffer in place with random bytes."""
        size = memoryview(buffer).nbytes if length is None else length
        next_bytes(self.state, buffer, length)
        self.call_count += (size + 3) // 4

    def bytes(self, n: int) -> bytes:
        """Return n random bytes."""
        buffer = np.empty(n, dtype=np.uint8)
        self.fill(buffer)
        return buffer.tobytes()

    def uint32_array(self, n: int) -> np.ndarray:
        """Return the next n 32-bit values as a uint32 array."""
        out = np.empty(n, dtype=np.uint32)
        _fill_words(self.state, out)
        self.call_count += n
        return out

    def __repr__(self):
        return f"MswsPRNG(seed={self.seed}, call_count={self.call_count})"
