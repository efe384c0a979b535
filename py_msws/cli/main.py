"""Command-line front end for the MSWS generator."""

import argparse
import os
import sys

import structlog

from .. import __version__
from ..config import settings
from ..core.msws_prng import MASK32, MswsPRNG
from ..utils.log_setup import configure_logging
from ..utils.random import make_seed

logger = structlog.get_logger()

# A count of zero keeps generating until the output is closed
INFINITE = 0

EPILOG = """\
NOTE: The same 'seed' value always re-generates the same sequence. Use
different 'seed' values to generate different sequences. If the 'seed' value
is *not* specified, a pseudo-random 'seed' is requested from the system.

Copyright (c) 2014-2017 Bernard Widynski
Copyright (c) 2017 LoRd_MuldeR <mulder2@gmx.de>

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.
"""


def _count_arg(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"count must not be negative: {text!r}")
    return value


def _seed_arg(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid seed: {text!r}")
    if not 0 <= value <= MASK32:
        raise argparse.ArgumentTypeError(f"seed must be in [0, 4294967295]: {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="msws-prng",
        description=f"Middle Square Weyl Sequence Random Number Generator v{__version__}",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--uint64", action="store_true",
        help="Output unsigned 64-Bit numeric values (default: unsigned 32-Bit)",
    )
    mode.add_argument(
        "--binary", action="store_true",
        help='Output stream of "raw" bytes instead of printing numeric values',
    )
    parser.add_argument(
        "--decfmt", action="store_true",
        help="Output numeric values in decimal format (default: hexadecimal)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "count", nargs="?", type=_count_arg, default=INFINITE,
        help="Number of values or bytes to generate (default: infinite)",
    )
    parser.add_argument(
        "seed", nargs="?", type=_seed_arg, default=None,
        help="Value to seed the PRNG (default: seed from system RNG)",
    )
    return parser


def format_value(value: int, wide: bool, hex_format: bool) -> str:
    """Format one value as zero-padded hex (8/16 digits) or decimal (min 8/16 digits)."""
    width = 16 if wide else 8
    if hex_format:
        return f"{value:0{width}X}"
    return f"{value:0{width}d}"


def write_values(prng: MswsPRNG, out, count: int, wide: bool, hex_format: bool) -> None:
    """Write count values, one per line; forever when count is INFINITE."""
    draw = prng.uint64 if wide else prng.uint32
    produced = 0
    while count == INFINITE or produced < count:
        out.write(format_value(draw(), wide, hex_format) + "\n")
        produced += 1
    out.flush()


def write_bytes(prng: MswsPRNG, out, count: int, chunk_size: int) -> None:
    """Write count raw bytes in chunks; forever when count is INFINITE."""
    buffer = bytearray(chunk_size)
    remaining = count
    while count == INFINITE or remaining > 0:
        size = chunk_size if count == INFINITE else min(chunk_size, remaining)
        prng.fill(buffer, size)
        out.write(memoryview(buffer)[:size])
        remaining -= size
    out.flush()


def _silence_stdout() -> None:
    # Interpreter shutdown would otherwise flush into the closed pipe again
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging()

    seed_value = make_seed() if args.seed is None else args.seed
    prng = MswsPRNG(seed_value)
    logger.debug(
        "Starting generator",
        seed=seed_value,
        count=args.count,
        mode="binary" if args.binary else ("uint64" if args.uint64 else "uint32"),
    )

    try:
        if args.binary:
            write_bytes(prng, sys.stdout.buffer, args.count, settings.chunk_size)
        else:
            write_values(prng, sys.stdout, args.count, args.uint64, not args.decfmt)
    except BrokenPipeError:
        logger.debug("Output closed by reader", values_drawn=prng.call_count)
        _silence_stdout()

    return 0


if __name__ == "__main__":
    sys.exit(main())
