"""Command line interface.

    shakenc crypt -i PLAIN -o CIPHER [--hash-input] [--hash-output]
    shakenc rng -o RANDOM -l MIB
    shakenc rnv -i RANDOM

Buffer sizes and rng lengths are given in MiB. When ``--key`` is omitted the
key is read from the terminal without echo.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
import sys
from typing import List, Optional

from tqdm import tqdm

from . import __version__
from .config import MIB, ShakencConfig
from .errors import ShakencError
from .log import configure_logging
from .modes import crypt, rng, rnv

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return number


def build_parser(config: ShakencConfig) -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-k", "--key", help="Key. Prompted for when omitted.")
    common.add_argument(
        "--buffer-size", "--buf", dest="buffer_mib", type=_positive_int, default=config.buffer_mib,
        help=f"Buffer size in MiB, held in memory (default {config.buffer_mib}).",
    )

    ap = argparse.ArgumentParser(prog="shakenc", description="cSHAKE256 file stream cipher and random generator.")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr.")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("crypt", parents=[common], help="Encrypt or decrypt a file.")
    p.add_argument("-i", "--input", required=True, help="Input file path.")
    p.add_argument("-o", "--output", required=True, help="Output file path. Must not exist.")
    p.add_argument("--hash-input", "--ih", action="store_true", help="Print a digest of the input file.")
    p.add_argument("--hash-output", "--oh", action="store_true", help="Print a digest of the output file.")

    p = sub.add_parser("rng", parents=[common], help="Write reproducible random bytes.")
    p.add_argument("-o", "--output", required=True, help="Output file path. Must not exist.")
    p.add_argument("-l", "--length", required=True, type=_non_negative_int, help="Output length in MiB.")

    p = sub.add_parser("rnv", parents=[common], help="Verify a file written by rng.")
    p.add_argument("-i", "--input", required=True, help="Input file path.")

    return ap


def _read_key(args: argparse.Namespace) -> bytes:
    if args.key is not None:
        # argv bytes that are not valid UTF-8 come back through surrogateescape
        return os.fsencode(args.key)
    return getpass.getpass("key: ").encode("utf-8")


def _progress_bar(total: int) -> tqdm:
    return tqdm(total=total, unit="B", unit_scale=True, unit_divisor=1024, file=sys.stderr, disable=None)


def _run_crypt(args: argparse.Namespace, key: bytes, buffer_size: int, digest_size: int) -> int:
    bar: Optional[tqdm] = None

    def start(length: int) -> None:
        nonlocal bar
        bar = _progress_bar(length)

    try:
        digests = crypt(
            args.input,
            args.output,
            key,
            buffer_size=buffer_size,
            hash_input=args.hash_input,
            hash_output=args.hash_output,
            digest_size=digest_size,
            progress=lambda n: bar.update(n),
            on_start=start,
        )
    finally:
        if bar is not None:
            bar.close()

    report = str(digests)
    if report:
        print(report)
    return 0


def _run_rng(args: argparse.Namespace, key: bytes, buffer_size: int) -> int:
    length = args.length * MIB
    with _progress_bar(length) as bar:
        rng(args.output, key, length, buffer_size=buffer_size, progress=bar.update)
    return 0


def _run_rnv(args: argparse.Namespace, key: bytes, buffer_size: int) -> int:
    bar: Optional[tqdm] = None

    def start(length: int) -> None:
        nonlocal bar
        bar = _progress_bar(length)

    def mismatch(offset: int) -> None:
        print(f"error occurred at byte {offset}")

    try:
        report = rnv(
            args.input,
            key,
            buffer_size=buffer_size,
            on_mismatch=mismatch,
            progress=lambda n: bar.update(n),
            on_start=start,
        )
    finally:
        if bar is not None:
            bar.close()

    if report.ok:
        logger.info("verified %d bytes, no mismatches", report.length)
    else:
        logger.warning(
            "%d of %d bytes differ, first at byte %d",
            report.mismatches, report.length, report.first_mismatch,
        )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    try:
        config = ShakencConfig.from_environment()
    except ValueError as e:
        configure_logging()
        logger.error("invalid configuration: %s", e)
        return 1

    problems = config.validate()
    if problems:
        configure_logging()
        for problem in problems:
            logger.error("invalid configuration: %s", problem)
        return 1

    args = build_parser(config).parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else config.log_level)

    buffer_size = args.buffer_mib * MIB
    try:
        key = _read_key(args)
        if args.command == "crypt":
            return _run_crypt(args, key, buffer_size, config.digest_size)
        if args.command == "rng":
            return _run_rng(args, key, buffer_size)
        return _run_rnv(args, key, buffer_size)
    except (ShakencError, OSError, UnicodeError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
