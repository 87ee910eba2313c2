"""Operating modes: crypt, rng and rnv.

Each mode comes in two forms. The ``*_stream`` functions work on open binary
streams with a known length and are what tests and embedding code use; the
path-based functions open the files the way the command line expects,
refusing to overwrite an existing destination.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

import numpy as np

from .config import DEFAULT_BUFFER_MIB, DIGEST_SIZE, MIB, DomainTag
from .crypto.keystream import KeystreamCipher
from .engine import DigestPair, Engine
from .errors import DestinationExistsError, StreamIOError
from .stream import ProgressCallback, StreamDriver

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = DEFAULT_BUFFER_MIB * MIB

MismatchCallback = Callable[[int], None]

# mismatch offsets are collected at most this many bytes at a time
MISMATCH_SCAN_SIZE = 65536


@dataclass(frozen=True, slots=True)
class VerificationReport:
    """Outcome of an ``rnv`` pass.

    Args:
        length: Bytes scanned.
        mismatches: Number of bytes that differ from the expected keystream.
        first_mismatch: Offset of the first differing byte, if any.
    """

    length: int
    mismatches: int
    first_mismatch: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.mismatches == 0


def _open_source(path: str | os.PathLike) -> tuple[BinaryIO, int]:
    try:
        source = open(path, "rb")
    except OSError as e:
        raise StreamIOError(f"cannot open input {os.fspath(path)}: {e}") from e
    try:
        length = os.fstat(source.fileno()).st_size
    except OSError as e:
        source.close()
        raise StreamIOError(f"cannot stat input {os.fspath(path)}: {e}") from e
    return source, length


def _create_sink(path: str | os.PathLike) -> BinaryIO:
    try:
        return open(path, "xb")
    except FileExistsError as e:
        raise DestinationExistsError(os.fspath(path)) from e
    except OSError as e:
        raise StreamIOError(f"cannot create output {os.fspath(path)}: {e}") from e


def crypt_stream(
    source: BinaryIO,
    sink: BinaryIO,
    length: int,
    key: bytes,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    hash_input: bool = False,
    hash_output: bool = False,
    digest_size: int = DIGEST_SIZE,
    progress: Optional[ProgressCallback] = None,
) -> DigestPair:
    """Encrypt or decrypt ``length`` bytes from ``source`` into ``sink``.

    The transform is its own inverse: running it again with the same key
    restores the input.
    """

    driver = StreamDriver(buffer_size)
    engine = Engine(
        key,
        want_input_digest=hash_input,
        want_output_digest=hash_output,
        digest_size=digest_size,
    )
    driver.run(
        source,
        length,
        lambda chunk, _offset: engine.transform_chunk(chunk),
        sink=sink,
        progress=progress,
    )
    return engine.finalize()


def crypt(
    input_path: str | os.PathLike,
    output_path: str | os.PathLike,
    key: bytes,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    hash_input: bool = False,
    hash_output: bool = False,
    digest_size: int = DIGEST_SIZE,
    progress: Optional[ProgressCallback] = None,
    on_start: Optional[Callable[[int], None]] = None,
) -> DigestPair:
    """File form of :func:`crypt_stream`.

    ``on_start(length)`` is called once both files are open, before any byte
    is transformed.

    Raises:
        DestinationExistsError: If ``output_path`` exists. It is left untouched.
        LengthMismatchError: If the input changes size during the run.
        StreamIOError: On any open, read or write failure.
    """

    source, length = _open_source(input_path)
    with source:
        with _create_sink(output_path) as sink:
            logger.debug("crypt %s -> %s (%d bytes)", input_path, output_path, length)
            if on_start is not None:
                on_start(length)
            return crypt_stream(
                source,
                sink,
                length,
                key,
                buffer_size=buffer_size,
                hash_input=hash_input,
                hash_output=hash_output,
                digest_size=digest_size,
                progress=progress,
            )


def rng_stream(
    sink: BinaryIO,
    key: bytes,
    length: int,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    progress: Optional[ProgressCallback] = None,
) -> int:
    """Write ``length`` bytes of the key's random-generator keystream."""

    driver = StreamDriver(buffer_size)
    cipher = KeystreamCipher(key, DomainTag.RANDOM)
    return driver.generate(sink, length, cipher.squeeze_into, progress=progress)


def rng(
    output_path: str | os.PathLike,
    key: bytes,
    length: int,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    progress: Optional[ProgressCallback] = None,
) -> int:
    """File form of :func:`rng_stream`. Returns the number of bytes written."""

    if length < 0:
        raise ValueError("length must be non-negative")
    with _create_sink(output_path) as sink:
        logger.debug("rng -> %s (%d bytes)", output_path, length)
        return rng_stream(sink, key, length, buffer_size=buffer_size, progress=progress)


def rnv_stream(
    source: BinaryIO,
    length: int,
    key: bytes,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    on_mismatch: Optional[MismatchCallback] = None,
    progress: Optional[ProgressCallback] = None,
    scan_size: int = MISMATCH_SCAN_SIZE,
) -> VerificationReport:
    """Check that ``source`` is exactly the ``rng`` output for ``key``.

    Every byte that differs is reported through ``on_mismatch(offset)``;
    scanning always covers the whole source. Offsets are gathered
    ``scan_size`` bytes at a time, so a wrong key costs no more memory
    than a right one.
    """

    if scan_size <= 0:
        raise ValueError("scan_size must be positive")

    driver = StreamDriver(buffer_size)
    cipher = KeystreamCipher(key, DomainTag.RANDOM)
    mismatches = 0
    first_mismatch: Optional[int] = None

    def verify(chunk: memoryview, offset: int) -> None:
        nonlocal mismatches, first_mismatch
        cipher.apply(chunk)
        data = np.frombuffer(chunk, dtype=np.uint8)
        bad_count = int(np.count_nonzero(data))
        if bad_count == 0:
            return
        mismatches += bad_count
        if on_mismatch is None and first_mismatch is not None:
            return
        for start in range(0, data.size, scan_size):
            bad = np.flatnonzero(data[start:start + scan_size])
            if bad.size == 0:
                continue
            if first_mismatch is None:
                first_mismatch = offset + start + int(bad[0])
                if on_mismatch is None:
                    return
            if on_mismatch is not None:
                base = offset + start
                for pos in bad.tolist():
                    on_mismatch(base + pos)

    driver.run(source, length, verify, progress=progress)
    return VerificationReport(length=length, mismatches=mismatches, first_mismatch=first_mismatch)


def rnv(
    input_path: str | os.PathLike,
    key: bytes,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    on_mismatch: Optional[MismatchCallback] = None,
    progress: Optional[ProgressCallback] = None,
    on_start: Optional[Callable[[int], None]] = None,
) -> VerificationReport:
    """File form of :func:`rnv_stream`."""

    source, length = _open_source(input_path)
    with source:
        logger.debug("rnv %s (%d bytes)", input_path, length)
        if on_start is not None:
            on_start(length)
        return rnv_stream(
            source,
            length,
            key,
            buffer_size=buffer_size,
            on_mismatch=on_mismatch,
            progress=progress,
        )
