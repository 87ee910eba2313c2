"""Shared exceptions for :mod:`shakenc`.

Every failure that ends a run is raised as one of these instead of aborting
the process, so embedding code can decide how to recover. Verification
mismatches found by ``rnv`` are reported as data and never raised.
"""

from __future__ import annotations


class ShakencError(Exception):
    """Base error for shakenc operations."""


class CryptoError(ShakencError):
    """Base error for keystream and digest state misuse."""


class AccumulatorFinalizedError(CryptoError):
    """Raised when a digest accumulator is used after :meth:`finalize`."""


class EngineFinalizedError(CryptoError):
    """Raised when an engine is used after :meth:`finalize`."""


class StreamError(ShakencError):
    """Base error for the chunked I/O layer."""


class StreamIOError(StreamError):
    """Raised when reading the source or writing the sink fails."""


class DestinationExistsError(StreamError):
    """Raised when the output path already exists. Nothing is written."""

    def __init__(self, path: str) -> None:
        super().__init__(f"destination already exists: {path}")
        self.path = path


class LengthMismatchError(StreamError):
    """Raised when the bytes read differ from the length known at open time."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"source length changed during the run: expected {expected} bytes, read {actual}"
        )
        self.expected = expected
        self.actual = actual
