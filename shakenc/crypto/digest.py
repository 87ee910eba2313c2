"""Incremental file digests."""

from __future__ import annotations

import logging

from ..config import DIGEST_SIZE, DomainTag
from ..errors import AccumulatorFinalizedError
from .xof import new_xof

logger = logging.getLogger(__name__)


class DigestAccumulator:
    """Keyless cSHAKE256 digest under the hash domain.

    The accumulator never sees the cipher key, so the digest of a file is the
    same whichever key it is later encrypted with. Absorb calls may split the
    data at any boundary without changing the result.
    """

    def __init__(self, size: int = DIGEST_SIZE) -> None:
        if size <= 0:
            raise ValueError("digest size must be positive")
        self.size = size
        self._xof = new_xof(DomainTag.HASH)
        self._absorbed = 0
        self._finalized = False

    @property
    def absorbed(self) -> int:
        """Total bytes absorbed so far."""
        return self._absorbed

    def absorb(self, data) -> None:
        """Feed ``data`` into the digest."""

        if self._finalized:
            raise AccumulatorFinalizedError("cannot absorb after finalize")
        self._xof.update(data)
        self._absorbed += memoryview(data).nbytes

    def finalize(self) -> bytes:
        """Consume the accumulator and return the digest."""

        if self._finalized:
            raise AccumulatorFinalizedError("digest already finalized")
        self._finalized = True
        logger.debug("finalizing digest over %d bytes", self._absorbed)
        return self._xof.read(self.size)


def hash_bytes(data: bytes, *, size: int = DIGEST_SIZE) -> bytes:
    """One-shot digest of ``data``, equal to absorbing it in any chunking."""

    acc = DigestAccumulator(size)
    acc.absorb(data)
    return acc.finalize()
