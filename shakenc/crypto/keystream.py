"""Keyed XOF keystream."""

from __future__ import annotations

import numpy as np

from ..config import DomainTag
from .xof import new_xof


class KeystreamCipher:
    """XOR stream cipher over a keyed cSHAKE256.

    Successive calls consume successive, non-overlapping ranges of the
    keystream, so the byte XOR-ed at absolute offset ``p`` depends only on
    ``(key, domain, p)`` and never on how the data was chunked.
    """

    def __init__(self, key: bytes, domain: DomainTag = DomainTag.CIPHER) -> None:
        self.domain = domain
        self._xof = new_xof(domain, key)
        self._position = 0

    @property
    def position(self) -> int:
        """Number of keystream bytes consumed so far."""
        return self._position

    def squeeze(self, length: int) -> bytes:
        """Return the next ``length`` keystream bytes."""

        if length < 0:
            raise ValueError("length must be non-negative")
        if length == 0:
            return b""
        self._position += length
        return self._xof.read(length)

    def squeeze_into(self, buffer) -> None:
        """Overwrite ``buffer`` with the next ``len(buffer)`` keystream bytes."""

        view = memoryview(buffer).cast("B")
        view[:] = self.squeeze(len(view))

    def apply(self, buffer) -> None:
        """XOR the next ``len(buffer)`` keystream bytes into ``buffer`` in place.

        Args:
            buffer: A writable bytes-like object (``bytearray``, ``memoryview``).
        """

        if memoryview(buffer).nbytes == 0:
            return
        data = np.frombuffer(buffer, dtype=np.uint8)
        stream = np.frombuffer(self.squeeze(data.size), dtype=np.uint8)
        np.bitwise_xor(data, stream, out=data)
