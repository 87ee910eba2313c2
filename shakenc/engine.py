"""Cipher engine with optional input/output digests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import DIGEST_SIZE, DomainTag
from .crypto.digest import DigestAccumulator
from .crypto.keystream import KeystreamCipher
from .errors import EngineFinalizedError


@dataclass(frozen=True, slots=True)
class DigestPair:
    """Digests produced by :meth:`Engine.finalize`.

    ``input_digest`` covers the bytes before the transform and
    ``output_digest`` the bytes after it, relative to the direction of the
    current run. Either is ``None`` when it was not requested.
    """

    input_digest: Optional[bytes] = None
    output_digest: Optional[bytes] = None

    def hex(self) -> tuple[Optional[str], Optional[str]]:
        """Return ``(input, output)`` digests as hex strings, ``None`` where absent."""
        return (
            self.input_digest.hex() if self.input_digest is not None else None,
            self.output_digest.hex() if self.output_digest is not None else None,
        )

    def __str__(self) -> str:
        lines = []
        if self.input_digest is not None:
            lines.append(f"input  hash: {self.input_digest.hex()}")
        if self.output_digest is not None:
            lines.append(f"output hash: {self.output_digest.hex()}")
        return "\n".join(lines)


class Engine:
    """One keystream cipher plus zero, one or two digest accumulators.

    Args:
        key: Secret key bytes, used as-is.
        want_input_digest: Digest the bytes before the keystream is applied.
        want_output_digest: Digest the bytes after the keystream is applied.
        digest_size: Length of each digest in bytes.
        domain: Keystream domain. ``crypt`` uses :attr:`DomainTag.CIPHER`.
    """

    def __init__(
        self,
        key: bytes,
        *,
        want_input_digest: bool = False,
        want_output_digest: bool = False,
        digest_size: int = DIGEST_SIZE,
        domain: DomainTag = DomainTag.CIPHER,
    ) -> None:
        self._cipher = KeystreamCipher(key, domain)
        self._input: Optional[DigestAccumulator] = (
            DigestAccumulator(digest_size) if want_input_digest else None
        )
        self._output: Optional[DigestAccumulator] = (
            DigestAccumulator(digest_size) if want_output_digest else None
        )
        self._finalized = False

    @property
    def processed(self) -> int:
        """Bytes transformed so far."""
        return self._cipher.position

    def transform_chunk(self, buffer) -> None:
        """Transform ``buffer`` in place, feeding the active digests."""

        if self._finalized:
            raise EngineFinalizedError("engine already finalized")
        if self._input is not None:
            self._input.absorb(buffer)
        self._cipher.apply(buffer)
        if self._output is not None:
            self._output.absorb(buffer)

    def finalize(self) -> DigestPair:
        """Consume the engine and return the requested digests."""

        if self._finalized:
            raise EngineFinalizedError("engine already finalized")
        self._finalized = True
        return DigestPair(
            input_digest=self._input.finalize() if self._input is not None else None,
            output_digest=self._output.finalize() if self._output is not None else None,
        )
