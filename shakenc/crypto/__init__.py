"""Keystream and digest primitives.

Modules in this package are *thin* wrappers around cSHAKE256 from
:pypi:`pycryptodome`. The cipher and the digests share the primitive and are
kept apart by the customization strings in :class:`shakenc.config.DomainTag`.
"""

from __future__ import annotations

from .digest import DigestAccumulator, hash_bytes
from .keystream import KeystreamCipher
from .xof import new_xof

__all__ = [
    "DigestAccumulator",
    "KeystreamCipher",
    "hash_bytes",
    "new_xof",
]
