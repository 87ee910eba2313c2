"""cSHAKE256 wrapper.

Thin adapter over :pypi:`pycryptodome`'s ``cSHAKE256``. The domain tag is the
customization string and the key, when there is one, is absorbed as the first
message bytes.
"""

from __future__ import annotations

from Crypto.Hash import cSHAKE256

from ..config import DomainTag


def new_xof(domain: DomainTag, key: bytes = b""):
    """Create a cSHAKE256 state bound to ``domain`` with ``key`` absorbed.

    Args:
        domain: Customization string selecting the use of the XOF.
        key: Secret key bytes. Empty for keyless uses such as digests.

    Returns:
        A pycryptodome ``cSHAKE_XOF`` object. ``update`` may be called until
        the first ``read``; successive reads continue the same output stream.
    """

    if not isinstance(key, (bytes, bytearray)):
        raise TypeError("key must be bytes")

    xof = cSHAKE256.new(custom=domain.value)
    if key:
        xof.update(bytes(key))
    return xof
