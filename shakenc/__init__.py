"""shakenc: cSHAKE256 as a file stream cipher and reproducible random generator."""

__version__ = "0.1.0"

from .config import DomainTag, ShakencConfig
from .engine import DigestPair, Engine
from .modes import VerificationReport, crypt, crypt_stream, rng, rng_stream, rnv, rnv_stream

__all__ = [
    "DigestPair",
    "DomainTag",
    "Engine",
    "ShakencConfig",
    "VerificationReport",
    "crypt",
    "crypt_stream",
    "rng",
    "rng_stream",
    "rnv",
    "rnv_stream",
]
