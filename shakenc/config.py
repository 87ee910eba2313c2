"""Configuration management for shakenc."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import logging
import os


MIB = 1048576
DIGEST_SIZE = 32
DEFAULT_BUFFER_MIB = 16


class DomainTag(Enum):
    """cSHAKE256 customization strings.

    Each use of the XOF is bound to exactly one of these, so the cipher
    keystream, the random generator and the file digests are independent
    even when they are fed identical bytes.
    """

    CIPHER = b"__shakenc__file-stream-cipher"
    HASH = b"__shakenc__file-hash"
    RANDOM = b"__shakenc__random-generator"


@dataclass
class ShakencConfig:
    """Runtime settings shared by the CLI and the mode controllers."""

    buffer_mib: int = DEFAULT_BUFFER_MIB
    digest_size: int = DIGEST_SIZE
    log_level: str = "WARNING"

    @property
    def buffer_size(self) -> int:
        """Chunk capacity in bytes."""
        return self.buffer_mib * MIB

    @classmethod
    def from_environment(cls, environ: Optional[dict] = None) -> ShakencConfig:
        """
        Build a configuration, overriding defaults from the environment.

        Recognised variables are ``SHAKENC_BUFFER_MIB``,
        ``SHAKENC_DIGEST_SIZE`` and ``SHAKENC_LOG_LEVEL``.

        Args:
            environ: Mapping to read instead of :data:`os.environ`.

        Raises:
            ValueError: If ``SHAKENC_BUFFER_MIB`` or ``SHAKENC_DIGEST_SIZE``
                is not an integer.
        """
        env = os.environ if environ is None else environ
        config = cls()

        buffer_mib = _int_from(env, "SHAKENC_BUFFER_MIB")
        if buffer_mib is not None:
            config.buffer_mib = buffer_mib

        digest_size = _int_from(env, "SHAKENC_DIGEST_SIZE")
        if digest_size is not None:
            config.digest_size = digest_size

        log_level = env.get("SHAKENC_LOG_LEVEL")
        if log_level:
            config.log_level = log_level.upper()

        return config

    def validate(self) -> List[str]:
        """
        Validate current configuration.

        Returns:
            List of validation errors. Empty if valid.
        """
        errors = []

        if self.buffer_mib <= 0:
            errors.append("buffer_mib must be positive")

        if self.digest_size <= 0:
            errors.append("digest_size must be positive")

        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"unknown log level: {self.log_level}")

        return errors


def _int_from(env, name: str) -> Optional[int]:
    value = env.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e
