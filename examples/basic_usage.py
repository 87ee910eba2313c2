#!/usr/bin/env python3
"""Basic shakenc example.

This example encrypts a file, decrypts it again, and then generates and
verifies a reproducible random file, all through the library API.
"""

import os
import sys
import tempfile
from pathlib import Path

# Add the parent directory to the path so we can import shakenc
sys.path.insert(0, str(Path(__file__).parent.parent))

from shakenc import ShakencConfig, crypt, rng, rnv


def basic_example(workdir: Path) -> None:
    """Run a basic example of shakenc usage."""
    print("shakenc basic example")
    print("=" * 40)

    key = b"example key, do not reuse"
    config = ShakencConfig(buffer_mib=1)

    # Example 1: Encrypt with both digests
    print("\n1. Encrypting a file...")
    plain = workdir / "plain.bin"
    plain.write_bytes(os.urandom(3 * 1024 * 1024 + 17))
    digests = crypt(
        plain, workdir / "plain.enc", key,
        buffer_size=config.buffer_size, hash_input=True, hash_output=True,
    )
    print(f"   {digests}".replace("\n", "\n   "))

    # Example 2: Decrypt; the digests swap sides
    print("\n2. Decrypting it again...")
    digests_back = crypt(
        workdir / "plain.enc", workdir / "plain.dec", key,
        buffer_size=config.buffer_size, hash_input=True, hash_output=True,
    )
    print(f"   round trip ok: {(workdir / 'plain.dec').read_bytes() == plain.read_bytes()}")
    print(f"   digests swapped: {digests_back.input_digest == digests.output_digest}")

    # Example 3: Reproducible random bytes and self-check
    print("\n3. Generating and verifying random bytes...")
    rng(workdir / "random.bin", key, 2 * 1024 * 1024, buffer_size=config.buffer_size)
    good = rnv(workdir / "random.bin", key, buffer_size=config.buffer_size)
    bad = rnv(workdir / "random.bin", b"another key", buffer_size=config.buffer_size)
    print(f"   same key: {good.mismatches} mismatches")
    print(f"   other key: {bad.mismatches} of {bad.length} bytes differ")


if __name__ == "__main__":
    with tempfile.TemporaryDirectory() as tmp:
        basic_example(Path(tmp))
