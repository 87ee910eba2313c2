from __future__ import annotations

import io
import os

import numpy as np
import pytest
from Crypto.Hash import cSHAKE256

from shakenc import modes
from shakenc import DomainTag, crypt, crypt_stream, rng, rng_stream, rnv, rnv_stream
from shakenc.crypto import KeystreamCipher, hash_bytes
from shakenc.errors import DestinationExistsError, LengthMismatchError, StreamIOError


def _crypt_bytes(data: bytes, key: bytes, buffer_size: int) -> bytes:
    sink = io.BytesIO()
    crypt_stream(io.BytesIO(data), sink, len(data), key, buffer_size=buffer_size)
    return sink.getvalue()


def test_crypt_zero_bytes_exposes_keystream(write_file, tmp_path) -> None:
    src = write_file("zeros.bin", bytes(10))
    out = tmp_path / "zeros.enc"
    back = tmp_path / "zeros.dec"

    crypt(src, out, b"abc", buffer_size=4)
    ciphertext = out.read_bytes()
    expected = cSHAKE256.new(data=b"abc", custom=DomainTag.CIPHER.value).read(10)
    assert ciphertext == expected
    assert len(ciphertext) == 10
    assert ciphertext != bytes(10)

    crypt(out, back, b"abc", buffer_size=4)
    assert back.read_bytes() == bytes(10)


@pytest.mark.parametrize("first,second", [(1, 4096), (7, 13), (4999, 5000), (5000, 1 << 20)])
def test_crypt_round_trip_across_buffer_sizes(sample_key, sample_data, first, second) -> None:
    ciphertext = _crypt_bytes(sample_data, sample_key, first)
    assert len(ciphertext) == len(sample_data)
    assert ciphertext == _crypt_bytes(sample_data, sample_key, second)
    assert _crypt_bytes(ciphertext, sample_key, second) == sample_data


def test_crypt_wrong_key_does_not_decrypt(sample_key, sample_data) -> None:
    ciphertext = _crypt_bytes(sample_data, sample_key, 512)
    assert _crypt_bytes(ciphertext, b"not the key", 512) != sample_data


def test_crypt_digests(write_file, tmp_path, sample_key, sample_data) -> None:
    src = write_file("plain.bin", sample_data)
    out = tmp_path / "plain.enc"

    digests = crypt(src, out, sample_key, buffer_size=1000, hash_input=True, hash_output=True)
    assert digests.input_digest == hash_bytes(sample_data)
    assert digests.output_digest == hash_bytes(out.read_bytes())


def test_crypt_empty_file_digests(write_file, tmp_path) -> None:
    src = write_file("empty.bin", b"")
    out = tmp_path / "empty.enc"

    digests = crypt(src, out, b"abc", buffer_size=4, hash_input=True, hash_output=True)
    empty = cSHAKE256.new(custom=DomainTag.HASH.value).read(32)
    assert digests.input_digest == empty
    assert digests.output_digest == empty
    assert out.read_bytes() == b""


def test_crypt_refuses_existing_destination(write_file, sample_key) -> None:
    src = write_file("plain.bin", b"secret")
    out = write_file("existing.bin", b"keep me")
    started = []

    with pytest.raises(DestinationExistsError) as excinfo:
        crypt(src, out, sample_key, on_start=started.append)
    assert excinfo.value.path == os.fspath(out)
    assert started == []
    assert out.read_bytes() == b"keep me"


def test_crypt_missing_input(tmp_path, sample_key) -> None:
    with pytest.raises(StreamIOError):
        crypt(tmp_path / "missing.bin", tmp_path / "out.bin", sample_key)
    assert not (tmp_path / "out.bin").exists()


def test_crypt_stream_length_mismatch(sample_key) -> None:
    with pytest.raises(LengthMismatchError):
        crypt_stream(io.BytesIO(bytes(8)), io.BytesIO(), 9, sample_key, buffer_size=4)


def test_crypt_reports_progress(write_file, tmp_path, sample_key, sample_data) -> None:
    src = write_file("plain.bin", sample_data)
    steps = []
    lengths = []
    crypt(
        src, tmp_path / "out.bin", sample_key,
        buffer_size=1024, progress=steps.append, on_start=lengths.append,
    )
    assert lengths == [len(sample_data)]
    assert sum(steps) == len(sample_data)


def test_rng_is_deterministic(tmp_path) -> None:
    first = tmp_path / "a.bin"
    second = tmp_path / "b.bin"

    assert rng(first, b"k1", 1024, buffer_size=1024) == 1024
    assert rng(second, b"k1", 1024, buffer_size=1024) == 1024
    assert first.read_bytes() == second.read_bytes()
    assert len(first.read_bytes()) == 1024


def test_rng_uses_random_domain() -> None:
    sink = io.BytesIO()
    rng_stream(sink, b"k1", 100, buffer_size=16)
    assert sink.getvalue() == KeystreamCipher(b"k1", DomainTag.RANDOM).squeeze(100)
    assert sink.getvalue() != KeystreamCipher(b"k1", DomainTag.CIPHER).squeeze(100)


def test_rng_independent_of_buffer_size() -> None:
    a, b = io.BytesIO(), io.BytesIO()
    rng_stream(a, b"k1", 1000, buffer_size=3)
    rng_stream(b, b"k1", 1000, buffer_size=1000)
    assert a.getvalue() == b.getvalue()


def test_rng_refuses_existing_destination(write_file) -> None:
    out = write_file("random.bin", b"old")
    with pytest.raises(DestinationExistsError):
        rng(out, b"k1", 10)
    assert out.read_bytes() == b"old"


def test_rng_negative_length(tmp_path) -> None:
    with pytest.raises(ValueError):
        rng(tmp_path / "r.bin", b"k1", -1)
    assert not (tmp_path / "r.bin").exists()


def test_rnv_accepts_rng_output(tmp_path) -> None:
    path = tmp_path / "random.bin"
    rng(path, b"k1", 1024, buffer_size=1024)

    found = []
    report = rnv(path, b"k1", buffer_size=100, on_mismatch=found.append)
    assert report.ok
    assert report.mismatches == 0
    assert report.first_mismatch is None
    assert report.length == 1024
    assert found == []


def test_rnv_wrong_key_reports_most_offsets(tmp_path) -> None:
    path = tmp_path / "random.bin"
    rng(path, b"k1", 4096, buffer_size=1024)

    found = []
    report = rnv(path, b"k2", buffer_size=1000, on_mismatch=found.append)
    assert not report.ok
    assert report.mismatches == len(found)
    assert report.mismatches > 4096 * 0.9
    assert found == sorted(found)
    assert found[0] == report.first_mismatch
    assert all(0 <= offset < 4096 for offset in found)


def test_rnv_reports_every_corrupted_offset() -> None:
    sink = io.BytesIO()
    rng_stream(sink, b"k1", 300, buffer_size=64)
    data = bytearray(sink.getvalue())
    for offset in (0, 63, 64, 299):
        data[offset] ^= 0x80

    found = []
    report = rnv_stream(io.BytesIO(bytes(data)), len(data), b"k1", buffer_size=64, on_mismatch=found.append)
    assert found == [0, 63, 64, 299]
    assert report.mismatches == 4
    assert report.first_mismatch == 0


def test_rnv_rejects_crypt_keystream() -> None:
    cipher = KeystreamCipher(b"k1", DomainTag.CIPHER).squeeze(256)
    report = rnv_stream(io.BytesIO(cipher), 256, b"k1", buffer_size=64)
    assert not report.ok


def test_rnv_length_mismatch() -> None:
    with pytest.raises(LengthMismatchError):
        rnv_stream(io.BytesIO(bytes(10)), 20, b"k1", buffer_size=4)


def test_rnv_scans_offsets_in_bounded_slices(monkeypatch) -> None:
    sink = io.BytesIO()
    rng_stream(sink, b"k1", 4096, buffer_size=4096)
    data = sink.getvalue()

    scanned = []
    flatnonzero = np.flatnonzero

    def recording_flatnonzero(a):
        scanned.append(len(a))
        return flatnonzero(a)

    whole = []
    rnv_stream(io.BytesIO(data), len(data), b"k2", buffer_size=4096, on_mismatch=whole.append)

    monkeypatch.setattr(modes.np, "flatnonzero", recording_flatnonzero)
    sliced = []
    report = rnv_stream(
        io.BytesIO(data), len(data), b"k2",
        buffer_size=4096, on_mismatch=sliced.append, scan_size=512,
    )

    assert sliced == whole
    assert report.mismatches == len(sliced)
    assert report.first_mismatch == sliced[0]
    assert scanned == [512] * 8


def test_rnv_without_callback_stops_scanning_after_first_mismatch(monkeypatch) -> None:
    sink = io.BytesIO()
    rng_stream(sink, b"k1", 1024, buffer_size=256)
    data = bytearray(sink.getvalue())
    data[300] ^= 0x01
    data[900] ^= 0x01

    scanned = []
    flatnonzero = np.flatnonzero

    def recording_flatnonzero(a):
        scanned.append(len(a))
        return flatnonzero(a)

    monkeypatch.setattr(modes.np, "flatnonzero", recording_flatnonzero)
    report = rnv_stream(io.BytesIO(bytes(data)), len(data), b"k1", buffer_size=256, scan_size=64)

    assert report.mismatches == 2
    assert report.first_mismatch == 300
    # only the first slice of chunk 256..511 is walked; chunk 768..1023 is only counted
    assert scanned == [64]


def test_rnv_rejects_non_positive_scan_size() -> None:
    with pytest.raises(ValueError):
        rnv_stream(io.BytesIO(), 0, b"k1", scan_size=0)
