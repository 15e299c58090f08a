from __future__ import annotations

import gzip
import hashlib
from pathlib import Path

import pytest

from _testutil import ensure_repo_on_path

ensure_repo_on_path()

from isomirror.artifacts.checksums import generate_checksums, parse_sidecar  # noqa: E402
from isomirror.artifacts.transform import decompress_gzip  # noqa: E402
from isomirror.infra.errors import TransformError  # noqa: E402

PAYLOAD = b"ISO9660" * 4096


def test_decompress_consumes_input_and_reports_size(tmp_path: Path) -> None:
    src = tmp_path / "img.iso.gz"
    src.write_bytes(gzip.compress(PAYLOAD))

    result = decompress_gzip(src)

    assert result.path == tmp_path / "img.iso"
    assert result.path.read_bytes() == PAYLOAD
    assert result.size_bytes == len(PAYLOAD)
    assert not src.exists()


def test_corrupt_gzip_leaves_no_output(tmp_path: Path) -> None:
    src = tmp_path / "img.iso.gz"
    src.write_bytes(b"definitely not gzip")

    with pytest.raises(TransformError):
        decompress_gzip(src)
    assert not (tmp_path / "img.iso").exists()


def test_empty_payload_fails_post_condition(tmp_path: Path) -> None:
    src = tmp_path / "img.iso.gz"
    src.write_bytes(gzip.compress(b""))

    with pytest.raises(TransformError, match="empty"):
        decompress_gzip(src)


def test_rejects_non_gz_input(tmp_path: Path) -> None:
    src = tmp_path / "img.iso"
    src.write_bytes(PAYLOAD)
    with pytest.raises(TransformError):
        decompress_gzip(src)


def test_generated_checksums_round_trip(tmp_path: Path) -> None:
    final = tmp_path / "img.iso"
    final.write_bytes(PAYLOAD)

    sums = generate_checksums(final)

    assert sums.sha256_path == tmp_path / "img.iso.sha256"
    assert sums.md5_path == tmp_path / "img.iso.md5"

    sha_text = sums.sha256_path.read_text(encoding="utf-8")
    md5_text = sums.md5_path.read_text(encoding="utf-8")
    assert sha_text == f"{hashlib.sha256(PAYLOAD).hexdigest()}  img.iso\n"
    assert md5_text == f"{hashlib.md5(PAYLOAD).hexdigest()}  img.iso\n"

    # Re-read from disk and recompute over the actual final bytes.
    assert parse_sidecar(sha_text)["img.iso"] == hashlib.sha256(final.read_bytes()).hexdigest()
    assert parse_sidecar(md5_text)["img.iso"] == sums.md5
