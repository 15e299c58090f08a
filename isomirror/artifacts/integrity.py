from __future__ import annotations

from pathlib import Path

from ..infra.errors import IntegrityError
from ..utils.hashing import file_digest
from .checksums import HEX_LENGTHS, expected_digest_for, parse_sidecar


def verify_sidecar(artifact_path: Path, sidecar_path: Path, algorithm: str = "sha256") -> str:
    """Check artifact_path against the digest published in sidecar_path.

    Returns the verified hex digest.

    Raises:
        IntegrityError: if the sidecar is unreadable, carries no usable digest for
        the artifact, or the recomputed digest differs.
    """
    artifact_path = Path(artifact_path)
    sidecar_path = Path(sidecar_path)
    print(f"[verify] Verifying {artifact_path.name} against {sidecar_path.name}")

    try:
        text = sidecar_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise IntegrityError(f"Cannot read checksum sidecar {sidecar_path}: {e}") from e

    expected = expected_digest_for(parse_sidecar(text), artifact_path.name)
    if expected is None:
        raise IntegrityError(f"No {algorithm} entry for {artifact_path.name} in {sidecar_path.name}")

    want_len = HEX_LENGTHS.get(algorithm)
    if want_len is not None and len(expected) != want_len:
        raise IntegrityError(f"Malformed {algorithm} digest in {sidecar_path.name}: {expected!r}")

    actual = file_digest(artifact_path, algorithm)
    if actual != expected:
        print(f"[verify] Integrity check failed for {artifact_path.name}")
        raise IntegrityError(
            f"{algorithm} mismatch for {artifact_path.name}: expected {expected}, got {actual}"
        )

    print(f"[verify] {artifact_path.name}: OK")
    return actual
