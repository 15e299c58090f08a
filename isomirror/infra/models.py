from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Tuple

COMPRESSION_SUFFIX = ".gz"

AttemptResult = Literal["success", "failure"]
RunOutcome = Literal["published", "skipped", "failed"]


@dataclass(frozen=True)
class ArtifactReference:
    """Names and URLs derived from one matched listing filename.

    Built once per run from discovery output and never mutated afterwards.
    """

    raw_filename: str
    version: str
    compressed_name: str
    final_name: str
    checksum_sidecar_name: str
    download_url: str
    checksum_url: str

    @classmethod
    def from_filename(cls, filename: str, *, version: str, base_url: str) -> "ArtifactReference":
        name = str(filename).strip()
        if not name.endswith(COMPRESSION_SUFFIX):
            raise ValueError(f"Artifact filename lacks {COMPRESSION_SUFFIX} suffix: {name}")
        final_name = name[: -len(COMPRESSION_SUFFIX)]
        base = str(base_url).rstrip("/")
        return cls(
            raw_filename=name,
            version=version,
            compressed_name=name,
            final_name=final_name,
            checksum_sidecar_name=final_name + ".sha256",
            download_url=f"{base}/{name}",
            checksum_url=f"{base}/{name}.sha256",
        )

    @property
    def md5_sidecar_name(self) -> str:
        return self.final_name + ".md5"

    @property
    def fetched_sidecar_name(self) -> str:
        # Upstream sidecar covers the compressed file, not the final artifact.
        return self.compressed_name + ".sha256"


@dataclass(frozen=True)
class ReleaseRecord:
    """A published release. Identity is version_key."""

    version_key: str
    title: str
    notes: str = ""
    assets: Tuple[str, ...] = field(default_factory=tuple)
    url: str = ""
    created_at: str = ""


@dataclass(frozen=True)
class DownloadAttempt:
    url: str
    attempt_number: int
    max_attempts: int
    result: AttemptResult
    error: str = ""


@dataclass(frozen=True)
class RunSummary:
    """Human-facing facts about one run. Not consumed by other components."""

    outcome: RunOutcome
    version: str = ""
    final_name: str = ""
    release_url: str = ""
    error: str = ""

    def as_facts(self) -> Tuple[Tuple[str, str], ...]:
        return (
            ("outcome", self.outcome),
            ("version", self.version),
            ("final_name", self.final_name),
            ("release_url", self.release_url),
            ("error", self.error),
        )
