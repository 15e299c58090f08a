from __future__ import annotations

from datetime import datetime

from ..infra.models import ArtifactReference
from ..utils.time import utc_stamp


def render_release_notes(
    ref: ArtifactReference,
    *,
    heading: str,
    source_label: str,
    source_url: str,
    now: datetime,
) -> str:
    """Markdown body for a mirrored release: files, verification commands, provenance."""
    sha_file = ref.checksum_sidecar_name
    md5_file = ref.md5_sidecar_name
    lines = [
        f"## {heading}",
        "",
        f"This is an automated release of {heading}.",
        "",
        "### Files included:",
        f"- **{ref.final_name}** - Main image",
        f"- **{sha_file}** - SHA256 checksum",
        f"- **{md5_file}** - MD5 checksum",
        "",
        "### Verification:",
        "```bash",
        "# Verify SHA256",
        f"sha256sum -c {sha_file}",
        "",
        "# Verify MD5",
        f"md5sum -c {md5_file}",
        "```",
        "",
        "### Source:",
        f"Downloaded from: [{source_label}]({source_url})",
        f"Upstream file: `{ref.raw_filename}` (SHA256 verified against `{ref.fetched_sidecar_name}`)",
        "",
        "---",
        f"*Automated release created on {utc_stamp(now)}*",
    ]
    return "\n".join(lines) + "\n"
