from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..utils.fs import atomic_write_text
from ..utils.hashing import md5_file, sha256_file

HEX_LENGTHS = {"sha256": 64, "md5": 32}

# sha256sum / md5sum output: "<hex>  <name>" (text mode) or "<hex> *<name>" (binary mode).
_GNU_LINE_RE = re.compile(r"^(?P<hex>[0-9A-Fa-f]+)\s+\*?(?P<name>.+?)\s*$")
# BSD / `sha256sum --tag` output: "SHA256 (<name>) = <hex>".
_BSD_LINE_RE = re.compile(r"^(?P<algo>[A-Za-z0-9-]+)\s*\((?P<name>.+)\)\s*=\s*(?P<hex>[0-9A-Fa-f]+)\s*$")
_BARE_HEX_RE = re.compile(r"^(?P<hex>[0-9A-Fa-f]+)\s*$")


@dataclass(frozen=True)
class GeneratedChecksums:
    sha256: str
    md5: str
    sha256_path: Path
    md5_path: Path


def format_sidecar_line(digest: str, filename: str) -> str:
    """One line in coreutils format so `sha256sum -c` / `md5sum -c` accept it."""
    return f"{digest}  {filename}\n"


def parse_sidecar(text: str) -> Dict[str, str]:
    """Map file name -> lowercase hex digest. A bare digest is keyed by "".

    Blank lines and '#' comments are ignored; unrecognised lines are skipped.
    """
    out: Dict[str, str] = {}
    for raw in (text or "").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = _BSD_LINE_RE.match(line)
        if m:
            out[m.group("name").strip()] = m.group("hex").lower()
            continue
        m = _BARE_HEX_RE.match(line)
        if m:
            out[""] = m.group("hex").lower()
            continue
        m = _GNU_LINE_RE.match(line)
        if m:
            out[m.group("name").strip()] = m.group("hex").lower()
    return out


def expected_digest_for(entries: Dict[str, str], filename: str) -> Optional[str]:
    """Pick the digest that covers filename.

    An entry naming the file wins; otherwise a sidecar with exactly one entry is
    taken to describe the file it sits next to.
    """
    if filename in entries:
        return entries[filename]
    for name, digest in entries.items():
        if name and Path(name).name == filename:
            return digest
    if len(entries) == 1:
        return next(iter(entries.values()))
    return None


def generate_checksums(final_path: Path) -> GeneratedChecksums:
    """Write <final>.sha256 and <final>.md5 next to the final artifact."""
    final_path = Path(final_path)
    sha = sha256_file(final_path)
    md5 = md5_file(final_path)

    sha_path = final_path.with_name(final_path.name + ".sha256")
    md5_path = final_path.with_name(final_path.name + ".md5")
    atomic_write_text(sha_path, format_sidecar_line(sha, final_path.name))
    atomic_write_text(md5_path, format_sidecar_line(md5, final_path.name))

    print("[checksums] Generated checksums:")
    print(f"[checksums] SHA256: {sha}  {final_path.name}")
    print(f"[checksums] MD5: {md5}  {final_path.name}")
    return GeneratedChecksums(sha256=sha, md5=md5, sha256_path=sha_path, md5_path=md5_path)
