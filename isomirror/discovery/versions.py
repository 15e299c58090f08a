from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable, Pattern, Tuple

from ..infra.errors import DiscoveryError
from ..infra.models import ArtifactReference
from .listing import VERSION_GROUP

Version = Tuple[int, ...]


def parse_version(text: str) -> Version:
    """Parse "2.7.10" into (2, 7, 10)."""
    parts = str(text).strip().split(".")
    out = []
    for p in parts:
        if not p.isdigit():
            raise ValueError(f"Invalid version component {p!r} in {text!r}")
        out.append(int(p))
    return tuple(out)


def compare_versions(a: Version, b: Version) -> int:
    """Component-wise numeric comparison; the shorter tuple is padded with zeros."""
    width = max(len(a), len(b))
    pa = tuple(a) + (0,) * (width - len(a))
    pb = tuple(b) + (0,) * (width - len(b))
    if pa < pb:
        return -1
    if pa > pb:
        return 1
    return 0


def _version_of(filename: str, pattern: Pattern[str]) -> str:
    m = pattern.search(filename)
    if m is None:
        raise DiscoveryError(f"Filename does not match artifact pattern: {filename}")
    return m.group(VERSION_GROUP)


def select_latest(filenames: Iterable[str], pattern: Pattern[str], *, base_url: str) -> ArtifactReference:
    """Pick the filename with the highest version.

    Equal versions are broken by the lexicographically greatest filename, so the
    result never depends on listing order.
    """
    candidates = []
    for name in filenames:
        version = _version_of(name, pattern)
        candidates.append((parse_version(version), name, version))
    if not candidates:
        raise DiscoveryError("no candidate artifact found")

    def _cmp(x, y) -> int:
        c = compare_versions(x[0], y[0])
        if c:
            return c
        return (x[1] > y[1]) - (x[1] < y[1])

    _, name, version = max(candidates, key=cmp_to_key(_cmp))
    return ArtifactReference.from_filename(name, version=version, base_url=base_url)
