from __future__ import annotations

import re
from typing import List, Pattern

from ..infra.errors import DiscoveryError

VERSION_GROUP = "version"


def build_artifact_pattern(
    *,
    product: str,
    edition: str = "CE",
    channel: str = "RELEASE",
    arch: str = "amd64",
    extension: str = "iso",
) -> Pattern[str]:
    """Compile the listing pattern <product>-<edition>-<M>.<m>.<p>-<channel>-<arch>.<ext>.gz.

    The dotted version is captured in the named group "version".
    """
    return re.compile(
        re.escape(product)
        + "-"
        + re.escape(edition)
        + r"-(?P<version>\d+\.\d+\.\d+)-"
        + re.escape(channel)
        + "-"
        + re.escape(arch)
        + r"\."
        + re.escape(extension)
        + r"\.gz"
    )


def extract_candidates(listing_body: str, pattern: Pattern[str]) -> List[str]:
    """Return every artifact filename in a directory listing, first-seen order, no duplicates.

    Listings are usually HTML, so a single file shows up in both the href and the
    link text; duplicates are dropped.

    Raises:
        DiscoveryError: when nothing in the listing matches.
    """
    seen = set()
    out: List[str] = []
    for m in pattern.finditer(listing_body or ""):
        name = m.group(0)
        if name in seen:
            continue
        seen.add(name)
        out.append(name)
    if not out:
        raise DiscoveryError(f"no candidate artifact found in listing (pattern {pattern.pattern})")
    return out
