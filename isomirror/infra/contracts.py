from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol

from .models import ReleaseRecord


class ReleaseStore(Protocol):
    """External store of versioned releases.

    The store is authoritative for idempotency: create() must reject a version key
    that already has a release, independently of any earlier get() by the caller.
    """

    def get(self, version_key: str) -> Optional[ReleaseRecord]:
        raise NotImplementedError

    def create(self, *, version_key: str, title: str, notes: str, assets: List[Path]) -> ReleaseRecord:
        raise NotImplementedError
