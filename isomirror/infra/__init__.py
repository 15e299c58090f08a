from __future__ import annotations

from .models import (
    ArtifactReference,
    DownloadAttempt,
    ReleaseRecord,
    RunSummary,
)

from .errors import (
    MirrorError,
    ValidationError,
    DiscoveryError,
    FetchError,
    IntegrityError,
    TransformError,
    RegistryError,
    PublishError,
    ConflictError,
)

from .contracts import ReleaseStore

__all__ = [
    "ArtifactReference",
    "DownloadAttempt",
    "ReleaseRecord",
    "RunSummary",
    "MirrorError",
    "ValidationError",
    "DiscoveryError",
    "FetchError",
    "IntegrityError",
    "TransformError",
    "RegistryError",
    "PublishError",
    "ConflictError",
    "ReleaseStore",
]
