"""Mirror configuration.

A YAML file (packaged default: mirror_config.yml) validated with jsonschema and
loaded into a frozen MirrorConfig that callers pass explicitly into the pipeline.
"""
from __future__ import annotations

from .load_mirror_config import (
    DEFAULT_CONFIG_PATH,
    ArtifactSpec,
    FetchSettings,
    MirrorConfig,
    ReleaseStoreSpec,
    config_from_mapping,
    load_mirror_config,
    resolve_config_path,
)
from .validate_mirror_config import ALLOWED_RELEASE_STORE_KINDS, validate_mirror_config

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ALLOWED_RELEASE_STORE_KINDS",
    "ArtifactSpec",
    "FetchSettings",
    "MirrorConfig",
    "ReleaseStoreSpec",
    "config_from_mapping",
    "load_mirror_config",
    "resolve_config_path",
    "validate_mirror_config",
]
