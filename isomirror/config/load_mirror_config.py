from __future__ import annotations

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..infra.errors import ValidationError
from ..utils.yamlio import read_yaml
from .validate_mirror_config import validate_mirror_config

DEFAULT_CONFIG_PATH = Path(__file__).resolve().with_name("mirror_config.yml")

# Environment overrides applied on top of the YAML file, before CLI overrides.
ENV_OVERRIDES = {
    "MIRROR_BASE_URL": ("base_url",),
    "MIRROR_WORK_DIR": ("work_dir",),
    "MIRROR_RELEASE_STORE_KIND": ("release_store", "kind"),
    "MIRROR_RELEASE_STORE_DIR": ("release_store", "settings", "base_dir"),
}


@dataclass(frozen=True)
class ArtifactSpec:
    product: str
    edition: str = "CE"
    channel: str = "RELEASE"
    arch: str = "amd64"
    extension: str = "iso"


@dataclass(frozen=True)
class FetchSettings:
    max_attempts: int = 3
    delay_seconds: float = 10.0
    timeout_seconds: float = 120.0
    transport_retries: int = 3
    transport_backoff_seconds: float = 5.0


@dataclass(frozen=True)
class ReleaseStoreSpec:
    kind: str
    settings: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class MirrorConfig:
    """Everything a run needs. Passed explicitly into run_once()."""

    base_url: str
    artifact: ArtifactSpec
    fetch: FetchSettings
    release_store: ReleaseStoreSpec
    title_template: str = "{product} {edition} {version}"
    source_label: str = "upstream mirror"
    work_dir: Path = Path(".mirror-work")

    def release_title(self, version: str) -> str:
        return self.title_template.format(
            product=self.artifact.product,
            edition=self.artifact.edition,
            version=version,
        )


def resolve_config_path(cli_path: Optional[str] = None) -> Path:
    """Resolve the mirror config YAML path.

    Precedence:
      1) CLI flag --config
      2) MIRROR_CONFIG
      3) the packaged mirror_config.yml
    """
    if cli_path and str(cli_path).strip():
        return Path(str(cli_path).strip()).expanduser().resolve()

    env_path = str(os.environ.get("MIRROR_CONFIG", "") or "").strip()
    if env_path:
        return Path(env_path).expanduser().resolve()

    return DEFAULT_CONFIG_PATH


def _set_path(data: Dict[str, Any], keys: tuple, value: Any) -> None:
    cur = data
    for k in keys[:-1]:
        nxt = cur.get(k)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[k] = nxt
        cur = nxt
    cur[keys[-1]] = value


def apply_overrides(raw: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of raw with env and explicit overrides applied.

    overrides uses the env var names of ENV_OVERRIDES as keys; empty values are ignored.
    """
    data = copy.deepcopy(dict(raw))
    for env_name, keys in ENV_OVERRIDES.items():
        env_val = str(os.environ.get(env_name, "") or "").strip()
        if env_val:
            _set_path(data, keys, env_val)
    for env_name, value in overrides.items():
        if env_name not in ENV_OVERRIDES:
            raise ValidationError(f"Unknown config override: {env_name}")
        if value is None or str(value).strip() == "":
            continue
        _set_path(data, ENV_OVERRIDES[env_name], str(value).strip())
    return data


def config_from_mapping(data: Mapping[str, Any]) -> MirrorConfig:
    validate_mirror_config(dict(data))

    art = data["artifact"]
    fetch = data["fetch"]
    store = data["release_store"]
    release = data["release"]

    return MirrorConfig(
        base_url=str(data["base_url"]).rstrip("/"),
        artifact=ArtifactSpec(
            product=str(art["product"]),
            edition=str(art["edition"]),
            channel=str(art["channel"]),
            arch=str(art["arch"]),
            extension=str(art["extension"]),
        ),
        fetch=FetchSettings(
            max_attempts=int(fetch["max_attempts"]),
            delay_seconds=float(fetch["delay_seconds"]),
            timeout_seconds=float(fetch.get("timeout_seconds", FetchSettings.timeout_seconds)),
            transport_retries=int(fetch.get("transport_retries", FetchSettings.transport_retries)),
            transport_backoff_seconds=float(
                fetch.get("transport_backoff_seconds", FetchSettings.transport_backoff_seconds)
            ),
        ),
        release_store=ReleaseStoreSpec(kind=str(store["kind"]), settings=dict(store.get("settings") or {})),
        title_template=str(release["title_template"]),
        source_label=str(release["source_label"]),
        work_dir=Path(str(data["work_dir"])),
    )


def load_mirror_config(cli_path: Optional[str] = None, overrides: Optional[Mapping[str, Any]] = None) -> MirrorConfig:
    """Load, override and validate the mirror config.

    Raises:
        FileNotFoundError: if the config file is missing.
        ValidationError: if the resulting config is invalid.
    """
    path = resolve_config_path(cli_path)
    if not path.exists():
        raise FileNotFoundError(f"Missing mirror config: {path}")

    raw = read_yaml(path)
    data = apply_overrides(raw, overrides or {})
    return config_from_mapping(data)
