from __future__ import annotations

import string
from typing import Any, Dict, Tuple

import jsonschema

from ..infra.errors import ValidationError

# Release store kinds are strict. Any unknown kind is rejected.
ALLOWED_RELEASE_STORE_KINDS: Tuple[str, ...] = ("github_release", "local_fs")
TITLE_TEMPLATE_FIELDS: Tuple[str, ...] = ("product", "edition", "version")


def _non_empty_str() -> Dict[str, Any]:
    return {"type": "string", "minLength": 1}


def mirror_config_schema() -> Dict[str, Any]:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "required": ["base_url", "artifact", "fetch", "release_store", "release", "work_dir"],
        "properties": {
            "base_url": {"type": "string", "pattern": "^https?://"},
            "artifact": {
                "type": "object",
                "required": ["product", "edition", "channel", "arch", "extension"],
                "properties": {
                    "product": _non_empty_str(),
                    "edition": _non_empty_str(),
                    "channel": _non_empty_str(),
                    "arch": _non_empty_str(),
                    "extension": _non_empty_str(),
                },
                "additionalProperties": False,
            },
            "fetch": {
                "type": "object",
                "required": ["max_attempts", "delay_seconds"],
                "properties": {
                    "max_attempts": {"type": "integer", "minimum": 1},
                    "delay_seconds": {"type": "number", "minimum": 0},
                    "timeout_seconds": {"type": "number", "exclusiveMinimum": 0},
                    "transport_retries": {"type": "integer", "minimum": 0},
                    "transport_backoff_seconds": {"type": "number", "minimum": 0},
                },
                "additionalProperties": False,
            },
            "release_store": {
                "type": "object",
                "required": ["kind"],
                "properties": {
                    "kind": {"type": "string", "enum": list(ALLOWED_RELEASE_STORE_KINDS)},
                    "settings": {"type": "object"},
                },
                "additionalProperties": False,
            },
            "release": {
                "type": "object",
                "required": ["title_template", "source_label"],
                "properties": {
                    "title_template": _non_empty_str(),
                    "source_label": _non_empty_str(),
                },
                "additionalProperties": False,
            },
            "work_dir": _non_empty_str(),
        },
        "additionalProperties": False,
    }


def _check_title_template(template: str) -> None:
    try:
        fields = [f for _, f, _, _ in string.Formatter().parse(template) if f is not None]
    except ValueError as e:
        raise ValidationError(f"Invalid mirror config at release/title_template: {e}") from e
    for f in fields:
        if f not in TITLE_TEMPLATE_FIELDS:
            allowed = ", ".join("{" + n + "}" for n in TITLE_TEMPLATE_FIELDS)
            raise ValidationError(
                f"Invalid mirror config at release/title_template: unknown placeholder {{{f}}} (allowed: {allowed})"
            )


def validate_mirror_config(cfg: Dict[str, Any]) -> None:
    """Validate a parsed mirror config mapping.

    Raises:
        ValidationError: on missing keys, unknown keys, wrong types, or unknown
        title_template placeholders. The message names the offending path.
    """
    try:
        jsonschema.validate(instance=cfg, schema=mirror_config_schema())
    except jsonschema.ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ValidationError(f"Invalid mirror config at {where}: {e.message}") from e
    _check_title_template(str(cfg["release"]["title_template"]))
