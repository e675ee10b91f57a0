"""Helpers for loading runtime configuration profiles."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import BackendError, ErrorCode
from .models import GlobalSettings, ProfileSettings, RuntimeConfig

DEFAULT_PROFILE = "classic"
ALLOWED_SCAN_MODES = {"rescan", "incremental"}
ALLOWED_REWIND_MODES = {"seek", "retain"}

BUILTIN_CONFIG: Dict[str, Any] = {
    "version": 1,
    "global": {"buffer_increment": 1024},
    "profiles": {
        "classic": {
            "description": "Rescan the whole buffer on growth and seek back over unread bytes",
            "scan": "rescan",
            "rewind": "seek",
        },
        "streaming": {
            "description": "Scan only new bytes and keep unread bytes between calls",
            "scan": "incremental",
            "rewind": "retain",
        },
    },
}


@dataclass(slots=True)
class ConfigDocument:
    source: str
    version: int
    global_settings: GlobalSettings
    profiles: Dict[str, ProfileSettings]


def load_runtime_config(
    profile: str = DEFAULT_PROFILE,
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> RuntimeConfig:
    """Load the configuration document, validate it, and resolve a specific profile."""

    document = load_config_document(
        profile_name=profile,
        config_path=config_path,
        overrides=overrides,
    )
    return RuntimeConfig(global_settings=document.global_settings, profile=document.profiles[profile])


def load_config_document(
    *,
    profile_name: Optional[str] = None,
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> ConfigDocument:
    if config_path is None:
        source = "<builtin>"
        raw: Mapping[str, Any] = BUILTIN_CONFIG
    else:
        source = str(config_path)
        raw = _read_config_json(config_path)
    if not isinstance(raw, Mapping):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config in {source} must be a JSON object")

    version = _require_positive_int(raw.get("version"), "version", source)
    global_section = raw.get("global")
    if not isinstance(global_section, Mapping):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"'global' section missing in {source}")

    overrides = overrides or {}
    global_data = {**global_section, **(overrides.get("global") or {})}
    global_settings = _build_global_settings(global_data, source)

    profiles_section = raw.get("profiles")
    if not isinstance(profiles_section, Mapping) or not profiles_section:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"'profiles' section missing in {source}")

    profile_overrides = overrides.get("profile") or {}
    profiles: Dict[str, ProfileSettings] = {}
    for name, profile_data in profiles_section.items():
        if not isinstance(profile_data, Mapping):
            raise BackendError(
                ErrorCode.CONFIG_ERROR,
                f"Profile '{name}' must be an object in {source}",
            )
        merged = dict(profile_data)
        if profile_name and name == profile_name and profile_overrides:
            merged = {**merged, **profile_overrides}
        profiles[name] = _build_profile_settings(name, merged, source)

    if profile_name and profile_name not in profiles:
        available = ", ".join(sorted(profiles))
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{profile_name}' not found in {source}. Available: {available}",
        )

    return ConfigDocument(
        source=source,
        version=version,
        global_settings=global_settings,
        profiles=profiles,
    )


# ---------------------------------------------------------------------------
# Internal helpers


def _read_config_json(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' not found") from exc
    except json.JSONDecodeError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' is not valid JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise BackendError(ErrorCode.CONFIG_ERROR, f"Config file '{path}' is not valid UTF-8: {exc}") from exc
    except OSError as exc:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Config file '{path}' cannot be read: {exc.strerror or exc}",
        ) from exc


def _build_global_settings(data: Mapping[str, Any], source: str) -> GlobalSettings:
    buffer_increment = _require_positive_int(
        data.get("buffer_increment", GlobalSettings().buffer_increment),
        "global.buffer_increment",
        source,
    )
    return GlobalSettings(buffer_increment=buffer_increment)


def _build_profile_settings(name: str, data: Mapping[str, Any], source: str) -> ProfileSettings:
    prefix = f"profiles.{name}"
    missing = [field for field in ("scan", "rewind") if field not in data]
    if missing:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Profile '{name}' missing fields {missing} in {source}",
        )
    description = data.get("description", "")
    if not isinstance(description, str):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{prefix}.description must be a string in {source}")
    return ProfileSettings(
        name=name,
        description=description.strip(),
        scan=_require_choice(data.get("scan"), ALLOWED_SCAN_MODES, f"{prefix}.scan", source),
        rewind=_require_choice(data.get("rewind"), ALLOWED_REWIND_MODES, f"{prefix}.rewind", source),
    )


def _require_choice(value: Any, allowed: set, field: str, source: str) -> Any:
    if not isinstance(value, str) or value.strip().lower() not in allowed:
        options = ", ".join(sorted(allowed))
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"Unsupported {field} '{value}' in {source}. Allowed: {options}",
        )
    return value.strip().lower()


def _require_positive_int(value: Any, field: str, source: str) -> int:
    if isinstance(value, bool):
        raise BackendError(ErrorCode.CONFIG_ERROR, f"{field} must be an integer in {source}")
    try:
        num = int(value)
    except (TypeError, ValueError) as exc:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be an integer in {source}",
        ) from exc
    if num <= 0:
        raise BackendError(
            ErrorCode.CONFIG_ERROR,
            f"{field} must be greater than zero in {source}",
        )
    return num
