"""Tests for runtime configuration loader."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from common.config import BUILTIN_CONFIG, load_config_document, load_runtime_config
from common.errors import BackendError, ErrorCode


def test_builtin_classic_profile_defaults() -> None:
    config = load_runtime_config()
    settings = config.reader_settings()
    assert config.profile.name == "classic"
    assert settings.increment == 1024
    assert (settings.scan, settings.rewind) == ("rescan", "seek")


def test_builtin_streaming_profile() -> None:
    settings = load_runtime_config("streaming").reader_settings()
    assert (settings.scan, settings.rewind) == ("incremental", "retain")


def test_overrides_apply_to_selected_profile() -> None:
    config = load_runtime_config(
        "classic",
        overrides={"global": {"buffer_increment": 64}, "profile": {"scan": "incremental"}},
    )
    assert config.global_settings.buffer_increment == 64
    assert config.profile.scan == "incremental"
    assert config.profile.rewind == "seek"
    assert BUILTIN_CONFIG["profiles"]["classic"]["scan"] == "rescan"


def test_document_lists_all_profiles() -> None:
    document = load_config_document()
    assert document.source == "<builtin>"
    assert set(document.profiles) == {"classic", "streaming"}


def test_missing_profile_raises_backend_error(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        {"version": 1, "global": {}, "profiles": {"only": _profile_payload()}},
    )
    with pytest.raises(BackendError) as exc:
        load_runtime_config("missing", config_path=config_path)
    assert exc.value.code == ErrorCode.CONFIG_ERROR


@pytest.mark.parametrize(
    ("payload", "fragment"),
    [
        ({"version": 1, "global": {"buffer_increment": 0}, "profiles": {"p": {"scan": "rescan", "rewind": "seek"}}}, "buffer_increment"),
        ({"version": 1, "global": {"buffer_increment": "big"}, "profiles": {"p": {"scan": "rescan", "rewind": "seek"}}}, "buffer_increment"),
        ({"version": 1, "global": {}, "profiles": {"p": {"scan": "sideways", "rewind": "seek"}}}, "profiles.p.scan"),
        ({"version": 1, "global": {}, "profiles": {"p": {"scan": "rescan", "rewind": "back"}}}, "profiles.p.rewind"),
        ({"version": 1, "global": {}, "profiles": {"p": {"scan": "rescan"}}}, "missing fields"),
        ({"version": 0, "global": {}, "profiles": {"p": {"scan": "rescan", "rewind": "seek"}}}, "version"),
        ({"version": 1, "profiles": {"p": {"scan": "rescan", "rewind": "seek"}}}, "'global'"),
        ({"version": 1, "global": {}, "profiles": {}}, "'profiles'"),
    ],
)
def test_invalid_documents_rejected(tmp_path: Path, payload, fragment: str) -> None:
    config_path = _write_config(tmp_path, payload)
    with pytest.raises(BackendError) as exc:
        load_runtime_config("p", config_path=config_path)
    assert exc.value.code == ErrorCode.CONFIG_ERROR
    assert fragment in str(exc.value)


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(BackendError) as exc:
        load_runtime_config(config_path=tmp_path / "absent.json")
    assert "not found" in str(exc.value)


def test_invalid_json(tmp_path: Path) -> None:
    config_path = tmp_path / "broken.json"
    config_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(BackendError) as exc:
        load_runtime_config(config_path=config_path)
    assert "not valid JSON" in str(exc.value)


def _profile_payload() -> dict:
    return {"description": "test", "scan": "rescan", "rewind": "seek"}


def _write_config(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path
