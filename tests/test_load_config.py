"""Tests for configuration loading and validation."""

import json
import logging
from pathlib import Path

import pytest

from dts_surface.errors import ConfigurationError
from dts_surface.generator_config import DEFAULT_BANNER, DEFAULT_MAX_INVOCATIONS
from dts_surface.load_config import load_config


def _write_config(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "api-config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_config_defaults(tmp_path: Path) -> None:
    """Verify that omitted keys take their default values."""
    config = load_config(_write_config(tmp_path, {"index": "index.d.ts"}))
    assert config.root == ""
    assert config.output is None
    assert config.drop_types == frozenset()
    assert config.rename_types == {}
    assert config.flatten_enums is False
    assert config.banner == DEFAULT_BANNER
    assert config.max_invocations == DEFAULT_MAX_INVOCATIONS


def test_load_config_paths_relative_to_config_dir(tmp_path: Path) -> None:
    """Verify that every configured path resolves from the config directory."""
    config = load_config(
        _write_config(
            tmp_path,
            {
                "root": "types",
                "index": "index.d.ts",
                "output": "dist/api.d.ts",
                "package": "package.json",
                "include": ["header.d.ts"],
            },
        )
    )
    assert config.index_path == tmp_path / "types" / "index.d.ts"
    assert config.output_path == tmp_path / "dist" / "api.d.ts"
    assert config.package_path == tmp_path / "package.json"
    assert config.include_paths == [tmp_path / "header.d.ts"]


def test_load_config_overrides(tmp_path: Path) -> None:
    """Verify that user values replace the defaults."""
    config = load_config(
        _write_config(
            tmp_path,
            {
                "index": "index.d.ts",
                "drop_types": ["Secret"],
                "convert_to_any": ["Opaque"],
                "exclude_tags": ["internal"],
                "rename_types": {"Old": "New"},
                "flatten_enums": True,
            },
        )
    )
    assert config.drop_types == {"Secret"}
    assert config.is_dropped("Secret")
    assert config.is_dropped("Opaque")
    assert not config.is_dropped("Public")
    assert config.is_excluded({"internal", "beta"})
    assert not config.is_excluded({"beta"})
    assert config.rename_types == {"Old": "New"}
    assert config.flatten_enums is True


def test_load_config_warns_on_unknown_keys(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Verify that unknown keys are reported and ignored."""
    with caplog.at_level(logging.WARNING):
        load_config(_write_config(tmp_path, {"index": "index.d.ts", "bogus": 1}))
    assert "bogus" in caplog.text


def test_load_config_requires_index(tmp_path: Path) -> None:
    """Verify that a configuration without an index file is rejected."""
    with pytest.raises(ConfigurationError, match="index"):
        load_config(_write_config(tmp_path, {"root": "types"}))


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("drop_types", "Secret"),
        ("rename_types", ["Old"]),
        ("flatten_enums", "yes"),
        ("max_invocations", 0),
        ("max_invocations", True),
    ],
)
def test_load_config_rejects_bad_types(tmp_path: Path, key: str, value: object) -> None:
    """Verify that values of the wrong type raise a configuration error."""
    with pytest.raises(ConfigurationError, match=key):
        load_config(_write_config(tmp_path, {"index": "index.d.ts", key: value}))


def test_load_config_rejects_malformed_document(tmp_path: Path) -> None:
    """Verify that unparsable documents raise a configuration error."""
    path = tmp_path / "api-config.json"
    path.write_text('{"index": [', encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(path)


def test_load_config_missing_file(tmp_path: Path) -> None:
    """Verify that a missing configuration file propagates as an OS error."""
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.json")
