"""Tests for gistdrop.config -- paths, atomic writes, and precedence."""

from __future__ import annotations

import json
import os
import stat
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from gistdrop.config import (
    atomic_write,
    config_path,
    credentials_path,
    get_config_dir,
    get_data_dir,
    get_log_dir,
    load_config,
    read_config_data,
    resolve_config,
    save_config,
    update_config,
)
from gistdrop.exceptions import ConfigError
from gistdrop.models import DEFAULT_API_URL, AppConfig


# ------------------------------------------------------------------ #
# Directories
# ------------------------------------------------------------------ #


class TestDirectories:
    def test_xdg_config_dir(self, isolated_config: Path) -> None:
        path = get_config_dir()
        assert path == isolated_config / "config" / "gistdrop"
        assert path.is_dir()

    def test_xdg_data_dir(self, isolated_config: Path) -> None:
        assert get_data_dir() == isolated_config / "data" / "gistdrop"

    def test_log_dir(self, isolated_config: Path) -> None:
        path = get_log_dir()
        assert path == isolated_config / "data" / "gistdrop" / "logs"
        assert path.is_dir()

    def test_xdg_default_without_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("XDG_CONFIG_HOME")
        monkeypatch.setattr(Path, "home", lambda: isolated_config / "home")
        assert get_config_dir() == isolated_config / "home" / ".config" / "gistdrop"

    def test_non_xdg_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("gistdrop.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert get_config_dir() == tmp_path / ".gistdrop"
        assert get_data_dir() == tmp_path / ".gistdrop" / "data"

    def test_file_paths(self, isolated_config: Path) -> None:
        base = isolated_config / "config" / "gistdrop"
        assert config_path() == base / "config.json"
        assert credentials_path() == base / "credentials.json"


# ------------------------------------------------------------------ #
# Atomic writes
# ------------------------------------------------------------------ #


class TestAtomicWrite:
    def test_writes_and_replaces(self, tmp_path: Path) -> None:
        target = tmp_path / "out.txt"
        atomic_write(target, "one")
        atomic_write(target, "two")
        assert target.read_text(encoding="utf-8") == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_mode(self, tmp_path: Path) -> None:
        target = tmp_path / "secret.json"
        atomic_write(target, "{}", mode=0o600)
        assert stat.S_IMODE(os.stat(target).st_mode) == 0o600

    def test_failure_cleans_up(self, tmp_path: Path) -> None:
        target = tmp_path / "out.txt"
        target.write_text("original", encoding="utf-8")

        with patch("gistdrop.config.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                atomic_write(target, "new")

        assert target.read_text(encoding="utf-8") == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]


# ------------------------------------------------------------------ #
# Load / save / update
# ------------------------------------------------------------------ #


class TestLoadSave:
    def test_defaults_when_missing(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "config.json")
        assert config == AppConfig()
        assert config.scope == "gist"
        assert config.api_url == DEFAULT_API_URL
        assert config.public_by_default is False

    def test_roundtrip(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        save_config(AppConfig(client_id="Iv1.abc", public_by_default=True), path)
        loaded = load_config(path)
        assert loaded.client_id == "Iv1.abc"
        assert loaded.public_by_default is True

    def test_save_omits_unset_client_id(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        save_config(AppConfig(), path)
        assert "client_id" not in json.loads(path.read_text(encoding="utf-8"))

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_unknown_field(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"colour": "blue"}), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path)


class TestUpdateConfig:
    def test_coerces_bool(self) -> None:
        config = update_config(AppConfig(), "public_by_default", "true")
        assert config.public_by_default is True

    def test_coerces_float(self) -> None:
        assert update_config(AppConfig(), "timeout", "10").timeout == 10.0

    def test_unknown_key(self) -> None:
        with pytest.raises(ConfigError, match="Unknown config key"):
            update_config(AppConfig(), "nope", "1")

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigError, match="Invalid value"):
            update_config(AppConfig(), "timeout", "soon")

    def test_original_untouched(self) -> None:
        original = AppConfig()
        update_config(original, "client_id", "x")
        assert original.client_id is None


# ------------------------------------------------------------------ #
# Precedence
# ------------------------------------------------------------------ #


class TestResolveConfig:
    def test_file_value(self, isolated_config: Path) -> None:
        save_config(AppConfig(client_id="from-file"))
        assert resolve_config().client_id == "from-file"

    def test_env_overrides_file(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        save_config(AppConfig(client_id="from-file"))
        monkeypatch.setenv("GISTDROP_CLIENT_ID", "from-env")
        monkeypatch.setenv("GISTDROP_API_URL", "https://ghe.example.com/api/v3")
        config = resolve_config()
        assert config.client_id == "from-env"
        assert config.api_url == "https://ghe.example.com/api/v3"

    def test_cli_overrides_env(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GISTDROP_CLIENT_ID", "from-env")
        monkeypatch.setenv("GISTDROP_SCOPE", "gist read:user")
        config = resolve_config(cli_client_id="from-cli", cli_scope="gist")
        assert config.client_id == "from-cli"
        assert config.scope == "gist"

    def test_empty_env_ignored(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GISTDROP_CLIENT_ID", "")
        assert resolve_config().client_id is None


# ------------------------------------------------------------------ #
# Log level validation and repair
# ------------------------------------------------------------------ #


class TestLogLevel:
    def test_lowercase_is_normalised(self) -> None:
        assert AppConfig(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["BASIC_FORMAT", "verbose", "10", ""])
    def test_update_rejects_unknown_level(self, value: str) -> None:
        with pytest.raises(ConfigError, match="Invalid value for log_level"):
            update_config(AppConfig(), "log_level", value)

    def test_load_rejects_unknown_level(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"log_level": "BASIC_FORMAT"}), encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_env_override_is_validated(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GISTDROP_LOG_LEVEL", "chatty")
        with pytest.raises(ConfigError, match="override"):
            resolve_config()

    def test_env_override_is_normalised(
        self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GISTDROP_LOG_LEVEL", "warning")
        assert resolve_config().log_level == "WARNING"


class TestReadConfigData:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert read_config_data(tmp_path / "config.json") == {}

    def test_keeps_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"log_level": "BASIC_FORMAT"}), encoding="utf-8")
        assert read_config_data(path) == {"log_level": "BASIC_FORMAT"}

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigError, match="JSON object"):
            read_config_data(path)

    def test_update_repairs_bad_value(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps({"client_id": "cid", "log_level": "BASIC_FORMAT"}), encoding="utf-8"
        )
        config = update_config(read_config_data(path), "log_level", "info")
        save_config(config, path)

        loaded = load_config(path)
        assert loaded.log_level == "INFO"
        assert loaded.client_id == "cid"

    def test_update_names_other_bad_keys(self) -> None:
        data = {"log_level": "BASIC_FORMAT", "timeout": "soon"}
        with pytest.raises(ConfigError, match="check timeout"):
            update_config(data, "log_level", "INFO")
