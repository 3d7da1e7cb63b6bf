"""
Regression tests for ConfigService path handling and isolation.

Goal: Avoid overwriting repository template configuration files and ensure
that the test environment does not pollute the real user directories.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml


def test_defaults(sandbox_config_dir: Path, tmp_path: Path):
    from services.config_service import ConfigService

    config = ConfigService(str(tmp_path / "absent.yaml"))

    assert config.get("command_line.strict_numbers") is False
    assert config.get("single_instance.server_name") == "clementine-remote"
    assert config.get("single_instance.timeout_ms") == 1000
    assert config.get("logging.level") == "WARNING"
    assert config.get("missing.key", "fallback") == "fallback"


def test_singleton(sandbox_config_dir: Path, tmp_path: Path):
    from services.config_service import ConfigService

    assert ConfigService(str(tmp_path / "a.yaml")) is ConfigService()


def test_custom_config_path_save_and_reload_round_trip(sandbox_config_dir: Path, tmp_path: Path):
    from services.config_service import ConfigService

    custom_path = tmp_path / "isolated.yaml"
    config = ConfigService(str(custom_path))
    config.set("command_line.strict_numbers", True)

    assert config.save() is True
    assert custom_path.exists()

    # Custom mode should not write to the default user directory
    assert ConfigService._get_user_config_path().exists() is False

    ConfigService.reset_instance()
    config2 = ConfigService(str(custom_path))
    assert config2.get("command_line.strict_numbers") is True
    # Untouched defaults survive the merge
    assert config2.get("single_instance.server_name") == "clementine-remote"


def test_user_file_overrides_defaults(sandbox_config_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    from services.config_service import ConfigService

    monkeypatch.chdir(tmp_path)
    user_path = ConfigService._get_user_config_path()
    user_path.parent.mkdir(parents=True)
    user_path.write_text(yaml.safe_dump({"single_instance": {"server_name": "custom"}}), encoding="utf-8")

    config = ConfigService()

    assert config.get("single_instance.server_name") == "custom"
    assert config.get("single_instance.timeout_ms") == 1000


def test_passing_default_template_path_does_not_write_to_repo_template(
    sandbox_config_dir: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    from services.config_service import ConfigService

    monkeypatch.chdir(tmp_path)
    template_path = Path("config/default_config.yaml")
    template_path.parent.mkdir(parents=True)
    template_path.write_text("logging:\n  level: INFO\n", encoding="utf-8")

    config = ConfigService(str(template_path))
    assert config.get("logging.level") == "INFO"

    config.set("logging.level", "DEBUG")
    assert config.save() is True

    assert yaml.safe_load(template_path.read_text(encoding="utf-8")) == {"logging": {"level": "INFO"}}
    assert ConfigService._get_user_config_path().exists() is True


def test_invalid_yaml_is_ignored(sandbox_config_dir: Path, tmp_path: Path):
    from services.config_service import ConfigService

    custom_path = tmp_path / "broken.yaml"
    custom_path.write_text("logging: [unclosed\n", encoding="utf-8")

    config = ConfigService(str(custom_path))

    assert config.get("logging.level") == "WARNING"


def test_reset_restores_defaults(sandbox_config_dir: Path, tmp_path: Path):
    from services.config_service import ConfigService

    config = ConfigService(str(tmp_path / "c.yaml"))
    config.set("i18n.translations_file", "/tmp/de.yaml")
    config.reset()

    assert config.get("i18n.translations_file") == ""
