"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from objstore.config import (
    Settings,
    StackConfig,
    load_config,
    replace_env_vars,
)


def test_replace_env_vars_uses_environment(monkeypatch):
    monkeypatch.setenv("OBJSTORE_TEST_ROOT", "/data/objects")

    resolved = replace_env_vars(
        {"storage": {"base_path": "${env.OBJSTORE_TEST_ROOT:=/storage}"}}
    )

    assert resolved == {"storage": {"base_path": "/data/objects"}}


def test_replace_env_vars_falls_back_to_default(monkeypatch):
    monkeypatch.delenv("OBJSTORE_TEST_ROOT", raising=False)

    assert replace_env_vars(["${env.OBJSTORE_TEST_ROOT:=/storage}"]) == ["/storage"]


def test_replace_env_vars_requires_unset_variable_without_default(monkeypatch):
    monkeypatch.delenv("OBJSTORE_TEST_REQUIRED", raising=False)

    with pytest.raises(ValueError, match="OBJSTORE_TEST_REQUIRED"):
        replace_env_vars("${env.OBJSTORE_TEST_REQUIRED}")


def test_stack_config_defaults():
    config = StackConfig()

    assert config.server.port == 8080
    assert config.storage.base_path == Path("/storage")
    assert config.enable_metrics is True


def test_sample_config_round_trips(monkeypatch):
    monkeypatch.delenv("OBJSTORE_STORAGE_PATH", raising=False)
    monkeypatch.delenv("OBJSTORE_LOG_LEVEL", raising=False)

    config = StackConfig.from_dict(StackConfig.sample_config())

    assert config.storage.base_path == Path("/storage")
    assert config.logging.level == "INFO"


def test_load_config_from_yaml(tmp_path):
    config_file = tmp_path / "objstore.yaml"
    config_file.write_text(
        yaml.safe_dump(
            {
                "server": {"port": 9000},
                "storage": {"type": "local", "base_path": str(tmp_path / "objs")},
                "enable_metrics": False,
            }
        )
    )

    config = load_config(Settings(config_file=config_file))

    assert config.server.port == 9000
    assert config.storage.base_path == tmp_path / "objs"
    assert config.enable_metrics is False


def test_load_config_from_settings(tmp_path):
    settings = Settings(
        config_file=None,
        port=8181,
        storage_path=tmp_path,
        log_level="DEBUG",
        json_logs=True,
    )

    config = load_config(settings)

    assert config.server.port == 8181
    assert config.storage.base_path == tmp_path
    assert config.logging.level == "DEBUG"
    assert config.logging.json_logs is True


def test_settings_read_prefixed_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("OBJSTORE_STORAGE_PATH", str(tmp_path))
    monkeypatch.setenv("OBJSTORE_PORT", "9090")

    settings = Settings()

    assert settings.storage_path == tmp_path
    assert settings.port == 9090
