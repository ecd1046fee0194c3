"""Unit tests for config.py"""

import logging

import pytest
from pydantic import ValidationError

from mdxblocks.config import configure_logging, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run each test in an empty directory with no MDXBLOCKS_ variables set."""
    monkeypatch.chdir(tmp_path)
    for name in ("REGISTRY_PATH", "MODE", "MAX_WORKERS", "CONVERTER", "OUTPUT_FORMAT", "ALLOW_PLACEHOLDER"):
        monkeypatch.delenv(f"MDXBLOCKS_{name}", raising=False)


def test_load_config_defaults():
    """Defaults apply when no config.yaml, env var, or override exists."""
    settings = load_config()
    assert settings.registry_path == "components.yaml"
    assert settings.mode == "fail-fast"
    assert settings.converter == "lexical"
    assert settings.output_format == "blocks"
    assert settings.max_workers == 1
    assert settings.allow_placeholder is False


def test_load_config_reads_config_yaml(tmp_path):
    """Values in config.yaml are applied."""
    (tmp_path / "config.yaml").write_text("mode: collect\nregistry_path: reg.yaml\n")
    settings = load_config()
    assert (settings.mode, settings.registry_path) == ("collect", "reg.yaml")


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDXBLOCKS_MODE takes precedence over config.yaml mode."""
    (tmp_path / "config.yaml").write_text("mode: collect\n")
    monkeypatch.setenv("MDXBLOCKS_MODE", "fail-fast")
    assert load_config().mode == "fail-fast"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("MDXBLOCKS_REGISTRY_PATH", "env.yaml")
    assert load_config(overrides={"registry_path": "cli.yaml"}).registry_path == "cli.yaml"
    assert load_config(overrides={"registry_path": None}).registry_path == "env.yaml"


def test_load_config_env_coerces_types(monkeypatch):
    """Env var strings are coerced to the field types."""
    monkeypatch.setenv("MDXBLOCKS_MAX_WORKERS", "4")
    monkeypatch.setenv("MDXBLOCKS_ALLOW_PLACEHOLDER", "true")
    settings = load_config()
    assert settings.max_workers == 4
    assert settings.allow_placeholder is True


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_non_mapping_yaml(tmp_path):
    """A config.yaml that is not a mapping is rejected."""
    (tmp_path / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()


@pytest.mark.parametrize("overrides", [
    {"mode": "lenient"},
    {"converter": "html"},
    {"output_format": "xml"},
    {"max_workers": 0},
])
def test_load_config_rejects_invalid_values(overrides):
    """Out-of-range values fail validation."""
    with pytest.raises(ValidationError):
        load_config(overrides=overrides)


def test_configure_logging_sets_root_level():
    """configure_logging applies a named level to the root logger."""
    configure_logging("debug")
    assert logging.getLogger().level == logging.DEBUG
    configure_logging("WARNING")
    assert logging.getLogger().level == logging.WARNING


def test_configure_logging_unknown_level():
    """An unknown level name is a ValueError."""
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("LOUD")
