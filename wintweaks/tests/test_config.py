"""Tests for TOML configuration loading and overrides."""

import argparse

import pytest

from wintweaks import config as config_module
from wintweaks.config import Config, create_example_config
from wintweaks.protocol.errors import ConfigurationError


def _args(**overrides):
    values = dict(
        tweaks=None, no_keep_customization=False, workers=None,
        debug=False, log_dir=None, no_log_file=False, quiet=False,
    )
    values.update(overrides)
    return argparse.Namespace(**values)


@pytest.fixture(autouse=True)
def no_default_config(monkeypatch, tmp_path):
    """Keep the developer's real config files out of the tests."""
    monkeypatch.delenv("WINTWEAKS_CONFIG", raising=False)
    monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [tmp_path / "absent.toml"])


class TestConfigLoad:

    def test_defaults(self):
        config = Config.load()
        assert config.engine.keep_existing_customization is True
        assert config.engine.max_workers == 1
        assert config.tweaks.path == ""
        assert config.logging.level == "INFO"
        assert config.output.quiet is False
        assert config.validate() == []

    def test_load_file(self, tmp_path):
        path = tmp_path / "wintweaks.toml"
        path.write_text(
            "[engine]\n"
            "keep_existing_customization = false\n"
            "max_workers = 4\n"
            "[logging]\n"
            "level = \"debug\"\n"
            "file_logging = false\n"
        )
        config = Config.load(str(path))
        assert config.engine.keep_existing_customization is False
        assert config.engine.max_workers == 4
        assert config.logging.level == "DEBUG"
        assert config.logging.file_logging is False
        assert config._config_file == path

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.toml"
        path.write_text("[output]\nquiet = true\n")
        monkeypatch.setenv("WINTWEAKS_CONFIG", str(path))
        assert Config.load().output.quiet is True

    def test_search_paths(self, tmp_path, monkeypatch):
        path = tmp_path / "found.toml"
        path.write_text("[engine]\nmax_workers = 2\n")
        monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [tmp_path / "absent.toml", path])
        assert Config.load().engine.max_workers == 2

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config.load(str(tmp_path / "missing.toml"))

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[engine\nmax_workers = 2\n")
        with pytest.raises(ConfigurationError, match="Invalid config"):
            Config.load(str(path))


class TestOverrides:

    def test_args_beat_file(self, tmp_path):
        config = Config._from_dict({"engine": {"max_workers": 2}})
        config.override_from_args(_args(workers=8, no_keep_customization=True, debug=True, quiet=True))
        assert config.engine.max_workers == 8
        assert config.engine.keep_existing_customization is False
        assert config.logging.level == "DEBUG"
        assert config.output.quiet is True

    def test_unset_args_keep_file_values(self):
        config = Config._from_dict({"engine": {"max_workers": 2}, "tweaks": {"path": "x.json"}})
        config.override_from_args(_args())
        assert config.engine.max_workers == 2
        assert config.tweaks.path == "x.json"

    def test_zero_workers_reaches_validation(self):
        config = Config().override_from_args(_args(workers=0))
        assert config.engine.max_workers == 0
        assert any("max_workers" in e for e in config.validate())

    def test_no_log_file(self, tmp_path):
        config = Config().override_from_args(_args(no_log_file=True, log_dir=str(tmp_path)))
        assert config.logging.file_logging is False
        assert config.logging.dir == str(tmp_path)


class TestValidate:

    def test_errors(self, tmp_path):
        config = Config._from_dict({
            "engine": {"max_workers": 0},
            "logging": {"level": "loud"},
            "tweaks": {"path": str(tmp_path / "missing.json")},
        })
        errors = config.validate()
        assert len(errors) == 3
        assert any("max_workers" in e for e in errors)
        assert any("LOUD" in e for e in errors)

    def test_summary(self):
        summary = Config().summary()
        assert "Config: (defaults)" in summary
        assert "keep user customizations" in summary


class TestExampleConfig:

    def test_create_and_reload(self, tmp_path):
        path = create_example_config(str(tmp_path / "wintweaks.toml"))
        config = Config.load(str(path))
        assert config.tweaks.path == "config/tweaks.json"
        assert config.engine.keep_existing_customization is True

    def test_refuses_overwrite(self, tmp_path):
        path = tmp_path / "wintweaks.toml"
        path.write_text("")
        with pytest.raises(FileExistsError):
            create_example_config(str(path))
