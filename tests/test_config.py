"""
Tests for histver.config module.

Tests configuration loading including:
- Built-in defaults
- YAML overrides and deep merging
- Validation errors
- Token lookup from the environment
"""

from __future__ import annotations

import pytest

from histver.config import DEFAULT_CONFIG, Settings, load_config
from histver.exceptions import ConfigError


def _write(tmp_path, text: str):
    path = tmp_path / "histver.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaults:
    """Tests for the built-in configuration."""

    def test_defaults_without_file(self):
        """Test that no file yields the syncthing defaults."""
        settings = load_config()

        assert settings == Settings()
        assert settings.repo == "syncthing/syncthing"
        assert settings.build_info_command == ("go", "version", "-m")
        assert settings.download_timeout == 300

    def test_empty_file_is_defaults(self, tmp_path):
        """Test that an empty YAML document changes nothing."""
        assert load_config(_write(tmp_path, "")) == Settings()

    def test_defaults_not_mutated(self, tmp_path):
        """Test that merging leaves DEFAULT_CONFIG untouched."""
        load_config(_write(tmp_path, "timeouts:\n  probe: 5\n"))
        assert DEFAULT_CONFIG["timeouts"]["probe"] == 60


class TestOverrides:
    """Tests for YAML overrides."""

    def test_scalar_override(self, tmp_path):
        """Test top-level values replace defaults."""
        path = _write(
            tmp_path,
            "repo: example/tool\nproduct: tool\nruntime_prefix: rustc\n",
        )
        settings = load_config(path)

        assert settings.repo == "example/tool"
        assert settings.product == "tool"
        assert settings.runtime_prefix == "rustc"

    def test_timeouts_deep_merged(self, tmp_path):
        """Test that one timeout can be changed without restating the rest."""
        settings = load_config(_write(tmp_path, "timeouts:\n  download: 600\n"))

        assert settings.download_timeout == 600
        assert settings.api_timeout == 30
        assert settings.probe_timeout == 60

    def test_list_replaced(self, tmp_path):
        """Test that lists are replaced, not extended."""
        settings = load_config(
            _write(tmp_path, "build_info_command: [/opt/go/bin/go, version, -m]\n")
        )
        assert settings.build_info_command == ("/opt/go/bin/go", "version", "-m")

    def test_probe_settings(self, tmp_path):
        """Test that probe options are carried into ProbeSettings."""
        settings = load_config(
            _write(tmp_path, "version_flag: -version\ntimeouts:\n  probe: 10\n")
        )
        probe = settings.probe_settings()

        assert probe.version_flag == "-version"
        assert probe.timeout == 10
        assert probe.product == "syncthing"


class TestValidation:
    """Tests for configuration errors."""

    def test_missing_file(self, tmp_path):
        """Test that an explicit path must exist."""
        with pytest.raises(ConfigError, match="Config file not found"):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        """Test YAML syntax errors."""
        with pytest.raises(ConfigError, match="Failed to parse YAML"):
            load_config(_write(tmp_path, "repo: [unclosed\n"))

    def test_non_mapping(self, tmp_path):
        """Test that the document must be a mapping."""
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_config(_write(tmp_path, "- a\n- b\n"))

    def test_unknown_key(self, tmp_path):
        """Test that typos are reported."""
        with pytest.raises(ConfigError, match="Unknown configuration key"):
            load_config(_write(tmp_path, "repository: example/tool\n"))

    def test_unknown_timeout(self, tmp_path):
        """Test that unknown timeout names are reported."""
        with pytest.raises(ConfigError, match="Unknown timeout key"):
            load_config(_write(tmp_path, "timeouts:\n  upload: 5\n"))

    @pytest.mark.parametrize("repo", ["tool", "a/b/c", "'/tool'"])
    def test_bad_repo(self, tmp_path, repo):
        """Test repo format validation."""
        with pytest.raises(ConfigError, match="Invalid repo format"):
            load_config(_write(tmp_path, f"repo: {repo}\n"))

    def test_empty_product(self, tmp_path):
        """Test that product must be a non-empty string."""
        with pytest.raises(ConfigError, match="'product'"):
            load_config(_write(tmp_path, "product: ''\n"))

    @pytest.mark.parametrize("value", ["0", "-1", "fast", "true"])
    def test_bad_timeout(self, tmp_path, value):
        """Test that timeouts must be positive numbers."""
        with pytest.raises(ConfigError, match="timeouts.api"):
            load_config(_write(tmp_path, f"timeouts:\n  api: {value}\n"))

    def test_bad_prerelease_flag(self, tmp_path):
        """Test that include_prereleases must be a boolean."""
        with pytest.raises(ConfigError, match="include_prereleases"):
            load_config(_write(tmp_path, "include_prereleases: sometimes\n"))

    def test_bad_build_info_command(self, tmp_path):
        """Test that the build info command must be a list of strings."""
        with pytest.raises(ConfigError, match="build_info_command"):
            load_config(_write(tmp_path, "build_info_command: go version -m\n"))


class TestToken:
    """Tests for GitHub token lookup."""

    def test_token_from_env(self, monkeypatch):
        """Test the default environment variable."""
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_abc")
        assert load_config().token == "ghp_abc"

    def test_custom_token_env(self, tmp_path, monkeypatch):
        """Test a configured environment variable name."""
        monkeypatch.setenv("HISTVER_TOKEN", "ghp_custom")
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        settings = load_config(_write(tmp_path, "token_env: HISTVER_TOKEN\n"))
        assert settings.token == "ghp_custom"

    def test_no_token(self, monkeypatch):
        """Test anonymous access when the variable is unset or empty."""
        monkeypatch.setenv("GITHUB_TOKEN", "")
        assert load_config().token is None
