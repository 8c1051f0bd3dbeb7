"""Unit tests for taurus.config.loader module."""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from taurus.agents.models import Priority
from taurus.config.loader import (
    config_exists,
    create_default_config,
    load_config,
    resolve_config,
    resolve_endpoint,
)
from taurus.config.models import AgentDeclaration, TaurusConfig
from taurus.core.errors import ConfigError


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory."""
    config_dir = tmp_path / ".taurus"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config_file(temp_config_dir: Path) -> Path:
    """Create a config file with a few overrides."""
    config_path = temp_config_dir / "config.yaml"
    content = {
        "orchestrator": {"health_check_interval": 10, "max_concurrent_agents": 4},
        "api": {"port": 8080},
        "agents": {
            "github": {
                "endpoint_env": "GITHUB_MCP_URL",
                "capabilities": ["code_analysis"],
                "priority": "medium",
                "status": "standby",
            }
        },
    }
    with config_path.open("w") as f:
        yaml.dump(content, f)
    return config_path


class TestCreateDefaultConfig:
    """Test create_default_config."""

    def test_writes_loadable_yaml(self, temp_config_dir: Path) -> None:
        """The written file round-trips into the default config."""
        path = create_default_config(temp_config_dir)

        assert path == temp_config_dir / "config.yaml"
        assert (temp_config_dir / "logs").is_dir()
        assert load_config(path).orchestrator == TaurusConfig().orchestrator

    def test_refuses_to_overwrite(self, temp_config_dir: Path) -> None:
        """An existing file is kept unless overwrite=True."""
        create_default_config(temp_config_dir)

        with pytest.raises(ConfigError, match="already exists"):
            create_default_config(temp_config_dir)

        create_default_config(temp_config_dir, overwrite=True)


class TestLoadConfig:
    """Test load_config."""

    def test_loads_overrides(self, temp_config_file: Path) -> None:
        """Values from the file override defaults."""
        config = load_config(temp_config_file)

        assert config.orchestrator.health_check_interval == 10
        assert config.orchestrator.max_concurrent_agents == 4
        assert config.orchestrator.scale_up_batch == 2
        assert config.api.port == 8080
        assert list(config.agents) == ["github"]

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises ConfigError pointing at config init."""
        with pytest.raises(ConfigError, match="taurus config init") as exc_info:
            load_config(tmp_path / "nope.yaml")

        assert exc_info.value.config_file == str(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, temp_config_dir: Path) -> None:
        """Unparseable YAML raises ConfigError."""
        path = temp_config_dir / "config.yaml"
        path.write_text("orchestrator: [unclosed")

        with pytest.raises(ConfigError, match="Failed to parse"):
            load_config(path)

    def test_validation_errors_listed(self, temp_config_dir: Path) -> None:
        """Validation failures name the offending key."""
        path = temp_config_dir / "config.yaml"
        path.write_text("orchestrator:\n  max_concurrent_agents: 0\n")

        with pytest.raises(ConfigError, match="orchestrator.max_concurrent_agents"):
            load_config(path)

    def test_empty_file_is_defaults(self, temp_config_dir: Path) -> None:
        """An empty file yields the default config."""
        path = temp_config_dir / "config.yaml"
        path.write_text("")

        assert load_config(path) == TaurusConfig()

    def test_port_env_override(
        self, temp_config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """PORT overrides the configured API port."""
        monkeypatch.setenv("PORT", "4100")

        assert load_config(temp_config_file).api.port == 4100

    def test_invalid_port_env(
        self, temp_config_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A non-numeric PORT is a configuration error."""
        monkeypatch.setenv("PORT", "http")

        with pytest.raises(ConfigError, match="PORT"):
            load_config(temp_config_file)


class TestResolveConfig:
    """Test resolve_config and config_exists."""

    def test_defaults_without_file(self, temp_config_dir: Path) -> None:
        """Without a config file the built-in defaults apply."""
        with patch("taurus.config.loader.get_config_dir", return_value=temp_config_dir):
            assert not config_exists()
            assert resolve_config() == TaurusConfig()

    def test_uses_home_file_when_present(self, temp_config_dir: Path) -> None:
        """~/.taurus/config.yaml is used when it exists."""
        create_default_config(temp_config_dir)
        (temp_config_dir / "config.yaml").write_text("api:\n  port: 9999\n")

        with patch("taurus.config.loader.get_config_dir", return_value=temp_config_dir):
            assert config_exists()
            assert resolve_config().api.port == 9999

    def test_explicit_path_must_exist(self, tmp_path: Path) -> None:
        """An explicit path is never silently replaced by defaults."""
        with pytest.raises(ConfigError):
            resolve_config(tmp_path / "missing.yaml")


class TestResolveEndpoint:
    """Test resolve_endpoint."""

    def test_env_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """A set environment variable overrides the literal endpoint."""
        monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-real")
        declaration = AgentDeclaration(
            endpoint="demo-key",
            endpoint_env="PERPLEXITY_API_KEY",
            capabilities=("research",),
            priority=Priority.HIGH,
        )

        assert resolve_endpoint(declaration) == "pplx-real"

    def test_falls_back_to_literal(self) -> None:
        """Unset variables fall back to the literal endpoint."""
        declaration = AgentDeclaration(
            endpoint="demo-key",
            endpoint_env="PERPLEXITY_API_KEY",
            capabilities=("research",),
            priority=Priority.HIGH,
        )

        assert resolve_endpoint(declaration) == "demo-key"

    def test_empty_env_treated_as_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An empty variable does not hide the literal endpoint."""
        monkeypatch.setenv("APIFY_TOKEN", "")
        declaration = AgentDeclaration(
            endpoint_env="APIFY_TOKEN", capabilities=("web_scraping",), priority=Priority.HIGH
        )

        assert resolve_endpoint(declaration) is None
