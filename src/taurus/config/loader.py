"""Configuration loading and management for Taurus.

This module provides functions for loading, creating, and validating
Taurus configuration files.

Functions:
    load_config: Load configuration from ~/.taurus/config.yaml
    resolve_config: Load the config file if present, else defaults
    create_default_config: Create the default configuration file
    ensure_config_dir: Ensure ~/.taurus/ directory exists
    config_exists: Check if the configuration file exists
    resolve_endpoint: Resolve an agent declaration's endpoint
"""

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError as PydanticValidationError
import yaml

# Load .env file from current directory and ~/.taurus/
load_dotenv()  # Current directory .env
load_dotenv(Path.home() / ".taurus" / ".env")  # Global .env

from taurus.config.models import (  # noqa: E402
    AgentDeclaration,
    TaurusConfig,
    get_config_dir,
    get_default_config,
)
from taurus.core.errors import ConfigError  # noqa: E402

CONFIG_FILENAME = "config.yaml"


def ensure_config_dir() -> Path:
    """Ensure the configuration directory exists.

    Creates ~/.taurus/ and its logs/ subdirectory if they don't exist.

    Returns:
        Path to the configuration directory.
    """
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "logs").mkdir(exist_ok=True)
    return config_dir


def _model_to_yaml_dict(model: TaurusConfig) -> dict[str, Any]:
    return model.model_dump(mode="json")


def create_default_config(
    config_dir: Path | None = None,
    *,
    overwrite: bool = False,
) -> Path:
    """Create the default configuration file.

    Args:
        config_dir: Directory to create the file in. Defaults to ~/.taurus/
        overwrite: If True, overwrite an existing file. Defaults to False.

    Returns:
        Path to the written config.yaml.

    Raises:
        ConfigError: If the file exists and overwrite=False.
    """
    if config_dir is None:
        config_dir = ensure_config_dir()
    else:
        config_dir.mkdir(parents=True, exist_ok=True)
        (config_dir / "logs").mkdir(exist_ok=True)

    config_path = config_dir / CONFIG_FILENAME

    if not overwrite and config_path.exists():
        raise ConfigError(
            f"Configuration file already exists: {config_path}",
            config_file=str(config_path),
        )

    config_dict = _model_to_yaml_dict(get_default_config())
    with config_path.open("w") as f:
        yaml.dump(
            config_dict,
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )

    return config_path


def _apply_env_overrides(config: TaurusConfig) -> TaurusConfig:
    """Apply PORT from the environment to the API section."""
    raw_port = os.environ.get("PORT")
    if not raw_port:
        return config
    try:
        port = int(raw_port)
    except ValueError as e:
        raise ConfigError(
            f"PORT must be an integer, got {raw_port!r}",
            config_key="PORT",
        ) from e
    if not 1 <= port <= 65535:
        raise ConfigError(f"PORT out of range: {port}", config_key="PORT")
    return config.model_copy(update={"api": config.api.model_copy(update={"port": port})})


def load_config(config_path: Path | None = None) -> TaurusConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to ~/.taurus/config.yaml.

    Returns:
        Validated TaurusConfig instance.

    Raises:
        ConfigError: If file doesn't exist, is malformed, or fails validation.
    """
    if config_path is None:
        config_path = get_config_dir() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}. "
            "Run `taurus config init` to create default configuration.",
            config_file=str(config_path),
        )

    try:
        with config_path.open() as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse configuration file: {e}",
            config_file=str(config_path),
            details={"yaml_error": str(e)},
        ) from e

    if config_dict is None:
        config_dict = {}

    try:
        config = TaurusConfig.model_validate(config_dict)
    except PydanticValidationError as e:
        error_messages = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            msg = error["msg"]
            error_messages.append(f"  - {loc}: {msg}")

        raise ConfigError(
            "Configuration validation failed:\n" + "\n".join(error_messages),
            config_file=str(config_path),
            details={"validation_errors": e.errors()},
        ) from e

    return _apply_env_overrides(config)


def resolve_config(config_path: Path | None = None) -> TaurusConfig:
    """Resolve the effective configuration.

    An explicit path must exist. Without one, ~/.taurus/config.yaml is used
    when present and the built-in defaults otherwise.

    Raises:
        ConfigError: If the chosen file is missing, malformed, or invalid.
    """
    if config_path is not None:
        return load_config(config_path)
    if config_exists():
        return load_config()
    return _apply_env_overrides(get_default_config())


def config_exists() -> bool:
    """Check if the configuration file exists."""
    return (get_config_dir() / CONFIG_FILENAME).exists()


def resolve_endpoint(declaration: AgentDeclaration) -> str | None:
    """Resolve the endpoint of a declared agent.

    A non-empty value of ``endpoint_env`` wins over the literal ``endpoint``.
    Returns None when neither yields a value.
    """
    if declaration.endpoint_env:
        value = os.environ.get(declaration.endpoint_env)
        if value:
            return value
    return declaration.endpoint or None
