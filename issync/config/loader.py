# issync Configuration Loader
# Load, save, and validate YAML configuration files

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from issync.config.defaults import default_config, generate_default_config
from issync.config.schema import IssyncConfig

CONFIG_ENV_VAR = "ISSYNC_CONFIG"


def get_config_dir() -> Path:
    """Get the issync configuration directory."""
    return Path.home() / ".config" / "issync"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> IssyncConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        IssyncConfig: Validated configuration object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValidationError: If config file is invalid.
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}\nRun 'issync config init' to create one.")

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    return IssyncConfig.model_validate(_merge_with_defaults(data))


def save_config(config: IssyncConfig, config_path: Optional[Path] = None) -> Path:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration object to save.
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Path: Path where config was saved.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(exclude_none=True, mode="json")

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

    return config_path


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    if config_path is None:
        config_path = get_config_path()

    if config_path.exists():
        return config_path, False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path, True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without loading it into the system.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]

    errors: list[str] = []

    try:
        config = IssyncConfig.model_validate(_merge_with_defaults(data))
    except ValidationError as e:
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        return False, errors

    if not config.collections:
        errors.append("No collections defined")

    names = [c.name for c in config.collections]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    for name in duplicates:
        errors.append(f"Duplicate collection: {name}")

    return len(errors) == 0, errors


def _merge_with_defaults(data: dict[str, Any]) -> dict[str, Any]:
    """Merge loaded data with default values for missing keys."""
    result = default_config()

    if "collections" in data:
        result["collections"] = data["collections"] or []

    for section in ("output", "cache", "state"):
        if isinstance(data.get(section), dict):
            result[section] = {**result[section], **data[section]}

    return result
