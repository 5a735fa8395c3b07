# issync Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from issync.config.defaults import DEFAULT_CONFIG, generate_default_config
from issync.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    save_config,
    validate_config_file,
)
from issync.config.schema import (
    CacheConfig,
    CollectionConfig,
    IssyncConfig,
    OutputConfig,
    StateConfig,
)

__all__ = [
    # Schema
    "IssyncConfig",
    "CollectionConfig",
    "OutputConfig",
    "CacheConfig",
    "StateConfig",
    # Loader
    "load_config",
    "save_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    # Defaults
    "DEFAULT_CONFIG",
    "generate_default_config",
]
