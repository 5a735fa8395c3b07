# issync Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "collections": [],
    "output": {
        "group_by_state": True,
        "auto_reorganize": True,
        "prune_deleted": True,
        "artifact_suffix": ".md",
        "verbose": False,
        "colored": True,
        "log_level": "WARNING",
    },
    "cache": {
        "enabled": True,
        "directory": "~/.cache/issync",
        "default_ttl": 300000,
        "max_entries": 100,
    },
    "state": {
        "directory": "~/.config/issync/state",
    },
}

EXAMPLE_COLLECTIONS: list[dict[str, Any]] = [
    {
        "owner": "your-username",
        "repo": "project-a",
        "output_dir": "./docs/issues/project-a",
        "display_name": "Project A",
    },
    {
        "owner": "your-org",
        "repo": "project-b",
        "output_dir": "./docs/issues/project-b",
        "enabled": False,
    },
]


def default_config() -> dict[str, Any]:
    """Get a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """
    Generate the default configuration file content.

    Returns:
        YAML text with a header comment and example collections.
    """
    data = default_config()
    data["collections"] = copy.deepcopy(EXAMPLE_COLLECTIONS)

    header = (
        "# issync configuration\n"
        "# Mirrors remote issue collections into category directories.\n"
        "# Times are in milliseconds.\n\n"
    )
    return header + yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
