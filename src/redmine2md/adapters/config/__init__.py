"""
Configuration Adapters - Load configuration from various sources.
"""

from .yaml_file import (
    DEFAULT_CONFIG_FILENAME,
    EXAMPLE_CONFIG_FILENAME,
    YamlConfigProvider,
    write_example_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILENAME",
    "EXAMPLE_CONFIG_FILENAME",
    "YamlConfigProvider",
    "write_example_config",
]
