"""Configuration loading for the ENOVIA client.

Configuration is loaded from config/config.yaml (see config.yaml.example)
with ${VAR} expansion and ENOVIA_* environment overrides.

Main Functions
--------------
    - load_config(): Load configuration from YAML and environment

Usage Examples
--------------
    >>> from config import load_config
    >>> config = load_config(Path("config/config.yaml"))
    >>> config.passport_url
    'https://plm.example.com/3dpassport'
"""

from config.config import (
    DEFAULT_CONFIG_FILE,
    EnoviaConfig,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "EnoviaConfig",
    "load_config",
]
