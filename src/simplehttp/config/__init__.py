"""
Configuration module
"""

from simplehttp.config.client_config import (
    ClientConfig,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)
from simplehttp.config.config_loader import ConfigLoader

__all__ = [
    "ClientConfig",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    "ConfigLoader",
]
