"""
Configuration handling
"""
from .configuration import ConfigurationManager, ConfigurationSource, DictConfigurationSource, EnvConfigurationSource, configuration

__all__ = [
    "ConfigurationManager",
    "ConfigurationSource",
    "DictConfigurationSource",
    "EnvConfigurationSource",
    "configuration",
]
