"""
Configuration values, merged from a list of sources and accessed by dotted paths.
"""
from __future__ import annotations

import logging
import os
import threading
from typing import Optional, Type, TypeVar

from dotenv import load_dotenv

T = TypeVar("T")

class ConfigurationManager:
    """
    The ConfigurationManager merges the dictionaries of all registered sources and
    returns typed values for dotted paths like "asyncproxy.timeout".
    """
    # class properties

    logger = logging.getLogger(__name__)

    # constructor

    def __init__(self):
        self.sources : list[ConfigurationSource] = []
        self._data = dict()
        self.coercions = {
            int: int,
            float: float,
            bool: lambda v: str(v).lower() in ("1", "true", "yes", "on"),
            str: str,
        }

    # internal

    def _register(self, source: ConfigurationSource):
        self.sources.append(source)

    # public

    def load(self) -> ConfigurationManager:
        def merge_dicts(a: dict, b: dict) -> dict:
            result = a.copy()
            for key, b_val in b.items():
                if key in result:
                    a_val = result[key]
                    if isinstance(a_val, dict) and isinstance(b_val, dict):
                        result[key] = merge_dicts(a_val, b_val)  # Recurse
                    else:
                        result[key] = b_val  # Overwrite
                else:
                    result[key] = b_val
            return result

        self._data = dict()
        for source in self.sources:
            self._data = merge_dicts(self._data, source.load())

        self.logger.debug("loaded configuration from %d sources", len(self.sources))

        return self

    def get(self, path: str, type: Type[T], default=None) -> Optional[T]:
        def value(path: str, default=None) -> T:
            keys = path.split(".")
            current = self._data
            for key in keys:
                if not isinstance(current, dict) or key not in current:
                    return default
                current = current[key]

            return current

        v = value(path, default)

        if v is None or isinstance(v, type):
            return v

        if type in self.coercions:
            try:
                return self.coercions[type](v)
            except (TypeError, ValueError) as e:
                raise ValueError(f"cannot convert {path}={v!r} to {type.__name__}") from e

        raise ValueError(f"unknown coercion to {type}")

class ConfigurationSource:
    """
    Base class for configuration sources. A source registers itself with the passed manager.
    """
    def __init__(self, manager: ConfigurationManager):
        manager._register(self)

    def load(self) -> dict:
        return {}

class DictConfigurationSource(ConfigurationSource):
    """
    A source supplying a fixed dictionary.
    """
    # constructor

    def __init__(self, manager: ConfigurationManager, data: dict):
        super().__init__(manager)

        self.data = data

    # implement

    def load(self) -> dict:
        return self.data

class EnvConfigurationSource(ConfigurationSource):
    """
    A source covering the process environment, including a .env file.
    Keys containing '.' or '/' are exploded into nested dictionaries, keys starting with the
    prefix are mapped to the corresponding lower case section, e.g. ASYNCPROXY_TIMEOUT to asyncproxy.timeout.
    """
    # constructor

    def __init__(self, manager: ConfigurationManager, prefix: str = "ASYNCPROXY_"):
        super().__init__(manager)

        self.prefix = prefix

        load_dotenv()

    # implement

    def load(self) -> dict:
        def merge_dicts(a, b):
            """Recursively merges b into a"""
            for key, value in b.items():
                if isinstance(value, dict) and key in a and isinstance(a[key], dict):
                    merge_dicts(a[key], value)
                else:
                    a[key] = value
            return a

        def explode_key(key, value):
            """Explodes keys with '.' or '/' into nested dictionaries"""
            parts = key.replace('/', '.').split('.')
            d = current = {}
            for part in parts[:-1]:
                current[part] = {}
                current = current[part]
            current[parts[-1]] = value
            return d

        exploded = {}

        for key, value in os.environ.items():
            if self.prefix and key.startswith(self.prefix) and len(key) > len(self.prefix):
                key = f"{self.prefix.rstrip('_').lower()}.{key[len(self.prefix):].lower()}"

            if '.' in key or '/' in key:
                merge_dicts(exploded, explode_key(key, value))
            else:
                exploded[key] = value

        return exploded

# the process wide configuration

_manager: Optional[ConfigurationManager] = None
_lock = threading.Lock()

def configuration() -> ConfigurationManager:
    """
    return the process wide configuration, which is backed by the environment and loaded on first access
    """
    global _manager

    if _manager is None:
        with _lock:
            if _manager is None:
                manager = ConfigurationManager()
                EnvConfigurationSource(manager)
                _manager = manager.load()

    return _manager
