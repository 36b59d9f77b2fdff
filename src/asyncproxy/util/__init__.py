"""
This module provides utility functions.
"""
from .logger import Logger

__all__ = [
    "Logger"
]
