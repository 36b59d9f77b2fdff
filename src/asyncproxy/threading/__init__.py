"""
threading utilities
"""
from .thread_local import ThreadLocal

__all__ = [
    "ThreadLocal",
]
