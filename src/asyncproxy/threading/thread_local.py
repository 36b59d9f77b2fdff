"""
Some threading related utilities.
"""

import threading

from typing import Callable, Optional, TypeVar, Generic

T = TypeVar("T")
class ThreadLocal(Generic[T]):
    """
    A thread local value holder.
    Values created by the default factory are remembered, so that they can be released once the process ends.
    """
    # constructor

    def __init__(self, default_factory: Optional[Callable[[], T]] = None):
        self.local = threading.local()
        self.factory = default_factory
        self.lock = threading.Lock()
        self.created: list[T] = []

    # public

    def get(self) -> Optional[T]:
        if not hasattr(self.local, "value"):
            if self.factory is not None:
                value = self.factory()
                with self.lock:
                    self.created.append(value)

                self.local.value = value
            else:
                return None

        return self.local.value

    def set(self, value: T) -> None:
        self.local.value = value

    def clear(self) -> None:
        if hasattr(self.local, "value"):
            del self.local.value

    def drain(self) -> list[T]:
        """
        return and forget all values the default factory created so far, in any thread
        """
        with self.lock:
            values, self.created = self.created, []

        return values
