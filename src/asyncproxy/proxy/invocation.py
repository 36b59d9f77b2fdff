"""
The per call Invocation object and the normalization of results into awaitables.
"""
from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Type

from asyncproxy.reflection import ShapeKind, TypeDescriptor

class Completed:
    """
    An awaitable that already carries its result. Awaiting it never suspends,
    and synchronous code can fetch the value with result().
    """
    __slots__ = [
        "value"
    ]

    # constructor

    def __init__(self, value: Any = None):
        self.value = value

    # public

    def done(self) -> bool:
        return True

    def result(self) -> Any:
        return self.value

    # awaitable

    def __await__(self):
        yield from ()
        return self.value

    def __str__(self):
        return f"Completed({self.value!r})"

def normalize(result: Any) -> Awaitable:
    """
    turn the result of a handler into an awaitable. Plain values are wrapped into a Completed instance.

    Args:
        result: a plain value or an awaitable

    Returns:
        Awaitable: the normalized result
    """
    if inspect.isawaitable(result):
        return result

    return Completed(result)

async def _discard(awaitable: Awaitable) -> None:
    await awaitable

def discard(result: Any) -> Awaitable:
    """
    turn the result of a handler into an awaitable without a value.

    Args:
        result: a plain value or an awaitable

    Returns:
        Awaitable: an awaitable resolving to None once the result is done
    """
    if isinstance(result, Completed) or not inspect.isawaitable(result):
        return Completed()

    return _discard(result)

# the proceed variants per shape

def _proceed_void(invocation: Invocation) -> Awaitable:
    invocation.implementation(*invocation.args, **invocation.kwargs)

    return Completed()

def _proceed_value(invocation: Invocation) -> Awaitable:
    return Completed(invocation.implementation(*invocation.args, **invocation.kwargs))

def _proceed_async(invocation: Invocation) -> Awaitable:
    return discard(invocation.implementation(*invocation.args, **invocation.kwargs))

def _proceed_async_value(invocation: Invocation) -> Awaitable:
    return normalize(invocation.implementation(*invocation.args, **invocation.kwargs))

class Invocation:
    """
    An Invocation describes a single call to a proxy method. It carries the contract type,
    the method, the mutable arguments and the implementation that proceed() will call.
    """
    __slots__ = [
        "type",
        "method",
        "args",
        "kwargs",
        "implementation"
    ]

    # class properties

    proceeders: dict[ShapeKind, Callable[[Invocation], Awaitable]] = {
        ShapeKind.VOID: _proceed_void,
        ShapeKind.VALUE: _proceed_value,
        ShapeKind.ASYNC: _proceed_async,
        ShapeKind.ASYNC_VALUE: _proceed_async_value,
    }

    # constructor

    def __init__(self, type: Type, method: TypeDescriptor.MethodDescriptor, args: list, kwargs: dict, implementation: Callable):
        self.type = type
        self.method = method
        self.args = args
        self.kwargs = kwargs
        self.implementation = implementation

    # public

    @property
    def shape(self):
        return self.method.shape

    def proceed(self) -> Awaitable:
        """
        Execute the original behavior with the current arguments.
        The result is always an awaitable, no matter how the method returns its value:
        synchronous methods yield an already completed awaitable, asynchronous ones the pending result.

        Returns:
            Awaitable: the normalized result
        """
        return self.proceeders[self.method.shape.kind](self)

    def __str__(self):
        return f"Invocation({self.type.__name__}.{self.method.name})"

class InvocationHandler(ABC):
    """
    Interface for objects that intercept proxy calls. Plain callables with the same signature are accepted as well.
    """
    @abstractmethod
    def invoke(self, invocation: Invocation) -> Any:
        """
        handle an invocation

        Args:
            invocation: the invocation

        Returns:
            Any: an awaitable or a plain value
        """
        pass
