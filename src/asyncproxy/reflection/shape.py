"""
Classification of declared return types into the four shapes an intercepted method can have.
"""
from __future__ import annotations

import collections.abc
import inspect
import typing
from enum import Enum, auto
from typing import Any, Dict, get_args, get_origin

_MISSING = object()

_VOID_TYPES = (None, type(None), typing.NoReturn, getattr(typing, "Never", typing.NoReturn))

class ShapeKind(Enum):
    VOID = auto()
    VALUE = auto()
    ASYNC = auto()
    ASYNC_VALUE = auto()

class ReturnShape:
    """
    A ReturnShape tags a method with the way it produces its result:

    * ``VOID``: a synchronous method without a result
    * ``VALUE``: a synchronous method returning a value of ``value_type``
    * ``ASYNC``: an asynchronous method without a result
    * ``ASYNC_VALUE``: an asynchronous method resolving to a value of ``value_type``
    """
    __slots__ = [
        "kind",
        "value_type"
    ]

    # class methods

    @classmethod
    def classify(cls, function: typing.Callable, hints: Dict[str, Any]) -> ReturnShape:
        """
        classify a function by its declared return type

        Args:
            function: the function
            hints: the resolved type hints of the function

        Returns:
            ReturnShape: the shape
        """
        declared = hints.get("return", _MISSING)

        # async def

        if inspect.iscoroutinefunction(function):
            if declared is _MISSING:
                return ReturnShape(ShapeKind.ASYNC_VALUE, Any)
            if cls._is_void(declared):
                return ReturnShape(ShapeKind.ASYNC)

            return ReturnShape(ShapeKind.ASYNC_VALUE, declared)

        # plain functions

        if declared is _MISSING:
            return ReturnShape(ShapeKind.VALUE, Any)

        if isinstance(declared, str): # unresolved forward reference
            if declared.strip() == "None":
                return ReturnShape(ShapeKind.VOID)

            return ReturnShape(ShapeKind.VALUE, declared)

        if cls._is_void(declared):
            return ReturnShape(ShapeKind.VOID)

        origin = get_origin(declared) or declared
        if inspect.isclass(origin) and issubclass(origin, collections.abc.Awaitable):
            value_type = cls._awaited_type(origin, get_args(declared))
            if cls._is_void(value_type):
                return ReturnShape(ShapeKind.ASYNC)

            return ReturnShape(ShapeKind.ASYNC_VALUE, value_type)

        return ReturnShape(ShapeKind.VALUE, declared)

    @classmethod
    def _is_void(cls, type_: Any) -> bool:
        return any(type_ is void for void in _VOID_TYPES)

    @classmethod
    def _awaited_type(cls, origin: type, args: tuple) -> Any:
        if not args:
            return Any # a bare generic carries an unknown value

        # Coroutine[YieldType, SendType, ReturnType]

        if issubclass(origin, collections.abc.Coroutine):
            return args[2] if len(args) == 3 else Any

        return args[0]

    # constructor

    def __init__(self, kind: ShapeKind, value_type: Any = None):
        self.kind = kind
        self.value_type = value_type if kind in (ShapeKind.VALUE, ShapeKind.ASYNC_VALUE) else None

    # public

    def is_async(self) -> bool:
        return self.kind in (ShapeKind.ASYNC, ShapeKind.ASYNC_VALUE)

    def has_value(self) -> bool:
        return self.kind in (ShapeKind.VALUE, ShapeKind.ASYNC_VALUE)

    # object

    def __eq__(self, other):
        if not isinstance(other, ReturnShape):
            return NotImplemented

        return self.kind is other.kind and self.value_type == other.value_type

    def __hash__(self):
        return hash((self.kind, repr(self.value_type)))

    def __str__(self):
        if self.has_value():
            return f"{self.kind.name}({getattr(self.value_type, '__name__', self.value_type)})"

        return self.kind.name

    __repr__ = __str__
