"""
This module provides a TypeDescriptor class that allows introspection of contract types,
including their methods, decorators, signatures and return shapes. It supports caching for performance
"""
from __future__ import annotations

import asyncio
import inspect
import threading
from inspect import signature
from types import FunctionType
from typing import Callable, Type, Dict, Optional, Any, get_type_hints, get_origin
from weakref import WeakKeyDictionary

from .shape import ReturnShape

def get_annotations(obj) -> Dict[str, Any]:
    """
    return a copy of the raw annotations of a function, or an empty dictionary if they cannot be evaluated
    """
    try:
        return dict(getattr(obj, "__annotations__", None) or {})
    except NameError: # deferred annotations referring to undefined names
        return {}

def _resolve_annotation(annotation: Any, globalns: dict) -> Any:
    if not isinstance(annotation, str):
        return annotation

    def holder():
        pass

    holder.__annotations__ = {"return": annotation}

    try:
        return get_type_hints(holder, globalns=globalns, localns={})["return"]
    except Exception:
        return annotation # unresolvable, keep the raw string

def get_safe_type_hints(obj) -> Dict[str, Any]:
    """
    Safe wrapper around typing.get_type_hints that never raises.
    If the hints cannot be resolved as a whole, every annotation is resolved on its own,
    and the ones referring to unknown names are returned as their raw strings.
    """
    globalns = getattr(obj, "__globals__", {})

    try:
        return get_type_hints(obj, globalns=globalns, localns={})
    except Exception:
        return {name: _resolve_annotation(annotation, globalns) for name, annotation in get_annotations(obj).items()}

class DecoratorDescriptor:
    """
    A DecoratorDescriptor covers the decorator - a callable - and the passed arguments
    """
    __slots__ = [
        "decorator",
        "args"
    ]

    def __init__(self, decorator: Callable, *args):
        self.decorator = decorator
        self.args = args

    def __str__(self):
        return f"@{self.decorator.__name__}({', '.join(map(str, self.args))})"

class Decorators:
    """
    Utility class that caches decorators ( Python does not have a feature for this )
    """
    @classmethod
    def add(cls, func_or_class, decorator: Callable, *args):
        """
        Remember the decorator
        Args:
            func_or_class: a function or class
            decorator: the decorator
            *args: any arguments supplied to the decorator
        """
        current = func_or_class.__dict__.get('__decorators__')
        if current is None:
            setattr(func_or_class, '__decorators__', [DecoratorDescriptor(decorator, *args)])
        else:
            current.append(DecoratorDescriptor(decorator, *args))

    @classmethod
    def has_decorator(cls, func_or_class, callable: Callable) -> bool:
        """
        Return True, if the function or class is decorated with the decorator
        Args:
            func_or_class: a function or class
            callable: the decorator

        Returns:
            bool: the result
        """
        return any(decorator.decorator is callable for decorator in Decorators.get(func_or_class))

    @classmethod
    def get(cls, func_or_class) -> list[DecoratorDescriptor]:
        """
        return the list of decorators associated with the given function or class
        Args:
            func_or_class: the function or class

        Returns:
            list[DecoratorDescriptor]: the list
        """
        if inspect.ismethod(func_or_class):
            func_or_class = func_or_class.__func__  # unwrap bound method

        return func_or_class.__dict__.get('__decorators__', [])

def interface():
    """
    Classes decorated with @interface() are proxied as interfaces, even if they contain concrete methods.
    """
    def decorator(cls):
        Decorators.add(cls, interface)

        return cls

    return decorator

class TypeDescriptor:
    """
    This class provides a way to introspect contract types, their methods, decorators, and type hints.
    """

    # static

    excluded_methods = frozenset([
        "__new__",
        "__init__",
        "__init_subclass__",
        "__class_getitem__",
        "__subclasshook__",
        "__del__",
        "__getattr__",
        "__getattribute__",
        "__setattr__",
        "__delattr__",
    ])

    # inner classes

    class ParameterDescriptor:
        __slots__ = [
            "name",
            "type",
            "kind"
        ]

        def __init__(self, name: str, type: Type, kind):
            self.name = name
            self.type = type
            self.kind = kind

    class MethodDescriptor:
        """
        This class represents a method of a contract, including its signature, parameter types and return shape.
        """
        # constructor

        def __init__(self, cls, name: str, method: Callable):
            self.clazz = cls
            self.name = name
            self.method = method
            self.signature = signature(method)
            self.param_types : list[Type] = []
            self.params: list[TypeDescriptor.ParameterDescriptor] = []

            type_hints = get_safe_type_hints(method)

            for index, (param_name, param) in enumerate(self.signature.parameters.items()):
                if index > 0: # self
                    self.params.append(TypeDescriptor.ParameterDescriptor(param_name, type_hints.get(param_name, object), param.kind))
                    self.param_types.append(type_hints.get(param_name, object))

            self.return_type = type_hints.get('return', None)
            self.shape = ReturnShape.classify(method, type_hints)

        # public

        def is_async(self) -> bool:
            """
            return true if the method is asynchronous, which covers coroutine functions as well
            as plain functions declared to return an awaitable

            Returns:
                bool: async flag
            """
            return self.shape.is_async()

        def is_abstract(self) -> bool:
            return getattr(self.method, "__isabstractmethod__", False)

        def is_final(self) -> bool:
            return getattr(self.method, "__final__", False)

        def is_coroutine(self) -> bool:
            """
            return True if the method is declared with async def. Plain functions declared to return
            an awaitable are asynchronous as well, but hand out the awaitable as soon as they are called.
            """
            return inspect.iscoroutinefunction(self.method)

        def returns_future(self) -> bool:
            """
            return True if the declared return type is an asyncio.Future or a subclass like asyncio.Task
            """
            origin = get_origin(self.return_type) or self.return_type

            return inspect.isclass(origin) and issubclass(origin, asyncio.Future)

        def transfer(self, function: Callable, owner: str) -> Callable:
            """
            copy name, docstring, annotations and signature of this method to a generated function

            Args:
                function: the generated function
                owner: the qualified name of the generated class

            Returns:
                Callable: the passed function
            """
            function.__name__ = self.method.__name__
            function.__qualname__ = f"{owner}.{self.name}"
            function.__module__ = self.method.__module__
            function.__doc__ = self.method.__doc__
            function.__annotations__ = get_annotations(self.method)
            function.__signature__ = self.signature

            return function

        def __str__(self):
            return f"Method({self.clazz.__name__}.{self.name}: {self.shape})"

    # class properties

    _cache = WeakKeyDictionary()
    _lock = threading.RLock()

    # class methods

    @classmethod
    def for_type(cls, clazz: Type) -> TypeDescriptor:
        """
        Returns a TypeDescriptor for the given class, using a cache to avoid redundant introspection.
        """
        descriptor = cls._cache.get(clazz)
        if descriptor is None:
            with cls._lock:
                descriptor = cls._cache.get(clazz)
                if descriptor is None:
                    descriptor = TypeDescriptor(clazz)
                    cls._cache[clazz] = descriptor

        return descriptor

    # constructor

    def __init__(self, cls):
        self.cls = cls
        self.methods: Dict[str, TypeDescriptor.MethodDescriptor] = {}
        self.local_methods: Dict[str, TypeDescriptor.MethodDescriptor] = {}

        # walk the mro from the root, so that overrides replace inherited methods but keep their position

        for clazz in reversed(cls.__mro__):
            if self._is_framework_class(clazz):
                continue

            for name, attr in clazz.__dict__.items():
                if isinstance(attr, FunctionType):
                    method = TypeDescriptor.MethodDescriptor(clazz, name, attr)
                    self.methods[name] = method
                    if clazz is cls:
                        self.local_methods[name] = method
                elif name in self.methods:
                    del self.methods[name] # hidden by a non function attribute

    # internal

    def _is_framework_class(self, cls):
        if cls is object:
            return True

        module = getattr(cls, "__module__", "")

        return module in ("builtins", "typing", "abc", "typing_extensions")

    # public

    def is_interface(self) -> bool:
        """
        Return True if the class should be treated as an interface, which is the case for
        protocols, classes decorated with @interface() and classes that contain only abstract methods.
        """
        if any(Decorators.has_decorator(clazz, interface) for clazz in self.cls.__mro__):
            return True

        if getattr(self.cls, "_is_protocol", False):
            return True

        methods = [method for method in self.get_methods() if method.name not in self.excluded_methods]

        return len(methods) > 0 and all(method.is_abstract() for method in methods)

    def is_final(self) -> bool:
        return getattr(self.cls, "__final__", False)

    def get_methods(self, local = False) ->  list[TypeDescriptor.MethodDescriptor]:
        """
        Returns a list of MethodDescriptor objects for the class.
        If local is True, only returns methods defined in the class itself, otherwise includes inherited methods.
        """
        if local:
            return list(self.local_methods.values())
        else:
            return list(self.methods.values())

    def get_method(self, name: str, local = False) -> Optional[TypeDescriptor.MethodDescriptor]:
        """
        Returns a MethodDescriptor for the method with the given name.
        If local is True, only searches for methods defined in the class itself, otherwise includes inherited methods.
        """
        if local:
            return self.local_methods.get(name, None)
        else:
            return self.methods.get(name, None)

    def get_interceptable_methods(self, interface: bool) -> list[TypeDescriptor.MethodDescriptor]:
        """
        Returns the methods a proxy has to intercept, in order of discovery.
        Lifecycle and attribute access hooks are never intercepted. For classes, methods marked with
        @final are skipped as well and keep their original behavior.

        Args:
            interface: True, if the type is proxied as an interface

        Returns:
            list[TypeDescriptor.MethodDescriptor]: the methods
        """
        return [
            method for method in self.methods.values()
            if method.name not in self.excluded_methods and (interface or not method.is_final())
        ]
