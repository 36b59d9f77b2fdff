"""
Runtime synthesis of proxy classes for interfaces and classes.

A proxy class is created once per contract. It derives from the contract and overrides every
interceptable method with a function that routes the call through an invocation handler.
The handler may call Invocation.proceed() to reach the original behavior, which is either
the supplied target, the inherited implementation or a default implementation.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import types
from typing import Any, Callable, Dict, Optional, Type, TypeVar, Union

from asyncproxy.reflection import TypeDescriptor

from .defaults import DefaultImplementationFactory, default_result
from .exceptions import ContractException, ProxyException
from .invocation import Invocation, InvocationHandler, normalize, discard
from .synchronizer import Synchronizer

T = TypeVar("T")

Handler = Union[InvocationHandler, Callable[[Invocation], Any]]

class ContractDescriptor:
    """
    A ContractDescriptor covers everything known about a proxied type: the interceptable methods,
    the synthesized proxy class and - for interfaces - the default implementation.
    Descriptors are created once per type and live as long as the process.
    """
    __slots__ = [
        "contract",
        "interface",
        "methods",
        "proxy_type",
        "defaults"
    ]

    # class properties

    logger = logging.getLogger(__name__)

    _cache: Dict[Type, ContractDescriptor] = {}
    _lock = threading.RLock()

    # class methods

    @classmethod
    def for_type(cls, contract: Type) -> ContractDescriptor:
        """
        return the descriptor for the given type, synthesizing the proxy class on first access

        Args:
            contract: an interface or class

        Returns:
            ContractDescriptor: the descriptor
        """
        descriptor = cls._cache.get(contract)
        if descriptor is None:
            with cls._lock:
                descriptor = cls._cache.get(contract)
                if descriptor is None:
                    descriptor = ContractDescriptor(contract)
                    cls._cache[contract] = descriptor

        return descriptor

    # constructor

    def __init__(self, contract: Type):
        if not inspect.isclass(contract):
            raise ContractException(f"{contract!r} is not a class")

        type_descriptor = TypeDescriptor.for_type(contract)

        if type_descriptor.is_final():
            raise ContractException(f"{contract.__qualname__} is final")

        self.contract = contract
        self.interface = type_descriptor.is_interface()
        self.methods = type_descriptor.get_interceptable_methods(self.interface)

        if not self.interface and len(self.methods) == 0:
            raise ContractException(f"class {contract.__qualname__} does not declare any overridable methods")

        self.logger.debug("create proxy type for %s %s", "interface" if self.interface else "class", contract.__qualname__)

        self.proxy_type = ProxyTypeBuilder(self).build()
        self.defaults = DefaultImplementationFactory.create(contract, self.methods, self.proxy_type) if self.interface else None

    # public

    def get_method(self, name: str) -> Optional[TypeDescriptor.MethodDescriptor]:
        return next((method for method in self.methods if method.name == name), None)

    def __str__(self):
        return f"ContractDescriptor({self.contract.__qualname__})"

class ProxyTypeBuilder:
    """
    Builds the proxy class for a ContractDescriptor.
    """
    __slots__ = [
        "descriptor",
        "name",
        "qualname"
    ]

    # class properties

    logger = logging.getLogger(__name__)

    # constructor

    def __init__(self, descriptor: ContractDescriptor):
        self.descriptor = descriptor
        self.name = f"{descriptor.contract.__name__}__Proxy"
        self.qualname = f"{descriptor.contract.__qualname__}__Proxy"

    # public

    def build(self) -> Type:
        descriptor = self.descriptor
        contract = descriptor.contract

        proxy_type = None # assigned below, referenced by the constructor

        def __init__(self, target=None, handler=None, /, *args, **kwargs):
            if handler is None:
                raise ProxyException(f"{contract.__qualname__} proxy requires a handler")

            if descriptor.interface:
                if args or kwargs:
                    raise ContractException(f"interface {contract.__qualname__} does not accept constructor arguments")

                if target is None:
                    target = descriptor.defaults
            elif target is None:
                target = super(proxy_type, self) # proceed calls the inherited implementation

            object.__setattr__(self, "_proxy_target", target)
            object.__setattr__(self, "_proxy_handler", handler)

            if not descriptor.interface:
                super(proxy_type, self).__init__(*args, **kwargs)

        __init__.__qualname__ = f"{self.qualname}.__init__"

        namespace = {
            "__slots__": ("_proxy_target", "_proxy_handler"),
            "__module__": contract.__module__,
            "__qualname__": self.qualname,
            "__proxy_descriptor__": descriptor,
            "__init__": __init__
        }

        for method in descriptor.methods:
            self.logger.debug("intercept %s.%s as %s", contract.__qualname__, method.name, method.shape)

            namespace[method.name] = method.transfer(self._make_method(method), self.qualname)

        try:
            proxy_type = types.new_class(self.name, (contract,), exec_body=lambda ns: ns.update(namespace))
        except TypeError as e:
            raise ContractException(f"cannot derive a proxy from {contract.__qualname__}: {e}") from e

        abstract = getattr(proxy_type, "__abstractmethods__", None)
        if abstract:
            raise ContractException(f"{contract.__qualname__} declares abstract members that are not methods: {', '.join(sorted(abstract))}")

        return proxy_type

    # internal

    def _make_proceed(self, method: TypeDescriptor.MethodDescriptor) -> Callable[[Any], Callable]:
        name = method.name

        if not self.descriptor.interface and method.is_abstract():
            default = default_result(method.shape)

            def no_implementation(*args, **kwargs):
                return default

            def resolve(proxy) -> Callable:
                target = proxy._proxy_target
                if isinstance(target, super):
                    return no_implementation

                return getattr(target, name)
        else:
            def resolve(proxy) -> Callable:
                return getattr(proxy._proxy_target, name)

        return resolve

    def _make_method(self, method: TypeDescriptor.MethodDescriptor) -> Callable:
        contract = self.descriptor.contract
        shape = method.shape
        proceed = self._make_proceed(method)

        if method.is_coroutine():
            async def intercepted(self, *args, **kwargs):
                invocation = Invocation(contract, method, list(args), kwargs, proceed(self))

                result = self._proxy_handler(invocation)
                if inspect.isawaitable(result):
                    result = await result

                return result if shape.has_value() else None
        elif shape.is_async():
            # the handler runs right away and the awaitable is handed out, like the contract method does

            adapt = normalize if shape.has_value() else discard
            future = method.returns_future()

            def intercepted(self, *args, **kwargs):
                invocation = Invocation(contract, method, list(args), kwargs, proceed(self))

                result = adapt(self._proxy_handler(invocation))

                return asyncio.ensure_future(result) if future else result
        else:
            def intercepted(self, *args, **kwargs):
                invocation = Invocation(contract, method, list(args), kwargs, proceed(self))

                result = Synchronizer.resolve(self._proxy_handler(invocation))

                return result if shape.has_value() else None

        return intercepted

class AsyncProxy:
    """
    Factory for proxies.

    Proxies of interfaces delegate proceeded calls to the supplied target, or to a default
    implementation returning zero values if no target is given.
    Proxies of classes delegate to the supplied target, or to the inherited implementation otherwise.
    """
    # class properties

    logger = logging.getLogger(__name__)

    # class methods

    @classmethod
    def create(cls, contract: Type[T], handler: Handler, target: Optional[T] = None, /, *args, **kwargs) -> T:
        """
        create a proxy

        Args:
            contract: the interface or class
            handler: an InvocationHandler or a callable accepting an Invocation, returning an awaitable or a plain value
            target: optional object receiving proceeded calls
            *args: constructor arguments of a class contract
            **kwargs: constructor keyword arguments of a class contract

        Returns:
            T: the proxy, an instance of the contract
        """
        descriptor = ContractDescriptor.for_type(contract)

        return descriptor.proxy_type(target, cls.handler_function(handler), *args, **kwargs)

    @classmethod
    def handler_function(cls, handler: Handler) -> Callable[[Invocation], Any]:
        if isinstance(handler, InvocationHandler):
            return handler.invoke

        if callable(handler):
            return handler

        raise ProxyException(f"{handler!r} is neither an InvocationHandler nor callable")

    @classmethod
    def is_proxy(cls, instance: Any) -> bool:
        return isinstance(getattr(type(instance), "__proxy_descriptor__", None), ContractDescriptor)

    @classmethod
    def get_descriptor(cls, instance: Any) -> ContractDescriptor:
        if not cls.is_proxy(instance):
            raise ProxyException(f"{instance!r} is not a proxy")

        return type(instance).__proxy_descriptor__

    @classmethod
    def get_target(cls, instance: Any) -> Any:
        """
        return the object receiving proceeded calls: the supplied target, the default implementation of an interface,
        or the proxy itself if calls are delegated to the inherited implementation
        """
        cls.get_descriptor(instance)

        target = instance._proxy_target

        return instance if isinstance(target, super) else target

    @classmethod
    def get_handler(cls, instance: Any) -> Callable[[Invocation], Any]:
        cls.get_descriptor(instance)

        return instance._proxy_handler

def create_proxy(contract: Type[T], handler: Handler, target: Optional[T] = None, /, *args, **kwargs) -> T:
    """
    create a proxy for an interface or class, see AsyncProxy.create
    """
    return AsyncProxy.create(contract, handler, target, *args, **kwargs)
