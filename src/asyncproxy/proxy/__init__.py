"""
Dynamic proxies with a uniform, awaitable based interception protocol.
"""
from .exceptions import ProxyException, ContractException, InvalidAsyncException
from .invocation import Invocation, InvocationHandler, Completed, normalize, discard
from .synchronizer import Synchronizer
from .defaults import DefaultImplementationFactory, default_value, default_result
from .proxy import AsyncProxy, ContractDescriptor, ProxyTypeBuilder, Handler, create_proxy

__all__ = [
    # exceptions

    "ProxyException",
    "ContractException",
    "InvalidAsyncException",

    # invocation

    "Invocation",
    "InvocationHandler",
    "Completed",
    "normalize",
    "discard",
    "Synchronizer",

    # defaults

    "DefaultImplementationFactory",
    "default_value",
    "default_result",

    # proxy

    "AsyncProxy",
    "ContractDescriptor",
    "ProxyTypeBuilder",
    "Handler",
    "create_proxy",
]
