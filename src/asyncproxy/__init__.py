"""
asyncproxy creates proxies of interfaces and classes at runtime, routing every call through an
invocation handler that sees synchronous and asynchronous methods the same way.
"""
from .reflection import interface, ReturnShape, ShapeKind
from .proxy import AsyncProxy, Invocation, InvocationHandler, Completed, ProxyException, ContractException, InvalidAsyncException, create_proxy

__all__ = [
    "interface",
    "ReturnShape",
    "ShapeKind",

    "AsyncProxy",
    "Invocation",
    "InvocationHandler",
    "Completed",
    "create_proxy",

    "ProxyException",
    "ContractException",
    "InvalidAsyncException",
]
