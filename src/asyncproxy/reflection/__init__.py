"""
This module provides tools for dynamic introspection of contract types.
"""
from .shape import ReturnShape, ShapeKind
from .reflection import Decorators, DecoratorDescriptor, TypeDescriptor, interface, get_safe_type_hints

__all__ = [
    "ReturnShape",
    "ShapeKind",

    "Decorators",
    "DecoratorDescriptor",
    "TypeDescriptor",
    "interface",
    "get_safe_type_hints",
]
