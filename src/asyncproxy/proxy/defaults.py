"""
Default values and default implementations of interfaces, used whenever a proxy has no target.
"""
from __future__ import annotations

import logging
import types
from typing import Annotated, Any, Optional, Type, get_args, get_origin

from asyncproxy.reflection import ReturnShape, TypeDescriptor

from .invocation import Completed

_ZERO_VALUES = {
    bool: False,
    int: 0,
    float: 0.0,
    complex: 0j,
    str: "",
    bytes: b"",
    tuple: (),
    frozenset: frozenset(),
}

def default_value(type_: Any) -> Any:
    """
    return the zero value of a type. Immutable builtin scalars map to their empty value,
    everything else - including optionals, unions, containers and classes - to None.

    Args:
        type_: the type

    Returns:
        Any: the default value
    """
    supertype = getattr(type_, "__supertype__", None) # NewType
    if supertype is not None:
        return default_value(supertype)

    if get_origin(type_) is Annotated:
        return default_value(get_args(type_)[0])

    try:
        return _ZERO_VALUES.get(type_)
    except TypeError: # unhashable annotation
        return None

def default_result(shape: ReturnShape) -> Any:
    """
    return the result a method of the given shape produces if there is no implementation.
    Asynchronous shapes result in an already completed awaitable.

    Args:
        shape: the return shape

    Returns:
        Any: the result
    """
    value = default_value(shape.value_type) if shape.has_value() else None

    return Completed(value) if shape.is_async() else value

class DefaultImplementationFactory:
    """
    Creates implementations of interfaces whose methods just return default values.
    """
    # class properties

    logger = logging.getLogger(__name__)

    # class methods

    @classmethod
    def create(cls, contract: Type, methods: list[TypeDescriptor.MethodDescriptor], owner: Optional[Type] = None) -> object:
        """
        create an instance of a new subclass of the contract implementing all passed methods with defaults.
        If an owner is supplied, the new class is attached to it as the attribute "Defaults".

        Args:
            contract: the interface
            methods: the methods to implement
            owner: the proxy class

        Returns:
            object: the default implementation
        """
        qualname = f"{owner.__qualname__}.Defaults" if owner is not None else f"{contract.__qualname__}__Defaults"

        def __init__(self):
            pass

        namespace = {
            "__slots__": (),
            "__module__": contract.__module__,
            "__qualname__": qualname,
            "__init__": __init__
        }

        for method in methods:
            namespace[method.name] = method.transfer(cls._make_default(method), qualname)

        defaults_type = types.new_class(qualname.rsplit(".", 1)[-1], (contract,), exec_body=lambda ns: ns.update(namespace))

        if owner is not None:
            owner.Defaults = defaults_type

        cls.logger.debug("created default implementation %s", qualname)

        return defaults_type()

    @classmethod
    def _make_default(cls, method: TypeDescriptor.MethodDescriptor):
        result = default_result(method.shape)

        def default(self, *args, **kwargs):
            return result

        return default
