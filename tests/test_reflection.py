from __future__ import annotations

import asyncio
import unittest
from typing import Any, Awaitable, Coroutine, NoReturn, final

from asyncproxy.reflection import TypeDescriptor, ReturnShape, ShapeKind, interface, Decorators

from handwritten import IHandWritten, IExtendedHandWritten, Greeter, Recorder, Template


class Base:
    def first(self) -> int:
        return 1

    def second(self) -> None:
        pass

    def __del__(self):
        pass

    @staticmethod
    def static() -> int:
        return 1

    @classmethod
    def clazz(cls) -> int:
        return 1

    @property
    def prop(self) -> int:
        return 1

    def _hidden(self) -> str:
        return ""

    @final
    def sealed(self) -> str:
        return ""

class Derived(Base):
    def second(self) -> None:
        pass

    def third(self, a: int, b: str = "") -> list[int]:
        return []

class Hiding(Derived):
    third = None

class Unresolved:
    def method(self, count: int, name: Missing) -> str:
        return ""

class Shapes:
    def void(self) -> None:
        pass

    def value(self) -> int:
        return 0

    def untyped(self):
        pass

    async def async_void(self) -> None:
        pass

    async def async_value(self) -> str:
        return ""

    async def async_untyped(self):
        pass

    def awaitable(self) -> Awaitable[int]:
        pass

    def awaitable_none(self) -> Awaitable[None]:
        pass

    def coroutine(self) -> Coroutine[Any, Any, str]:
        pass

    def future(self) -> asyncio.Future:
        pass

    def task(self) -> asyncio.Task[bool]:
        pass

    def bare(self) -> Awaitable:
        pass

    def no_return(self) -> NoReturn:
        raise Exception()

    def unresolved(self) -> Missing:
        pass

@interface()
class Marked:
    def concrete(self) -> int:
        return 1


class TestCollector(unittest.TestCase):
    def test_collect_class_methods(self):
        descriptor = TypeDescriptor.for_type(Derived)

        names = [method.name for method in descriptor.get_interceptable_methods(False)]

        self.assertEqual(names, ["first", "second", "_hidden", "third"])

    def test_collect_interface_methods(self):
        descriptor = TypeDescriptor.for_type(Derived)

        names = [method.name for method in descriptor.get_interceptable_methods(True)]

        self.assertEqual(names, ["first", "second", "_hidden", "sealed", "third"])

    def test_override_replaces_inherited(self):
        descriptor = TypeDescriptor.for_type(Derived)

        self.assertIs(descriptor.get_method("second").clazz, Derived)
        self.assertIs(descriptor.get_method("first").clazz, Base)
        self.assertEqual([method.name for method in descriptor.get_methods(local=True)], ["second", "third"])

    def test_hidden_by_attribute(self):
        descriptor = TypeDescriptor.for_type(Hiding)

        self.assertIsNone(descriptor.get_method("third"))

    def test_inherited_interface(self):
        descriptor = TypeDescriptor.for_type(IExtendedHandWritten)

        names = [method.name for method in descriptor.get_interceptable_methods(True)]

        self.assertEqual(names, [
            "get_string_async",
            "do_something_async",
            "do_something",
            "get_string",
            "sum",
            "sum_async",
            "get_date_time"
        ])

    def test_parameters(self):
        method = TypeDescriptor.for_type(Derived).get_method("third")

        self.assertEqual([param.name for param in method.params], ["a", "b"])
        self.assertEqual(method.param_types, [int, str])
        self.assertEqual(method.return_type, list[int])

    def test_partially_unresolved(self):
        method = TypeDescriptor.for_type(Unresolved).get_method("method")

        self.assertEqual(method.param_types, [int, "Missing"])
        self.assertIs(method.return_type, str)
        self.assertEqual(method.shape, ReturnShape(ShapeKind.VALUE, str))

    def test_cache(self):
        self.assertIs(TypeDescriptor.for_type(Derived), TypeDescriptor.for_type(Derived))

    def test_is_interface(self):
        self.assertTrue(TypeDescriptor.for_type(IHandWritten).is_interface())
        self.assertTrue(TypeDescriptor.for_type(IExtendedHandWritten).is_interface())
        self.assertTrue(TypeDescriptor.for_type(Greeter).is_interface())
        self.assertTrue(TypeDescriptor.for_type(Marked).is_interface())
        self.assertTrue(Decorators.has_decorator(Marked, interface))

        self.assertFalse(TypeDescriptor.for_type(Recorder).is_interface())
        self.assertFalse(TypeDescriptor.for_type(Template).is_interface())

    def test_final(self):
        descriptor = TypeDescriptor.for_type(Base)

        self.assertTrue(descriptor.get_method("sealed").is_final())
        self.assertFalse(descriptor.get_method("first").is_final())

class TestReturnShape(unittest.TestCase):
    def shape(self, name: str) -> ReturnShape:
        return TypeDescriptor.for_type(Shapes).get_method(name).shape

    def test_synchronous(self):
        self.assertEqual(self.shape("void"), ReturnShape(ShapeKind.VOID))
        self.assertEqual(self.shape("no_return"), ReturnShape(ShapeKind.VOID))
        self.assertEqual(self.shape("value"), ReturnShape(ShapeKind.VALUE, int))
        self.assertEqual(self.shape("untyped"), ReturnShape(ShapeKind.VALUE, Any))
        self.assertEqual(self.shape("unresolved"), ReturnShape(ShapeKind.VALUE, "Missing"))

    def test_coroutine_functions(self):
        self.assertEqual(self.shape("async_void"), ReturnShape(ShapeKind.ASYNC))
        self.assertEqual(self.shape("async_value"), ReturnShape(ShapeKind.ASYNC_VALUE, str))
        self.assertEqual(self.shape("async_untyped"), ReturnShape(ShapeKind.ASYNC_VALUE, Any))

    def test_awaitable_annotations(self):
        self.assertEqual(self.shape("awaitable"), ReturnShape(ShapeKind.ASYNC_VALUE, int))
        self.assertEqual(self.shape("awaitable_none"), ReturnShape(ShapeKind.ASYNC))
        self.assertEqual(self.shape("coroutine"), ReturnShape(ShapeKind.ASYNC_VALUE, str))
        self.assertEqual(self.shape("future"), ReturnShape(ShapeKind.ASYNC_VALUE, Any))
        self.assertEqual(self.shape("bare"), ReturnShape(ShapeKind.ASYNC_VALUE, Any))
        self.assertEqual(self.shape("task"), ReturnShape(ShapeKind.ASYNC_VALUE, bool))

    def test_flags(self):
        self.assertTrue(self.shape("async_void").is_async())
        self.assertFalse(self.shape("async_void").has_value())
        self.assertTrue(self.shape("value").has_value())
        self.assertFalse(self.shape("value").is_async())

        self.assertTrue(TypeDescriptor.for_type(Shapes).get_method("awaitable").is_async())

    def test_declaration(self):
        descriptor = TypeDescriptor.for_type(Shapes)

        self.assertTrue(descriptor.get_method("async_value").is_coroutine())
        self.assertFalse(descriptor.get_method("awaitable").is_coroutine())

        self.assertTrue(descriptor.get_method("task").returns_future())
        self.assertTrue(descriptor.get_method("future").returns_future())
        self.assertFalse(descriptor.get_method("awaitable").returns_future())
        self.assertFalse(descriptor.get_method("value").returns_future())

    def test_value_type_ignored_for_void(self):
        self.assertEqual(ReturnShape(ShapeKind.VOID, int), ReturnShape(ShapeKind.VOID))
        self.assertEqual(str(ReturnShape(ShapeKind.VALUE, int)), "VALUE(int)")


if __name__ == '__main__':
    unittest.main()
