from __future__ import annotations

import asyncio
import threading
import unittest
from unittest import mock

from asyncproxy.proxy import Synchronizer, Completed, InvalidAsyncException


async def compute(value: int = 42) -> int:
    await asyncio.sleep(0.001)
    return value

async def fail() -> int:
    await asyncio.sleep(0)
    raise ValueError("failed")

class TestSynchronizer(unittest.TestCase):
    def test_plain(self):
        self.assertEqual(Synchronizer.resolve(5), 5)
        self.assertIsNone(Synchronizer.resolve(None))

    def test_completed(self):
        self.assertEqual(Synchronizer.resolve(Completed("done")), "done")

    def test_coroutine(self):
        self.assertEqual(Synchronizer.resolve(compute()), 42)
        self.assertEqual(Synchronizer.resolve(compute(1)), 1)

    def test_error(self):
        with self.assertRaises(ValueError):
            Synchronizer.resolve(fail())

    def test_timeout(self):
        with self.assertRaises(TimeoutError):
            Synchronizer.resolve(asyncio.sleep(1.0), timeout=0.01)

    def test_configured_timeout(self):
        with mock.patch.object(Synchronizer, "timeout", return_value=0.01):
            with self.assertRaises(TimeoutError):
                Synchronizer.resolve(asyncio.sleep(1.0))

    def test_threads(self):
        results = []

        def run(value: int):
            results.append(Synchronizer.resolve(compute(value)))

        threads = [threading.Thread(target=run, args=(i,)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(results), [0, 1, 2, 3])

class TestSynchronizerInLoop(unittest.IsolatedAsyncioTestCase):
    async def test_coroutine_on_background_loop(self):
        self.assertEqual(Synchronizer.resolve(compute()), 42)

    async def test_completed(self):
        self.assertEqual(Synchronizer.resolve(Completed(1)), 1)

    async def test_future_of_running_loop(self):
        future = asyncio.get_running_loop().create_future()

        with self.assertRaises(InvalidAsyncException):
            Synchronizer.resolve(future)

    async def test_nested(self):
        async def outer() -> int:
            await asyncio.sleep(0)

            return Synchronizer.resolve(compute(1)) + 1

        self.assertEqual(Synchronizer.resolve(outer()), 2)

    async def test_timeout_cancels(self):
        events = []

        async def slow():
            await asyncio.sleep(0.2)
            events.append("done")

        with self.assertRaises(TimeoutError):
            Synchronizer.resolve(slow(), timeout=0.01)

        await asyncio.sleep(0.3)

        self.assertEqual(events, [])


if __name__ == '__main__':
    unittest.main()
