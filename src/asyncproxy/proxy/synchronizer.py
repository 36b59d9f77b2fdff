"""
Blocking adaptation of normalized results for methods that return synchronously.
"""
from __future__ import annotations

import asyncio
import atexit
import inspect
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Optional

from asyncproxy.configuration import configuration
from asyncproxy.threading import ThreadLocal

from .exceptions import InvalidAsyncException
from .invocation import Completed

class Synchronizer:
    """
    The Synchronizer turns the awaitable returned by a handler into a plain value.

    * plain values and Completed instances are returned immediately, without touching any event loop
    * if the calling thread does not run an event loop, the awaitable is run on an event loop owned by this thread
    * if the calling thread runs an event loop, the awaitable is run on a shared background loop while the caller blocks
    * if the calling thread is one of the synchronizer threads, the awaitable is run on a fresh loop in a helper thread,
      since the loop of the calling thread is blocked by the caller
    """
    # class properties

    logger = logging.getLogger(__name__)

    loops = ThreadLocal[asyncio.AbstractEventLoop](asyncio.new_event_loop)
    owned = ThreadLocal[bool]()

    _lock = threading.Lock()
    _loop: Optional[asyncio.AbstractEventLoop] = None
    _thread: Optional[threading.Thread] = None

    # class methods

    @classmethod
    def timeout(cls) -> Optional[float]:
        return configuration().get("asyncproxy.timeout", float)

    @classmethod
    def resolve(cls, result: Any, timeout: Optional[float] = None) -> Any:
        """
        wait for the result of a handler

        Args:
            result: a plain value or an awaitable
            timeout: maximum number of seconds to wait, defaults to the configured "asyncproxy.timeout"

        Returns:
            Any: the value
        """
        if isinstance(result, Completed):
            return result.result()

        if not inspect.isawaitable(result):
            return result

        if timeout is None:
            timeout = cls.timeout()

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is None:
            return cls._run_local(result, timeout)

        if isinstance(result, asyncio.Future):
            raise InvalidAsyncException(f"cannot block on {result!r} while its event loop is running in the calling thread")

        if cls.owned.get():
            return cls._run_nested(result, timeout)

        return cls._run_background(result, timeout)

    # internal

    @classmethod
    async def _wait(cls, awaitable: Awaitable, timeout: Optional[float]) -> Any:
        if timeout is None:
            return await awaitable

        return await asyncio.wait_for(awaitable, timeout)

    @classmethod
    def _run_local(cls, awaitable: Awaitable, timeout: Optional[float]) -> Any:
        loop = cls.loops.get()
        if loop.is_closed():
            cls.loops.clear()
            loop = cls.loops.get()

        return loop.run_until_complete(cls._wait(awaitable, timeout))

    @classmethod
    def _run_background(cls, awaitable: Awaitable, timeout: Optional[float]) -> Any:
        future = asyncio.run_coroutine_threadsafe(cls._wait(awaitable, timeout), cls._background_loop())

        try:
            return future.result(timeout)
        except TimeoutError:
            future.cancel()
            raise

    @classmethod
    def _run_owned(cls, awaitable: Awaitable, timeout: Optional[float]) -> Any:
        cls.owned.set(True)

        return asyncio.run(cls._wait(awaitable, timeout))

    @classmethod
    def _run_nested(cls, awaitable: Awaitable, timeout: Optional[float]) -> Any:
        cls.logger.debug("run nested synchronous call on a helper thread")

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="asyncproxy-nested") as executor:
            return executor.submit(cls._run_owned, awaitable, timeout).result()

    @classmethod
    def _serve(cls, loop: asyncio.AbstractEventLoop):
        cls.owned.set(True)

        loop.run_forever()

    @classmethod
    def _background_loop(cls) -> asyncio.AbstractEventLoop:
        with cls._lock:
            if cls._loop is None:
                cls.logger.debug("start background event loop")

                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=cls._serve, args=(loop,), name="asyncproxy-synchronizer", daemon=True)
                thread.start()

                cls._loop = loop
                cls._thread = thread

            return cls._loop

    @classmethod
    def shutdown(cls):
        """
        stop the background loop and close all event loops created so far
        """
        with cls._lock:
            loop, thread = cls._loop, cls._thread
            cls._loop = cls._thread = None

        if loop is not None:
            loop.call_soon_threadsafe(loop.stop)
            thread.join(timeout=1.0)
            if not thread.is_alive():
                loop.close()

        for local in cls.loops.drain():
            if not local.is_running():
                local.close()

        cls.loops.clear()

atexit.register(Synchronizer.shutdown)
