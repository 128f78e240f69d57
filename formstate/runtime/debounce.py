# formstate/runtime/debounce.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Dict, Optional, Set, Tuple

from formstate.interfaces.types import Handler

logger = logging.getLogger(__name__)


class Debouncer:
    """
    Coalesces a burst of calls into a single delayed call carrying only the
    latest arguments. Owns at most one pending timer; every trigger cancels it
    before arming a new one, so a superseded call never fires.

    Coroutine handlers are scheduled as tasks on the same loop.
    """

    def __init__(
        self,
        handler: Handler,
        delay_ms: float,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        """
        :param handler: Callable invoked with the latest trigger arguments.
        :param delay_ms: Quiet period after the latest trigger before firing.
        :param loop: Event loop to schedule on. Defaults to the running loop at
                     trigger time.
        """
        if delay_ms < 0:
            raise ValueError("delay_ms must be non-negative")
        self._handler = handler
        self._delay = delay_ms / 1000
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None
        self._pending_args: Optional[Tuple[Tuple[Any, ...], Dict[str, Any]]] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """Whether a call is armed and has not fired yet."""
        return self._handle is not None

    @property
    def delay_ms(self) -> float:
        return self._delay * 1000

    def trigger(self, *args: Any, **kwargs: Any) -> None:
        """
        Schedule the handler ``delay_ms`` after this call, cancelling any call
        scheduled earlier.
        """
        loop = self._loop or asyncio.get_running_loop()
        if self._handle is not None:
            logger.debug("Superseding pending call to %r", self._handler)
            self._handle.cancel()
        self._pending_args = (args, kwargs)
        self._handle = loop.call_later(self._delay, self._fire)

    __call__ = trigger

    def cancel(self) -> None:
        """Drop the pending call, if any. It will never fire."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending_args = None

    def flush(self) -> None:
        """Fire the pending call immediately instead of waiting for its timer."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._fire()

    async def wait(self) -> None:
        """Wait for coroutine handlers started by this debouncer to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _fire(self) -> None:
        self._handle = None
        if self._pending_args is None:
            return
        args, kwargs = self._pending_args
        self._pending_args = None
        result = self._handler(*args, **kwargs)
        if inspect.isawaitable(result):
            loop = self._loop or asyncio.get_running_loop()
            task = asyncio.ensure_future(result, loop=loop)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Debounced handler %r failed", self._handler, exc_info=task.exception())


def debounce(handler: Handler, delay_ms: float) -> Debouncer:
    """
    Wrap ``handler`` in a Debouncer. Calling the result behaves like
    ``Debouncer.trigger``.
    """
    return Debouncer(handler, delay_ms)
