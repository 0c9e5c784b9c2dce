"""Event routing: decoded event -> at most one registered handler, in the background."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import Any

from ghwebhook.errors import ConfigurationError
from ghwebhook.events import EVENT_CLASSES, Event, event_class_for, parse_webhook
from ghwebhook.log_context import set_log_context

logger = logging.getLogger(__name__)

EventHandler = Callable[[Any], Awaitable[None] | None]
HandlerKey = str | type[Event]


def _resolve_key(key: HandlerKey) -> type[Event]:
    if isinstance(key, str):
        cls = event_class_for(key)
    elif isinstance(key, type) and key in EVENT_CLASSES:
        cls = key
    else:
        cls = None
    if cls is None:
        msg = f"No such webhook event type: {key!r}"
        raise ConfigurationError(msg)
    return cls


class HandlerTable:
    """Read-only route table with one slot per supported event class.

    Keys may be ``X-GitHub-Event`` tags (``"push"``) or `Event` subclasses
    (``PushEvent``). Every class the decoder can produce has a slot; slots
    without a handler hold ``None`` and mean "ignore this event".
    """

    def __init__(
        self,
        handlers: Mapping[HandlerKey, EventHandler] | None = None,
        **by_tag: EventHandler,
    ) -> None:
        routes: dict[type[Event], EventHandler | None] = dict.fromkeys(EVENT_CLASSES)
        for key, handler in [*(handlers or {}).items(), *by_tag.items()]:
            cls = _resolve_key(key)
            if routes[cls] is not None:
                msg = f"Duplicate handler for event type {cls.event_type!r}"
                raise ConfigurationError(msg)
            if not callable(handler):
                msg = f"Handler for {cls.event_type!r} is not callable"
                raise ConfigurationError(msg)
            routes[cls] = handler
        self._routes = MappingProxyType(routes)

    def get(self, event_cls: type[Event]) -> EventHandler | None:
        """Return the handler for *event_cls*; KeyError for classes outside the table."""
        return self._routes[event_cls]

    def registered(self) -> list[str]:
        """Tags with a handler attached."""
        return [cls.event_type for cls, h in self._routes.items() if h is not None]

    def __len__(self) -> int:
        return len(self.registered())


class EventDispatcher:
    """Decodes deliveries and runs their handler in a tracked background task.

    Handler failures stay inside the task: they are logged and never reach the
    HTTP layer or the event loop's default exception handler. Plain functions
    run in a worker thread so blocking code cannot stall request handling.
    """

    def __init__(self, handlers: HandlerTable | None = None) -> None:
        self._handlers = handlers if handlers is not None else HandlerTable()
        self._background_tasks: set[asyncio.Task[None]] = set()

    @property
    def handlers(self) -> HandlerTable:
        return self._handlers

    @property
    def pending(self) -> int:
        """Number of handler tasks still running."""
        return len(self._background_tasks)

    def decode(self, event_type: str, raw: bytes) -> Event:
        """Decode *raw* as *event_type*. Raises `DecodeError`."""
        return parse_webhook(event_type, raw)

    def dispatch(self, event_type: str, raw: bytes) -> asyncio.Task[None] | None:
        """Decode synchronously, then hand the event to `submit`.

        Decoding errors propagate to the caller as `DecodeError`; nothing is
        scheduled in that case.
        """
        return self.submit(self.decode(event_type, raw))

    def submit(self, event: Event) -> asyncio.Task[None] | None:
        """Schedule the handler registered for *event*, if any.

        Returns the background task, or None when the event type is ignored.
        """
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.debug("No handler registered for %s, ignoring", event.event_type)
            return None
        task = asyncio.create_task(
            self._safe_invoke(handler, event),
            name=f"ghwebhook-{event.event_type}",
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def _safe_invoke(self, handler: EventHandler, event: Event) -> None:
        """Run *handler* with exception protection."""
        set_log_context(operation="dispatch")
        try:
            if inspect.iscoroutinefunction(handler):
                await handler(event)
            else:
                result = await asyncio.to_thread(handler, event)
                if inspect.iscoroutine(result):
                    await result
        except Exception:
            logger.exception("Handler for %s failed", event.event_type)
        else:
            logger.debug("Handler for %s finished", event.event_type)

    async def drain(self, timeout: float = 30.0) -> None:
        """Wait for in-flight handlers, giving up after *timeout* seconds."""
        if not self._background_tasks:
            return
        logger.info("Waiting for %d webhook handler(s) to finish", len(self._background_tasks))
        _done, still_running = await asyncio.wait(set(self._background_tasks), timeout=timeout)
        if still_running:
            logger.warning("Drain timeout, %d handler(s) still running", len(still_running))
