"""In-process pub/sub event bus for transcript maintenance events."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

import structlog

Handler = Callable[["ChainEvent", dict[str, Any]], None | Awaitable[None]]


class ChainEvent(StrEnum):
    """All event types published by :class:`~chainmend.transcript.Transcript`.

    Typed payload definitions for each event live in
    :mod:`chainmend.events.payloads`.

    **Payload schemas by event:**

    ``TRANSCRIPT_VALIDATED``
        :class:`~chainmend.events.payloads.TranscriptValidatedPayload`:
        ``session_id``, ``valid``, ``error_count``

    ``CHAIN_REPAIRED``
        :class:`~chainmend.events.payloads.ChainRepairedPayload`:
        ``session_id``, ``repair_count``

    ``MESSAGE_DELETED``
        :class:`~chainmend.events.payloads.MessageDeletedPayload`:
        ``session_id``, ``target_id``, ``deleted``, ``also_deleted``,
        ``relinked_count``

    ``MESSAGE_RESTORED``
        :class:`~chainmend.events.payloads.MessageRestoredPayload`:
        ``session_id``, ``message_id``, ``index``

    ``MESSAGES_STRIPPED``
        :class:`~chainmend.events.payloads.MessagesStrippedPayload`:
        ``session_id``, ``reason``, ``removed_count``

    ``TRANSCRIPT_SPLIT``
        :class:`~chainmend.events.payloads.TranscriptSplitPayload`:
        ``session_id``, ``new_session_id``, ``split_at``, ``moved_message_count``
    """

    TRANSCRIPT_VALIDATED = "transcript.validated"
    CHAIN_REPAIRED = "chain.repaired"
    MESSAGE_DELETED = "message.deleted"
    MESSAGE_RESTORED = "message.restored"
    MESSAGES_STRIPPED = "messages.stripped"
    TRANSCRIPT_SPLIT = "transcript.split"


class EventBus:
    """
    Simple in-process pub/sub event bus.

    Sync handlers run inline within ``publish()``. Async handlers become
    tasks on the running event loop, held by the bus until they finish, and
    are skipped when no loop is running. Handler exceptions, sync or async,
    are logged as ``event_handler_error`` and never reach the publisher.

    Example::

        bus = EventBus()

        def on_delete(event, payload):
            print(f"Deleted {payload['target_id']}")

        bus.subscribe(ChainEvent.MESSAGE_DELETED, on_delete)
        transcript = Transcript.from_records(records, event_bus=bus)
    """

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self._handlers: dict[ChainEvent, list[Handler]] = {}
        self._global_handlers: list[Handler] = []
        self._tasks: set[asyncio.Task[Any]] = set()
        self._logger = logger or structlog.get_logger("chainmend.events")

    def subscribe(self, event: ChainEvent, handler: Handler) -> None:
        """
        Register a handler for a specific event type.

        Args:
            event: The event type to listen for.
            handler: Callable accepting ``(event, payload)``. May be sync or async.
        """
        self._handlers.setdefault(event, []).append(handler)

    def subscribe_all(self, handler: Handler) -> None:
        """Register a handler for every event type."""
        self._global_handlers.append(handler)

    def unsubscribe(self, event: ChainEvent, handler: Handler) -> None:
        """Remove a previously registered handler. No-op if not found."""
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: ChainEvent, payload: dict[str, Any]) -> None:
        """
        Publish an event to all registered handlers.

        Args:
            event: The event type to publish.
            payload: Event-specific data dictionary.
        """
        all_handlers = list(self._handlers.get(event, [])) + list(self._global_handlers)
        for handler in all_handlers:
            try:
                result = handler(event, payload)
            except Exception as exc:
                self._log_handler_error(event, handler, exc)
                continue
            if asyncio.iscoroutine(result):
                self._schedule(event, handler, result)

    def _schedule(self, event: ChainEvent, handler: Handler, coro: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No running loop to schedule on
            coro.close()
            return
        task = loop.create_task(coro)
        self._tasks.add(task)

        def _done(finished: asyncio.Task[Any]) -> None:
            self._tasks.discard(finished)
            if finished.cancelled():
                return
            exc = finished.exception()
            if exc is not None:
                self._log_handler_error(event, handler, exc)

        task.add_done_callback(_done)

    def _log_handler_error(self, event: ChainEvent, handler: Handler, exc: BaseException) -> None:
        self._logger.error(
            "event_handler_error",
            event_type=str(event),
            handler=getattr(handler, "__qualname__", repr(handler)),
            error=str(exc),
        )
