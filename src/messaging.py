"""Outbound event queue.

Publishing only enqueues the event, so callers never wait for delivery. A
background worker hands every event to the handlers subscribed to its type and
retries a failing handler up to `max_attempts` times. A handler may therefore see
an event more than once. Events still failing after the last attempt are not
delivered: they are logged and kept in a bounded `dead_letters` buffer that only
holds the most recent `dead_letter_limit` of them.
"""

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable

from src.config.settings import settings
from src.events import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventPublisher(ABC):
    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Hand an event over for delivery without waiting for it to be delivered."""
        raise NotImplementedError


class OutboundEventQueue(EventPublisher):
    """In-process queue delivering events to subscribed handlers."""

    def __init__(
        self,
        max_attempts: int = settings.event_queue.max_attempts,
        retry_delay_seconds: float = settings.event_queue.retry_delay_seconds,
        dead_letter_limit: int = settings.event_queue.dead_letter_limit,
    ) -> None:
        self.max_attempts = max_attempts
        self.retry_delay_seconds = retry_delay_seconds
        self.dead_letters: deque[tuple[DomainEvent, str]] = deque(maxlen=dead_letter_limit)
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._queue: asyncio.Queue[DomainEvent] = asyncio.Queue()
        self._worker: asyncio.Task | None = None

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    async def publish(self, event: DomainEvent) -> None:
        self._queue.put_nowait(event)
        logger.debug(f"Queued {event.event_type} event ({self._queue.qsize()} pending)")

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.is_running:
            return
        self._worker = asyncio.create_task(self._run(), name="outbound-event-queue")
        logger.info("Outbound event queue started")

    async def drain(self) -> None:
        """Wait until every queued event has been delivered or dead-lettered."""
        await self._queue.join()

    async def stop(self) -> None:
        if not self._worker:
            return
        if self.is_running:
            await self.drain()
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None
        logger.info("Outbound event queue stopped")

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                for handler in self._handlers.get(type(event), []):
                    await self._deliver(handler, event)
            finally:
                self._queue.task_done()

    async def _deliver(self, handler: EventHandler, event: DomainEvent) -> None:
        handler_name = getattr(handler, "__name__", type(handler).__name__)
        for attempt in range(1, self.max_attempts + 1):
            try:
                await handler(event)
                return
            except Exception as e:
                logger.warning(
                    f"Delivering {event.event_type} to {handler_name} failed "
                    f"(attempt {attempt}/{self.max_attempts}): {e}"
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_delay_seconds)

        logger.error(f"Giving up delivering {event.event_type} to {handler_name}")
        self.dead_letters.append((event, handler_name))
