"""
Event Bus - Central event routing system

Implements pub-sub pattern:
- Publishers: publish(event) (async) or dispatch(event) (sync)
- Subscribers: subscribe(event_type, handler, priority, filter_fn)
- Middleware: add_middleware(middleware_fn)
"""

import asyncio
from typing import Callable, List, Dict, Optional, Set
from dataclasses import dataclass
from animbind.models.events import Event, EventType
from animbind.utils.logger import get_logger, LogCategory

log = get_logger().for_category(LogCategory.EVENT)


@dataclass
class EventHandler:
    """Event handler registration"""
    handler: Callable[[Event], None]
    priority: int
    filter_fn: Optional[Callable[[Event], bool]]


class EventBus:
    """
    Central event bus for pub-sub event handling

    Features:
    - Priority-based handler execution (high priority first)
    - Per-handler filtering (fine-grained control)
    - Middleware pipeline (logging, blocking)
    - Async/sync handler support (auto-detected)
    - Fault tolerance (one handler crash doesn't stop others)

    Example:
        bus = EventBus()

        bus.subscribe(
            EventType.PROPERTY_CHANGED,
            handler_fn,
            priority=10,
            filter_fn=lambda e: e.instance_id == "hero"
        )

        bus.dispatch(PropertyChangedEvent("settings/theme", PropertyKind.STRING, "dark"))
    """

    def __init__(self, history_limit: int = 100):
        self._handlers: Dict[EventType, List[EventHandler]] = {}

        # Middleware pipeline (applied in registration order)
        self._middleware: List[Callable[[Event], Optional[Event]]] = []

        # Event history (bounded, for debugging)
        self._event_history: List[Event] = []
        self._history_limit = history_limit

        # Async handlers scheduled by dispatch(), held until they finish
        self._tasks: Set[asyncio.Task] = set()

    def subscribe(
        self,
        event_type: EventType,
        handler: Callable[[Event], None],
        priority: int = 0,
        filter_fn: Optional[Callable[[Event], bool]] = None
    ) -> None:
        """
        Subscribe to event type

        Args:
            event_type: Which events to listen for
            handler: Function to call (can be async or sync)
            priority: Execution priority (higher = called first, default: 0)
            filter_fn: Optional filter (return True = handle, False = skip)
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []

        self._handlers[event_type].append(EventHandler(handler, priority, filter_fn))

        # Sort by priority (descending - highest first)
        self._handlers[event_type].sort(key=lambda h: h.priority, reverse=True)

        log.debug(
            "Event handler subscribed",
            event_type=event_type.name,
            handler=getattr(handler, "__name__", repr(handler)),
            priority=priority
        )

    def unsubscribe(self, event_type: EventType, handler: Callable[[Event], None]) -> bool:
        """Remove a handler; returns False if it was not subscribed"""
        handlers = self._handlers.get(event_type, [])
        for entry in handlers:
            if entry.handler == handler:
                handlers.remove(entry)
                return True
        return False

    def add_middleware(self, middleware: Callable[[Event], Optional[Event]]) -> None:
        """
        Add middleware to event processing pipeline

        Middleware can modify events (return modified event), block events
        (return None) or just observe them. Runs in registration order.
        """
        self._middleware.append(middleware)
        log.debug("Middleware registered", middleware=getattr(middleware, "__name__", repr(middleware)))

    def _prepare(self, event: Event) -> Optional[List[EventHandler]]:
        """Run middleware and history; return matching handlers or None if blocked"""
        for middleware in self._middleware:
            processed_event = middleware(event)
            if processed_event is None:
                return None
            event = processed_event

        self._event_history.append(event)
        if len(self._event_history) > self._history_limit:
            self._event_history.pop(0)

        return [
            entry for entry in self._handlers.get(event.type, [])
            if not entry.filter_fn or entry.filter_fn(event)
        ]

    async def publish(self, event: Event) -> None:
        """
        Publish event to all subscribers, awaiting async handlers

        Flow:
        1. Apply middleware (can modify or block event)
        2. Save to event history
        3. Execute matching handlers by priority (high → low)
        4. Catch and log handler exceptions (fault tolerance)
        """
        handlers = self._prepare(event)
        if not handlers:
            return

        for handler_entry in handlers:
            try:
                if asyncio.iscoroutinefunction(handler_entry.handler):
                    await handler_entry.handler(event)
                else:
                    handler_entry.handler(event)
            except Exception as e:
                log.error(
                    f"Event handler failed: {getattr(handler_entry.handler, '__name__', '?')} for {event.type.name}",
                    exception=e
                )

    def dispatch(self, event: Event) -> None:
        """
        Deliver event synchronously.

        Sync handlers run inline. Async handlers are scheduled on the running
        loop; without a running loop they are skipped with a warning.
        """
        handlers = self._prepare(event)
        if not handlers:
            return

        for handler_entry in handlers:
            try:
                if asyncio.iscoroutinefunction(handler_entry.handler):
                    try:
                        loop = asyncio.get_running_loop()
                    except RuntimeError:
                        log.warn(
                            "Async handler skipped: no running event loop",
                            handler=getattr(handler_entry.handler, "__name__", "?"),
                            event_type=event.type.name
                        )
                        continue
                    task = loop.create_task(handler_entry.handler(event))
                    self._tasks.add(task)
                    task.add_done_callback(self._make_task_done(handler_entry.handler, event))
                else:
                    handler_entry.handler(event)
            except Exception as e:
                log.error(
                    f"Event handler failed: {getattr(handler_entry.handler, '__name__', '?')} for {event.type.name}",
                    exception=e
                )

    def _make_task_done(self, handler: Callable, event: Event) -> Callable[[asyncio.Task], None]:
        def on_done(task: asyncio.Task) -> None:
            self._tasks.discard(task)
            if task.cancelled():
                return
            error = task.exception()
            if error is not None:
                log.error(
                    f"Event handler failed: {getattr(handler, '__name__', '?')} for {event.type.name}",
                    exception=error
                )
        return on_done

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def get_event_history(self, limit: int = 10) -> List[Event]:
        """
        Get recent events from history (newest last)
        """
        return self._event_history[-limit:]

    def clear_history(self) -> None:
        """Clear event history"""
        self._event_history.clear()
