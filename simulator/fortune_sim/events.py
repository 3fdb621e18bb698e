"""Typed event stream for hosts.

An EventEmitter is owned by whoever creates the engine; there is no shared
global instance. Delivery is synchronous, and a failing handler is logged
without stopping its siblings or the emitting action.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)


class GameEvent(str, Enum):
    GAME_START = "GAME_START"
    PHASE_CHANGE = "PHASE_CHANGE"
    CARDS_DRAWN = "CARDS_DRAWN"
    CARDS_PLAYED = "CARDS_PLAYED"
    CARDS_DISCARDED = "CARDS_DISCARDED"
    SLOT_SPIN = "SLOT_SPIN"
    SCORE_CALCULATED = "SCORE_CALCULATED"
    ROULETTE_SPIN = "ROULETTE_SPIN"
    ITEM_BOUGHT = "ITEM_BOUGHT"
    ROUND_END = "ROUND_END"
    GAME_OVER = "GAME_OVER"


@dataclass(frozen=True)
class Event:
    type: GameEvent
    payload: dict[str, Any] = field(default_factory=dict)


Handler = Callable[[Event], None]


class EventEmitter:
    def __init__(self):
        self._handlers: dict[GameEvent, list[Handler]] = {}
        self._any: list[Handler] = []

    def on(self, event_type: GameEvent, handler: Handler) -> Callable[[], None]:
        """Subscribe to one event type. Returns an unsubscribe callable."""
        self._handlers.setdefault(GameEvent(event_type), []).append(handler)
        return lambda: self.off(event_type, handler)

    def on_any(self, handler: Handler) -> Callable[[], None]:
        """Subscribe to every event type."""
        self._any.append(handler)

        def unsubscribe() -> None:
            if handler in self._any:
                self._any.remove(handler)

        return unsubscribe

    def off(self, event_type: GameEvent, handler: Handler) -> None:
        handlers = self._handlers.get(GameEvent(event_type))
        if not handlers or handler not in handlers:
            return
        handlers.remove(handler)
        if not handlers:
            del self._handlers[GameEvent(event_type)]

    def emit(self, event_type: GameEvent, **payload) -> Event:
        event = Event(GameEvent(event_type), payload)
        for handler in list(self._handlers.get(event.type, ())) + list(self._any):
            try:
                handler(event)
            except Exception:
                logger.exception("Error in event handler for %s", event.type.value)
        return event

    def clear(self) -> None:
        self._handlers.clear()
        self._any.clear()

    def listener_count(self, event_type: GameEvent) -> int:
        return len(self._handlers.get(GameEvent(event_type), ()))
