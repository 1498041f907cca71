"""
Events - Post-commit notifications.

The engine never pushes to clients. After a change is committed the
session manager publishes a GameEvent; whoever hosts the engine (the
FastAPI app's WebSocket hub, a CLI printer, a test) subscribes and
decides how to deliver it. Payloads are public-safe: no hidden cards.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging
import threading
import time

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    GAME_CREATED = "game_created"
    PLAYER_JOINED = "player_joined"
    ROUND_STARTED = "round_started"
    CARD_DRAWN = "card_drawn"
    CARD_PLAYED = "card_played"
    ROUND_ENDED = "round_ended"
    GAME_FINISHED = "game_finished"


@dataclass(frozen=True)
class GameEvent:
    kind: EventKind
    game_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: float = field(default_factory=time.time)

    def to_message(self) -> dict[str, Any]:
        """JSON-ready form for WebSocket clients."""
        return {
            "type": self.kind.value,
            "game_id": self.game_id,
            "payload": self.payload,
            "created_at": self.created_at,
        }


Subscriber = Callable[[GameEvent], None]


class EventBus:
    """
    In-process fan-out keyed by game id.

    Subscribers under "*" receive every game's events.
    """

    ALL = "*"

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: dict[str, list[Subscriber]] = {}

    def subscribe(self, game_id: str, callback: Subscriber) -> Callable[[], None]:
        """Register callback; returns a function that unsubscribes it."""
        with self._lock:
            self._subscribers.setdefault(game_id, []).append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(game_id, [])
                if callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(game_id, None)

        return unsubscribe

    def subscriber_count(self, game_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(game_id, []))

    def publish(self, event: GameEvent) -> None:
        """Deliver event to the game's subscribers and the catch-all ones."""
        with self._lock:
            callbacks = list(self._subscribers.get(event.game_id, []))
            callbacks += self._subscribers.get(self.ALL, [])

        for callback in callbacks:
            try:
                callback(event)
            except Exception:
                # A broken listener must not undo a committed change
                logger.exception("Event subscriber failed for %s", event.kind.value)
