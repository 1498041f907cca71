"""
Session Module - Runs games for a host.

A game lives in a store:
- Created in a lobby, joined by room code
- Advanced one locked, atomic request at a time
- Observed through viewer-scoped views and post-commit events

The engine itself never talks to clients; the host decides how to
deliver events (WebSocket, CLI output, tests).
"""

from .manager import GameManager
from .store import GameStore, InMemoryGameStore
from .events import EventBus, EventKind, GameEvent
from .views import GameView, SeatView, RoundView, NarratedAction, build_view

__all__ = [
    "GameManager",
    "GameStore",
    "InMemoryGameStore",
    "EventBus",
    "EventKind",
    "GameEvent",
    "GameView",
    "SeatView",
    "RoundView",
    "NarratedAction",
    "build_view",
]
