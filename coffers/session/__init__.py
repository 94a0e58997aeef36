"""
Session Module - Manages ephemeral game sessions.

A session represents one game in progress:
- Created with a seeded starter setup (or a supplied GameState)
- Holds the game state and the effect resolver wired to it
- Plays cards, fires events and relays target selections
- Destroyed when the game ends

Sessions are EPHEMERAL: nothing is persisted.
"""

from .manager import (
    SessionManager,
    Session,
    SessionState,
    SessionError,
    CardNotPlayableError,
    EventNotAvailableError,
    ChoiceInfo,
)

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "SessionError",
    "CardNotPlayableError",
    "EventNotAvailableError",
    "ChoiceInfo",
]
