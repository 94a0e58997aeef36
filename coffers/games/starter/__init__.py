"""
Starter - The sample game shipped with the engine.

A small economy deck-builder used by the CLI, the API and the tests:
- Treasure ladder and pollution cards
- A handful of action cards exercising the effect kinds
- Random events, including a choice event
- A seeded starting state
"""

from .cards import ACTION_CARDS, EVENTS, create_starter_catalog
from .setup import STARTING_DECK, setup_starter_game

__all__ = [
    "ACTION_CARDS",
    "EVENTS",
    "create_starter_catalog",
    "STARTING_DECK",
    "setup_starter_game",
]
