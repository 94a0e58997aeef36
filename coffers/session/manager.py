"""
Session Manager - Creates and manages game sessions.

A session is the composition root for one game: it owns the GameState,
the card catalog, and an EffectResolver wired to the reference systems.
It exposes the card-play lifecycle and event triggering:

Card play:
1. The card must be in hand and be an action card
2. An action must remain; it is consumed
3. The card moves from hand to the play area
4. Its conditional effect groups are resolved with the card as source

Event trigger:
1. Trigger conditions must hold (all of them)
2. Choice events need a choice whose requirements hold
3. The event's groups (for choice events, only the chosen option's) are
   resolved with no source card

Sessions are in-memory only.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import random
import time
import uuid

from ..config import EngineConfig
from ..definitions.cards import CardCatalog, EventDefinition
from ..engine_core.state import GameState
from ..engine_core.results import ResultStack
from ..engine_core.effect_resolver import ActivationOutcome, EffectResolver
from ..engine_core.observers import RecordingObserver
from ..engine_core.errors import ActivationInProgressError
from ..games.starter import create_starter_catalog, setup_starter_game

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Ready for a card play or event
    AWAITING_TARGET = "awaiting_target"  # Resolver paused for a target selection
    ENDED = "ended"


class SessionError(Exception):
    """Raised when a session operation is not allowed."""


class CardNotPlayableError(SessionError):
    pass


class EventNotAvailableError(SessionError):
    pass


@dataclass
class ChoiceInfo:
    choice_id: str
    text: str
    can_select: bool


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The card catalog
    - The canonical game state
    - The effect resolver and an observer recording its notifications
    """
    session_id: str
    catalog: CardCatalog
    game_state: GameState
    resolver: EffectResolver
    created_at: float
    observer: RecordingObserver = field(default_factory=RecordingObserver)
    state: SessionState = SessionState.ACTIVE
    last_outcome: ActivationOutcome | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.resolver.add_observer(self.observer)

    def is_active(self) -> bool:
        return self.state != SessionState.ENDED

    # =========================================================================
    # Card play
    # =========================================================================

    def play_card(self, instance_id: str) -> ActivationOutcome:
        """Play an action card from hand and resolve its effects."""
        self._require_ready()

        card = self.game_state.find_in_hand(instance_id)
        if card is None:
            raise CardNotPlayableError(f"Card {instance_id} is not in hand")

        definition = self.catalog.get_card(card.card_id)
        if definition is None:
            raise CardNotPlayableError(f"Card {card.card_id} has no definition")
        if not definition.is_action:
            raise CardNotPlayableError(f"{definition.name} is a {definition.card_type.value} card")

        systems = self.resolver.systems
        if not systems.turn.consume_action():
            raise CardNotPlayableError("No actions remaining")
        systems.deck.play(card)
        logger.info("Played %s", definition.name)

        return self._record(self.resolver.begin_activation(definition.effects, card))

    # =========================================================================
    # Events
    # =========================================================================

    def get_event(self, event_id: str) -> EventDefinition:
        event = self.catalog.get_event(event_id)
        if event is None:
            raise EventNotAvailableError(f"Unknown event {event_id}")
        return event

    def event_available(self, event: EventDefinition) -> bool:
        return self.resolver.conditions.evaluate_all(event.trigger_conditions, self.game_state, ResultStack())

    def event_choices(self, event_id: str) -> list[ChoiceInfo]:
        event = self.get_event(event_id)
        return [
            ChoiceInfo(
                choice_id=choice.choice_id,
                text=choice.text,
                can_select=self.resolver.conditions.evaluate_all(
                    choice.requirements, self.game_state, ResultStack()),
            )
            for choice in event.choices
        ]

    def trigger_event(self, event_id: str, choice_id: str | None = None) -> ActivationOutcome:
        """Fire an event (with a choice, for choice events)."""
        self._require_ready()
        event = self.get_event(event_id)

        if not self.event_available(event):
            raise EventNotAvailableError(f"Trigger conditions for {event_id} are not met")

        # Choice events run only the chosen option's effects
        groups = list(event.effects)
        if event.has_choices:
            if choice_id is None:
                raise EventNotAvailableError(f"Event {event_id} requires a choice")
            choice = event.get_choice(choice_id)
            if choice is None:
                raise EventNotAvailableError(f"Event {event_id} has no choice {choice_id}")
            if not self.resolver.conditions.evaluate_all(choice.requirements, self.game_state, ResultStack()):
                raise EventNotAvailableError(f"Requirements for choice {choice_id} are not met")
            groups = list(choice.effects)

        logger.info("Event %s triggered%s", event.name, f" ({choice_id})" if choice_id else "")
        return self._record(self.resolver.begin_activation(groups))

    # =========================================================================
    # Target selection
    # =========================================================================

    def select_targets(self, instance_ids: list[str]) -> ActivationOutcome:
        return self._record(self.resolver.resume(instance_ids))

    def cancel_selection(self) -> ActivationOutcome:
        return self._record(self.resolver.cancel())

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "game_state": self.game_state.to_dict(),
            "pending_request": (
                self.resolver.pending_request.to_dict() if self.resolver.pending_request else None
            ),
            "pending_effects": [p.to_dict() for p in self.resolver.preview()],
        }

    def _require_ready(self) -> None:
        if self.state == SessionState.ENDED:
            raise SessionError("Session has ended")
        if self.state == SessionState.AWAITING_TARGET:
            raise ActivationInProgressError("A target selection is pending")

    def _record(self, outcome: ActivationOutcome) -> ActivationOutcome:
        self.last_outcome = outcome
        self.state = SessionState.AWAITING_TARGET if outcome.awaiting_target else SessionState.ACTIVE
        return outcome


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with a seeded starting state
    - Track active sessions
    - Clean up ended or stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, config: EngineConfig | None = None, catalog: CardCatalog | None = None):
        self.config = config or EngineConfig.from_env()
        self.catalog = catalog or create_starter_catalog()
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        random_seed: int | None = None,
        game_state: GameState | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            random_seed: Seed for the starting shuffle and the engine's random draws
            game_state: Use this state instead of the starter setup

        Returns:
            New Session ready for play
        """
        seed = random_seed if random_seed is not None else self.config.seed
        session_id = str(uuid.uuid4())

        state = game_state or setup_starter_game(random_seed=seed)
        resolver = EffectResolver(
            state,
            self.catalog,
            config=self.config,
            rng=random.Random(seed),
        )

        session = Session(
            session_id=session_id,
            catalog=self.catalog,
            game_state=state,
            resolver=resolver,
            created_at=time.time(),
            metadata={"seed": seed},
        )
        self._sessions[session_id] = session
        logger.info("Session %s created (seed=%s)", session_id, seed)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """End a session and remove it from memory."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.state = SessionState.ENDED
        logger.info("Session %s ended", session_id)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Remove sessions older than max_age.

        Called periodically to free memory.
        """
        current_time = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id)
        return len(stale)
