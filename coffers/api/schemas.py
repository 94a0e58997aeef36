"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a client and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has expired
- CARD_NOT_PLAYABLE: Card is not in hand, not an action, or no actions remain
- EVENT_NOT_AVAILABLE: Unknown event, unmet trigger conditions or bad choice
- INVALID_SELECTION: Selected cards are not eligible or exceed the limit
- NO_PENDING_SELECTION: Targets were submitted with nothing awaiting them
- ACTIVATION_IN_PROGRESS: A target selection must be resolved first
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    AWAITING_TARGET = "awaiting_target"
    ENDED = "ended"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    CARD_NOT_PLAYABLE = "CARD_NOT_PLAYABLE"
    EVENT_NOT_AVAILABLE = "EVENT_NOT_AVAILABLE"
    INVALID_SELECTION = "INVALID_SELECTION"
    NO_PENDING_SELECTION = "NO_PENDING_SELECTION"
    ACTIVATION_IN_PROGRESS = "ACTIVATION_IN_PROGRESS"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """A card instance."""
    card_id: str
    instance_id: str
    is_temporary: bool = False
    boosted_grade: Optional[str] = None


class UnitInfo(BaseModel):
    """A unit living in a house."""
    unit_id: str
    name: str
    job: str
    stage: str
    promotion_level: int = 0
    combat_power: int = 0
    house_id: Optional[str] = None


class PersistentEffectInfo(BaseModel):
    effect_id: str
    kind: str
    value: int
    remaining_turns: int


class EffectResultInfo(BaseModel):
    """Outcome of one executed effect."""
    kind: str
    success: bool
    count: int = 0
    value: int = 0


class TargetRequestInfo(BaseModel):
    """A pending target selection."""
    target_kind: str
    max_selections: int
    candidates: list[CardInfo] = Field(default_factory=list)
    effect_kind: Optional[str] = None


class PendingEffectInfo(BaseModel):
    """A queued effect with its speculative magnitude."""
    kind: str
    speculative_value: int
    target: str


class GameStateInfo(BaseModel):
    """Game state summary."""
    game_id: str
    turn_number: int
    gold: int
    actions_remaining: int
    deck_count: int
    discard_count: int
    hand: list[CardInfo] = Field(default_factory=list)
    play_area: list[CardInfo] = Field(default_factory=list)
    units: list[UnitInfo] = Field(default_factory=list)
    active_effects: list[PersistentEffectInfo] = Field(default_factory=list)
    gold_multiplier: float = 1.0
    gold_bonus: int = 0
    pollution_ignored: bool = False
    promotion_discount: int = 0


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    random_seed: Optional[int] = Field(None, description="Seed for reproducible games")


class PlayCardRequest(BaseModel):
    """Play a card from hand."""
    instance_id: str = Field(..., description="Instance id of a hand card")


class TriggerEventRequest(BaseModel):
    """Fire an event."""
    choice_id: Optional[str] = Field(None, description="Required for events with choices")


class SelectTargetsRequest(BaseModel):
    """Answer a pending target selection."""
    instance_ids: list[str] = Field(default_factory=list, description="Selected hand card instance ids")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """Session information with the current game state."""
    session_id: str
    status: SessionStatus
    game_state: GameStateInfo
    pending_request: Optional[TargetRequestInfo] = None
    pending_effects: list[PendingEffectInfo] = Field(default_factory=list)
    api_version: str = "v1"


class ActivationResponse(BaseModel):
    """
    Result of a card play, event, target selection or cancel.

    If `state` is `awaiting_target`, POST /targets (or /cancel) to continue.
    """
    session_id: str
    state: str
    results: list[EffectResultInfo] = Field(default_factory=list)
    target_request: Optional[TargetRequestInfo] = None
    source_card: Optional[CardInfo] = None
    game_state: GameStateInfo
    api_version: str = "v1"


class EventChoiceInfo(BaseModel):
    """One option of a choice event."""
    choice_id: str
    text: str
    can_select: bool = Field(..., description="Whether the choice requirements currently hold")


class EventInfoResponse(BaseModel):
    """
    An event as seen from one session.

    Events with choices need one of the selectable `choice_id`s when triggered.
    """
    session_id: str
    event_id: str
    name: str
    description: str = ""
    available: bool = Field(..., description="Whether the trigger conditions currently hold")
    choices: list[EventChoiceInfo] = Field(default_factory=list)
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
