"""
API Module - REST interface.

Exposes the engine via REST API:
1. Create game sessions
2. Play cards and trigger events
3. Answer target selections (or cancel them)
4. Read the resulting game state

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    PlayCardRequest,
    TriggerEventRequest,
    SelectTargetsRequest,
    # Responses
    ActivationResponse,
    SessionResponse,
    SessionListResponse,
    EndSessionResponse,
    HealthResponse,
    EventInfoResponse,
    ErrorResponse,
    ErrorCode,
    # Shared
    CardInfo,
    EventChoiceInfo,
    GameStateInfo,
    TargetRequestInfo,
)
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "PlayCardRequest",
    "TriggerEventRequest",
    "SelectTargetsRequest",
    # Responses
    "ActivationResponse",
    "SessionResponse",
    "SessionListResponse",
    "EndSessionResponse",
    "HealthResponse",
    "EventInfoResponse",
    "ErrorResponse",
    "ErrorCode",
    # Shared
    "CardInfo",
    "EventChoiceInfo",
    "GameStateInfo",
    "TargetRequestInfo",
    # App
    "create_app",
]
