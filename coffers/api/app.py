"""
FastAPI Application - REST API for the effect engine.

Endpoints:
    GET    /api/v1/health                        Health check
    POST   /api/v1/sessions                      Create game session
    GET    /api/v1/sessions                      List active sessions
    GET    /api/v1/sessions/{id}                 Get session state
    GET    /api/v1/sessions/{id}/events/{event}  Event availability and choices
    DELETE /api/v1/sessions/{id}                 End session
    POST   /api/v1/sessions/{id}/play            Play a hand card
    POST   /api/v1/sessions/{id}/events/{event}  Trigger an event
    POST   /api/v1/sessions/{id}/targets         Answer a target selection
    POST   /api/v1/sessions/{id}/cancel          Cancel a target selection

Activation Flow:
    1. POST /play (or /events/{event}) starts resolving effects
    2. If the response state is `awaiting_target`:
       - target_request lists the eligible hand cards
       - POST /targets with the chosen instance ids, or POST /cancel
    3. Repeat until the state is `completed`

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional, Union

from ..config import ALLOWED_ORIGINS, COFFERS_ENV


def create_app(manager=None):
    """
    Create the FastAPI application.

    Args:
        manager: Optional SessionManager instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .. import __version__
    from ..engine_core.effect_resolver import ActivationOutcome
    from ..engine_core.errors import (
        ActivationInProgressError,
        InvalidSelectionError,
        NoPendingSelectionError,
    )
    from ..session import (
        CardNotPlayableError,
        EventNotAvailableError,
        Session,
        SessionError,
        SessionManager,
    )
    from .schemas import (
        # Request models
        CreateSessionRequest,
        PlayCardRequest,
        TriggerEventRequest,
        SelectTargetsRequest,
        # Response models
        ActivationResponse,
        EventChoiceInfo,
        EventInfoResponse,
        SessionResponse,
        ErrorResponse,
        SessionListResponse,
        EndSessionResponse,
        HealthResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Coffers Engine API",
        description="""
Effect resolution engine for an economic deck-builder.

## Target Selection

Some effects target cards in hand. When one is reached, resolution pauses and
the response has `state=awaiting_target` with a `target_request`. Submit the
chosen cards to `POST /targets`, or skip the effect with `POST /cancel`.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Session does not exist |
| `CARD_NOT_PLAYABLE` | Card not in hand, not an action, or no actions left |
| `EVENT_NOT_AVAILABLE` | Unknown event, unmet conditions or invalid choice |
| `INVALID_SELECTION` | Selected cards are not eligible |
| `NO_PENDING_SELECTION` | Nothing is waiting for targets |
| `ACTIVATION_IN_PROGRESS` | Resolve the pending selection first |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    session_manager = manager or SessionManager()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def session_not_found(session_id: str) -> JSONResponse:
        return make_error_response(
            ErrorCode.SESSION_NOT_FOUND,
            f"Session {session_id} not found",
            status_code=404,
        )

    def engine_error_response(error: Exception) -> JSONResponse:
        """Map engine and session exceptions to error responses."""
        if isinstance(error, InvalidSelectionError):
            return make_error_response(
                ErrorCode.INVALID_SELECTION,
                str(error),
                details={"invalid_ids": error.invalid_ids},
            )
        if isinstance(error, NoPendingSelectionError):
            return make_error_response(ErrorCode.NO_PENDING_SELECTION, str(error), status_code=409)
        if isinstance(error, ActivationInProgressError):
            return make_error_response(ErrorCode.ACTIVATION_IN_PROGRESS, str(error), status_code=409)
        if isinstance(error, CardNotPlayableError):
            return make_error_response(ErrorCode.CARD_NOT_PLAYABLE, str(error))
        if isinstance(error, EventNotAvailableError):
            return make_error_response(ErrorCode.EVENT_NOT_AVAILABLE, str(error))
        return make_error_response(ErrorCode.VALIDATION_ERROR, str(error))

    engine_errors = (
        InvalidSelectionError,
        NoPendingSelectionError,
        ActivationInProgressError,
        SessionError,
    )

    def session_response(session: Session) -> SessionResponse:
        data = session.to_dict()
        return SessionResponse(
            session_id=session.session_id,
            status=data["state"],
            game_state=data["game_state"],
            pending_request=data["pending_request"],
            pending_effects=data["pending_effects"],
        )

    def activation_response(session: Session, outcome: ActivationOutcome) -> ActivationResponse:
        data = outcome.to_dict()
        return ActivationResponse(
            session_id=session.session_id,
            game_state=session.game_state.to_dict(),
            **data,
        )

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(body: Optional[CreateSessionRequest] = None) -> SessionResponse:
        """
        Create a new game session from the starter setup.

        Pass `random_seed` for a reproducible shuffle and reproducible random effects.
        """
        seed = body.random_seed if body else None
        session = session_manager.create_session(random_seed=seed)
        return session_response(session)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = session_manager.list_active_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session state",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the game state and any pending target selection."""
        session = session_manager.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        return session_response(session)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        """End a game session and release resources."""
        success = session_manager.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Activation Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/play",
        response_model=ActivationResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Card not playable"},
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Target selection pending"},
        },
        tags=["Game Loop"],
        summary="Play an action card from hand",
    )
    async def play_card(
        session_id: str,
        body: PlayCardRequest,
    ) -> Union[ActivationResponse, JSONResponse]:
        """
        Play a card from hand.

        Consumes one action and resolves the card's effects.
        """
        session = session_manager.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        try:
            outcome = session.play_card(body.instance_id)
        except engine_errors as e:
            return engine_error_response(e)
        return activation_response(session, outcome)

    @app.get(
        "/api/v1/sessions/{session_id}/events/{event_id}",
        response_model=EventInfoResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown event"},
            404: {"model": ErrorResponse, "description": "Session not found"},
        },
        tags=["Game Loop"],
        summary="Describe an event and its choices",
    )
    async def get_event(
        session_id: str,
        event_id: str,
    ) -> Union[EventInfoResponse, JSONResponse]:
        """
        Report whether an event can fire and which of its choices are selectable.
        """
        session = session_manager.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        try:
            event = session.get_event(event_id)
            choices = session.event_choices(event_id)
        except engine_errors as e:
            return engine_error_response(e)

        return EventInfoResponse(
            session_id=session.session_id,
            event_id=event.id,
            name=event.name,
            description=event.description,
            available=session.event_available(event),
            choices=[
                EventChoiceInfo(choice_id=c.choice_id, text=c.text, can_select=c.can_select)
                for c in choices
            ],
        )

    @app.post(
        "/api/v1/sessions/{session_id}/events/{event_id}",
        response_model=ActivationResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Event not available"},
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Target selection pending"},
        },
        tags=["Game Loop"],
        summary="Trigger a random event",
    )
    async def trigger_event(
        session_id: str,
        event_id: str,
        body: Optional[TriggerEventRequest] = None,
    ) -> Union[ActivationResponse, JSONResponse]:
        """
        Trigger an event.

        Events with choices need a `choice_id` whose requirements are met.
        """
        session = session_manager.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        try:
            outcome = session.trigger_event(event_id, body.choice_id if body else None)
        except engine_errors as e:
            return engine_error_response(e)
        return activation_response(session, outcome)

    @app.post(
        "/api/v1/sessions/{session_id}/targets",
        response_model=ActivationResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid selection"},
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "No selection pending"},
        },
        tags=["Game Loop"],
        summary="Submit selected targets",
    )
    async def select_targets(
        session_id: str,
        body: SelectTargetsRequest,
    ) -> Union[ActivationResponse, JSONResponse]:
        """
        Answer the pending target selection.

        **Request Body:**
        ```json
        {"instance_ids": ["copper#1", "silver#8"]}
        ```

        An invalid selection leaves the selection pending.
        """
        session = session_manager.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        try:
            outcome = session.select_targets(body.instance_ids)
        except engine_errors as e:
            return engine_error_response(e)
        return activation_response(session, outcome)

    @app.post(
        "/api/v1/sessions/{session_id}/cancel",
        response_model=ActivationResponse,
        responses={404: {"model": ErrorResponse, "description": "Session not found"}},
        tags=["Game Loop"],
        summary="Cancel the pending target selection",
    )
    async def cancel_selection(session_id: str) -> Union[ActivationResponse, JSONResponse]:
        """The awaiting effect fails and the remaining effects still run."""
        session = session_manager.get_session(session_id)
        if not session:
            return session_not_found(session_id)
        return activation_response(session, session.cancel_selection())

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="coffers-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Coffers Engine API",
            "version": __version__,
            "environment": COFFERS_ENV,
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app
