"""Exceptions raised by the effect engine for misuse of its API."""


class EffectEngineError(Exception):
    """Base class for effect engine errors."""


class NoPendingSelectionError(EffectEngineError):
    """resume() was called while no target selection is pending."""


class InvalidSelectionError(EffectEngineError):
    """
    A target selection was rejected.

    The engine stays suspended so the caller can retry.
    """

    def __init__(self, message: str, invalid_ids: list[str] | None = None):
        super().__init__(message)
        self.invalid_ids = invalid_ids or []


class ActivationInProgressError(EffectEngineError):
    """An activation was started while another is in flight (reject policy)."""
