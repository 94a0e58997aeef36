"""
Observer interface for engine notifications.

Observers are registered on an engine instance; every method has a no-op
default so implementations override only what they care about.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..definitions.effect_dsl import EffectKind
    from .results import EffectResult
    from .state import CardInstance
    from .targeting import TargetRequest


class EffectObserver:
    """Receives activation lifecycle notifications."""

    def on_activation_started(self, source_card: CardInstance | None) -> None:
        pass

    def on_target_required(self, request: TargetRequest) -> None:
        pass

    def on_effect_executed(self, kind: EffectKind | str, magnitude: int, result: EffectResult) -> None:
        pass

    def on_activation_completed(self, source_card: CardInstance | None) -> None:
        pass


class RecordingObserver(EffectObserver):
    """Keeps every notification in order. Used by the session layer and tests."""

    def __init__(self):
        self.events: list[tuple] = []

    def on_activation_started(self, source_card):
        self.events.append(("started", source_card))

    def on_target_required(self, request):
        self.events.append(("target_required", request))

    def on_effect_executed(self, kind, magnitude, result):
        self.events.append(("executed", kind, magnitude, result))

    def on_activation_completed(self, source_card):
        self.events.append(("completed", source_card))

    def executed(self) -> list[tuple]:
        return [event for event in self.events if event[0] == "executed"]

    def clear(self) -> None:
        self.events.clear()
