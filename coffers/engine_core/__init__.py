"""
Engine Core - Effect resolution against a shared game state.

The engine is the runtime that:
1. Expands conditional effect groups into a queue
2. Resolves magnitudes from fixed or dynamic values
3. Pauses for target selections and resumes
4. Dispatches each effect to its handler and records the result
"""

from .state import GameState, CardInstance, UnitInstance, HouseInstance, PersistentEffect
from .results import EffectResult, ResultStack
from .conditions import ConditionEvaluator, compare
from .values import ValueResolver
from .targeting import TargetingGateway, TargetRequest, requires_selection
from .observers import EffectObserver, RecordingObserver
from .systems import Collaborators, reference_collaborators
from .effect_resolver import EffectResolver, ResolverState, ActivationOutcome, PendingEffect
from .errors import (
    EffectEngineError,
    NoPendingSelectionError,
    InvalidSelectionError,
    ActivationInProgressError,
)

__all__ = [
    "GameState",
    "CardInstance",
    "UnitInstance",
    "HouseInstance",
    "PersistentEffect",
    "EffectResult",
    "ResultStack",
    "ConditionEvaluator",
    "compare",
    "ValueResolver",
    "TargetingGateway",
    "TargetRequest",
    "requires_selection",
    "EffectObserver",
    "RecordingObserver",
    "Collaborators",
    "reference_collaborators",
    "EffectResolver",
    "ResolverState",
    "ActivationOutcome",
    "PendingEffect",
    "EffectEngineError",
    "NoPendingSelectionError",
    "InvalidSelectionError",
    "ActivationInProgressError",
]
