"""
Targeting Gateway - Decides whether an effect needs the player to pick cards.

Selection targets (hand_card, hand_treasure, hand_pollution, hand_action)
suspend the engine with a TargetRequest. Every other target kind is
collected here without asking anyone.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import random

from ..definitions.effect_dsl import EffectDefinition, EffectKind, TargetKind, kind_name
from ..definitions.cards import CardCatalog, CardType
from .state import CardInstance, GameState

logger = logging.getLogger(__name__)


SELECTION_TARGETS = frozenset({
    TargetKind.HAND_CARD,
    TargetKind.HAND_TREASURE,
    TargetKind.HAND_POLLUTION,
    TargetKind.HAND_ACTION,
})

_TYPE_FILTERS: dict[TargetKind, CardType] = {
    TargetKind.HAND_TREASURE: CardType.TREASURE,
    TargetKind.HAND_POLLUTION: CardType.POLLUTION,
    TargetKind.HAND_ACTION: CardType.ACTION,
    TargetKind.ALL_HAND_TREASURE: CardType.TREASURE,
    TargetKind.ALL_HAND_POLLUTION: CardType.POLLUTION,
}


@dataclass
class TargetRequest:
    """
    A request for the player to pick targets.

    This is returned to the UI when the engine suspends. The player may
    pick between 0 and `max_selections` of `candidates`.
    """
    target_kind: TargetKind
    max_selections: int
    candidates: list[CardInstance] = field(default_factory=list)
    effect_kind: EffectKind | str | None = None

    @property
    def candidate_ids(self) -> list[str]:
        return [card.instance_id for card in self.candidates]

    def to_dict(self) -> dict[str, Any]:
        return {
            "target_kind": self.target_kind.value,
            "max_selections": self.max_selections,
            "candidates": [card.to_dict() for card in self.candidates],
            "effect_kind": kind_name(self.effect_kind) if self.effect_kind is not None else None,
        }


def requires_selection(target: TargetKind) -> bool:
    """Whether a target kind needs an external selection."""
    return target in SELECTION_TARGETS


def selection_cap(effect: EffectDefinition, candidate_count: int) -> int:
    """Declared max targets, or every candidate when 0."""
    return effect.max_targets if effect.max_targets > 0 else candidate_count


class TargetingGateway:
    """Collects target candidates from the hand and deck."""

    def __init__(self, catalog: CardCatalog, rng: random.Random):
        self.catalog = catalog
        self.rng = rng

    def selectable_cards(self, effect: EffectDefinition, state: GameState) -> list[CardInstance]:
        """Hand cards eligible for a selection target, in hand order."""
        target = effect.target
        if target == TargetKind.HAND_CARD:
            candidates = list(state.hand)
        elif target in _TYPE_FILTERS:
            wanted = _TYPE_FILTERS[target]
            candidates = [card for card in state.hand if self._card_type(card) == wanted]
        else:
            return []

        # Temporary cards are never upgrade candidates
        if effect.kind == EffectKind.PERMANENT_UPGRADE:
            candidates = [card for card in candidates if not card.is_temporary]
        return candidates

    def auto_targets(
        self,
        effect: EffectDefinition,
        state: GameState,
        source_card: CardInstance | None,
    ) -> list[CardInstance]:
        """Targets for kinds that need no selection."""
        target = effect.target
        if target in (TargetKind.ALL_HAND_TREASURE, TargetKind.ALL_HAND_POLLUTION):
            targets = [card for card in state.hand if self._card_type(card) == _TYPE_FILTERS[target]]
            logger.debug("Auto-collected %d targets for %s", len(targets), target.value)
            return targets
        if target == TargetKind.SELF:
            return [source_card] if source_card is not None else []
        if target == TargetKind.DECK_TOP:
            top = state.deck_top
            return [top] if top is not None else []
        if target == TargetKind.RANDOM:
            if not state.hand:
                return []
            count = min(effect.max_targets or 1, len(state.hand))
            return self.rng.sample(state.hand, count)
        return []

    def build_request(self, effect: EffectDefinition, candidates: list[CardInstance]) -> TargetRequest:
        return TargetRequest(
            target_kind=effect.target,
            max_selections=selection_cap(effect, len(candidates)),
            candidates=list(candidates),
            effect_kind=effect.kind,
        )

    def _card_type(self, card: CardInstance) -> CardType | None:
        definition = self.catalog.get_card(card.card_id)
        return definition.card_type if definition else None
