"""
Value Resolver - Computes effect magnitudes.

A magnitude is either the effect's fixed value or a DynamicValueSource
evaluated against the current state, the result stack and (for
target_gold_value) the selected targets.

Rounding is round-half-to-even, which is what Python's round() does.
"""

from __future__ import annotations
from typing import Callable, Sequence
import logging
import math
import random

from ..definitions.effect_dsl import (
    DynamicValueSource,
    EffectDefinition,
    ValueSourceKind,
    kind_name,
    parse_kind,
)
from ..definitions.cards import CardCatalog, gold_value_of
from .state import CardInstance, GameState
from .results import ResultStack

logger = logging.getLogger(__name__)


def effective_gold_value(card: CardInstance, catalog: CardCatalog) -> int:
    """Gold a treasure card is worth right now (boosted grade wins)."""
    if card.boosted_grade is not None:
        return gold_value_of(card.boosted_grade)
    definition = catalog.get_card(card.card_id)
    if definition is None:
        return 0
    return definition.gold_value


class ValueResolver:
    """
    Resolves dynamic values.

    The random source is injected so that seeded engines replay the same
    draws.
    """

    def __init__(self, catalog: CardCatalog, rng: random.Random):
        self.catalog = catalog
        self.rng = rng

        self._sources: dict[ValueSourceKind, Callable[..., int]] = {
            ValueSourceKind.FIXED: lambda src, s, r, t: src.base,
            ValueSourceKind.PREVIOUS_COUNT: lambda src, s, r, t: r.last_count,
            ValueSourceKind.PREVIOUS_VALUE: lambda src, s, r, t: r.last_value,
            ValueSourceKind.CURRENT_GOLD: lambda src, s, r, t: s.gold,
            ValueSourceKind.CURRENT_GOLD_PERCENT: lambda src, s, r, t: round(s.gold * src.base / 100),
            ValueSourceKind.HAND_COUNT: lambda src, s, r, t: len(s.hand),
            ValueSourceKind.DECK_COUNT: lambda src, s, r, t: len(s.deck),
            ValueSourceKind.UNIT_COUNT: lambda src, s, r, t: len(s.units),
            ValueSourceKind.DECK_TOP_GOLD_VALUE: lambda src, s, r, t: self._deck_top_gold(s),
            ValueSourceKind.TARGET_GOLD_VALUE: lambda src, s, r, t: self._targets_gold(t),
            ValueSourceKind.RANDOM_RANGE: lambda src, s, r, t: self._random_range(src),
            ValueSourceKind.RANDOM_DICE: lambda src, s, r, t: self._random_dice(src),
        }

    def resolve(
        self,
        source: DynamicValueSource,
        state: GameState,
        results: ResultStack,
        targets: Sequence[CardInstance] = (),
    ) -> int:
        """
        Resolve a dynamic value source to an integer.

        Final value is round(base_result * multiplier). A non-finite
        product (infinite or NaN multiplier) resolves to 0.
        """
        kind = parse_kind(ValueSourceKind, source.kind)
        reader = self._sources.get(kind) if isinstance(kind, ValueSourceKind) else None
        if reader is None:
            logger.warning("Unknown value source %r, using base %d", kind_name(kind), source.base)
            base_result = source.base
        else:
            base_result = reader(source, state, results, targets)

        product = base_result * source.multiplier
        if not math.isfinite(product):
            logger.warning(
                "Non-finite value from %s (multiplier %r), using 0",
                kind_name(kind), source.multiplier,
            )
            return 0
        return round(product)

    def resolve_effect(
        self,
        effect: EffectDefinition,
        state: GameState,
        results: ResultStack,
        targets: Sequence[CardInstance] = (),
    ) -> int:
        """Magnitude of an effect: dynamic source if non-fixed, else its value."""
        if effect.has_dynamic_value:
            return self.resolve(effect.dynamic, state, results, targets)
        return effect.value

    def resolve_amount(
        self,
        amount: int | DynamicValueSource,
        state: GameState,
        results: ResultStack,
    ) -> int:
        """Resolve an int-or-source parameter such as a gamble outcome."""
        if isinstance(amount, DynamicValueSource):
            return self.resolve(amount, state, results)
        return amount

    # =========================================================================
    # Sources
    # =========================================================================

    def _deck_top_gold(self, state: GameState) -> int:
        top = state.deck_top
        if top is None:
            return 0
        definition = self.catalog.get_card(top.card_id)
        if definition is None or not definition.is_treasure:
            return 0
        return definition.gold_value

    def _targets_gold(self, targets: Sequence[CardInstance]) -> int:
        return sum(effective_gold_value(card, self.catalog) for card in targets)

    def _random_range(self, source: DynamicValueSource) -> int:
        low, high = sorted((source.min, source.max))
        return self.rng.randint(low, high)

    def _random_dice(self, source: DynamicValueSource) -> int:
        if source.base < 1:
            return 0
        return self.rng.randint(1, source.base)
