"""
Effect Handlers - One handler per effect kind.

A handler receives the authoritative magnitude and the target list, calls
into the collaborator systems, and reports an EffectResult:
- count: cards or units processed
- value: gold (or other magnitude) produced
- success: False when the effect could not do anything it was asked to

Handlers never raise for bad data. Unknown kinds and unknown card ids are
logged and reported as failures.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging
import random

from ..definitions.effect_dsl import EffectDefinition, EffectKind, kind_name, parse_kind
from ..definitions.cards import (
    CardCatalog,
    CardType,
    TreasureGrade,
    boosted_grade,
    card_id_for_grade,
    next_grade,
)
from .state import (
    CardInstance,
    GameState,
    GrowthStage,
    Job,
    PersistentEffect,
    PersistentEffectKind,
)
from .results import EffectResult, ResultStack
from .systems import Collaborators
from .values import ValueResolver

logger = logging.getLogger(__name__)


DEFAULT_BOOST_STEPS = 1
DEFAULT_REVEAL_COUNT = 3
DEFAULT_PERSISTENT_DURATION = 1
DEFAULT_MAINTENANCE_DURATION = 3

# Whole-deck upgrade chain
DECK_UPGRADES: dict[str, str] = {
    "copper": "silver",
    "silver": "gold_coin",
    "gold_coin": "emerald",
}

UNIT_JOB_HINTS: dict[str, Job] = {
    "knight": Job.KNIGHT,
    "bishop": Job.BISHOP,
    "rook": Job.ROOK,
    "queen": Job.QUEEN,
}


@dataclass
class HandlerContext:
    """Everything a handler may read."""
    effect: EffectDefinition
    magnitude: int
    state: GameState
    results: ResultStack
    targets: list[CardInstance] = field(default_factory=list)
    source_card: CardInstance | None = None

    @property
    def kind(self) -> EffectKind | str:
        return self.effect.kind


class EffectHandlers:
    """
    Dispatches effects to their handlers.

    Owns no state of its own; everything it changes lives in the GameState
    or behind the collaborator systems.
    """

    def __init__(
        self,
        catalog: CardCatalog,
        systems: Collaborators,
        values: ValueResolver,
        rng: random.Random,
        max_promotion_level: int = 3,
    ):
        self.catalog = catalog
        self.systems = systems
        self.values = values
        self.rng = rng
        self.max_promotion_level = max_promotion_level

        self.handlers: dict[EffectKind, Callable[[HandlerContext], EffectResult]] = {
            EffectKind.DRAW_CARD: self._draw_card,
            EffectKind.ADD_ACTION: self._add_action,
            EffectKind.ADD_GOLD: self._add_gold,
            EffectKind.CREATE_TEMP_TREASURE: self._create_temp_treasure,
            EffectKind.BOOST_TREASURE: self._boost_treasure,
            EffectKind.PERMANENT_UPGRADE: self._permanent_upgrade,
            EffectKind.SETTLE_CARD: self._settle_card,
            EffectKind.GOLD_MULTIPLIER: self._gold_multiplier,
            EffectKind.GOLD_BONUS: self._gold_bonus,
            EffectKind.DESTROY_CARD: self._destroy_card,
            EffectKind.DESTROY_POLLUTION: self._destroy_pollution,
            EffectKind.MOVE_TO_DECK_BOTTOM: self._move_to_deck_bottom,
            EffectKind.SHUFFLE_DECK: self._shuffle_deck,
            EffectKind.GAMBLE: self._gamble,
            EffectKind.REVEAL_AND_GAIN: self._reveal_and_gain,
            EffectKind.DELAYED_GOLD: self._delayed_gold,
            EffectKind.PERSISTENT_GOLD: self._persistent_gold,
            EffectKind.PERSISTENT_MAINTENANCE: self._persistent_maintenance,
            EffectKind.DRAW_UNTIL: self._draw_until,
            EffectKind.IGNORE_POLLUTION: self._ignore_pollution,
            EffectKind.GAIN_UNIT: self._gain_unit,
            EffectKind.REMOVE_UNIT: self._remove_unit,
            EffectKind.FREE_PROMOTION: self._free_promotion,
            EffectKind.ADD_PROMOTION_LEVEL: self._add_promotion_level,
            EffectKind.ADD_CARD_TO_DECK: self._add_card_to_deck,
            EffectKind.REMOVE_CARD_FROM_DECK: self._remove_card_from_deck,
            EffectKind.UPGRADE_CARD_IN_DECK: self._upgrade_card_in_deck,
            EffectKind.SPEND_GOLD_PERCENT: self._spend_gold_percent,
            EffectKind.PROMOTION_DISCOUNT: self._promotion_discount,
            EffectKind.MAINTENANCE_MODIFIER: self._maintenance_modifier,
        }

    def execute(self, ctx: HandlerContext) -> EffectResult:
        """Run the handler for ctx.effect.kind."""
        kind = parse_kind(EffectKind, ctx.kind)
        handler = self.handlers.get(kind) if isinstance(kind, EffectKind) else None
        if handler is None:
            logger.warning("Unsupported effect kind %r, skipping", kind_name(kind))
            return EffectResult(kind=kind, success=False)
        return handler(ctx)

    # =========================================================================
    # Basic
    # =========================================================================

    def _draw_card(self, ctx: HandlerContext) -> EffectResult:
        drawn = self.systems.deck.draw(ctx.magnitude)
        logger.info("Drew %d of %d cards", len(drawn), ctx.magnitude)
        return EffectResult(ctx.kind, True, count=len(drawn), value=len(drawn))

    def _add_action(self, ctx: HandlerContext) -> EffectResult:
        self.systems.turn.add_actions(ctx.magnitude)
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=ctx.magnitude)

    def _add_gold(self, ctx: HandlerContext) -> EffectResult:
        self._apply_gold(ctx.magnitude)
        logger.info("Gold %+d", ctx.magnitude)
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=ctx.magnitude)

    # =========================================================================
    # Treasure
    # =========================================================================

    def _create_temp_treasure(self, ctx: HandlerContext) -> EffectResult:
        grade_value = ctx.effect.create_grade
        try:
            grade = TreasureGrade(grade_value)
        except ValueError:
            logger.warning("create_temp_treasure with invalid grade %r", grade_value)
            return EffectResult(ctx.kind, False)

        treasure = self.catalog.treasure_card(grade)
        if treasure is None:
            logger.warning("Treasure card %s is not defined", card_id_for_grade(grade))
            return EffectResult(ctx.kind, False)

        self.systems.deck.add_to_hand(treasure.id, is_temporary=True)
        return EffectResult(ctx.kind, True, count=1, value=ctx.magnitude)

    def _boost_treasure(self, ctx: HandlerContext) -> EffectResult:
        steps = ctx.magnitude if ctx.magnitude > 0 else DEFAULT_BOOST_STEPS
        boosted = 0
        for card in ctx.targets:
            definition = self.catalog.get_card(card.card_id)
            if definition is None or not definition.is_treasure or definition.treasure_grade is None:
                continue
            current = card.boosted_grade or definition.treasure_grade
            card.boosted_grade = boosted_grade(current, steps)
            boosted += 1
            logger.debug("Boosted %s to %s", card.instance_id, card.boosted_grade.name)
        return EffectResult(ctx.kind, True, count=boosted, value=ctx.magnitude)

    def _permanent_upgrade(self, ctx: HandlerContext) -> EffectResult:
        state = ctx.state
        upgraded = 0
        for card in ctx.targets:
            definition = self.catalog.get_card(card.card_id)
            if definition is None or not definition.is_treasure or definition.treasure_grade is None:
                continue
            grade = next_grade(definition.treasure_grade)
            if grade is None:
                logger.debug("%s is already the top grade", card.card_id)
                continue
            if card not in state.hand:
                continue

            index = state.hand.index(card)
            replacement = state.new_card(card_id_for_grade(grade))
            replacement.owner_unit_id = card.owner_unit_id
            state.hand[index] = replacement
            upgraded += 1
        return EffectResult(ctx.kind, True, count=upgraded, value=ctx.magnitude)

    def _settle_card(self, ctx: HandlerContext) -> EffectResult:
        if not ctx.targets:
            return EffectResult(ctx.kind, True)

        total = self.systems.deck.settle(ctx.targets)
        if total > 0:
            self.systems.economy.add_gold(total)
        logger.info("Settled %d cards for %d gold", len(ctx.targets), total)
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=total)

    # =========================================================================
    # Gold modifiers
    # =========================================================================

    def _gold_multiplier(self, ctx: HandlerContext) -> EffectResult:
        dynamic = ctx.effect.dynamic
        if dynamic is None:
            logger.warning("gold_multiplier without a dynamic source, nothing to apply")
            return EffectResult(ctx.kind, False)
        self.systems.economy.multiply_multiplier(dynamic.multiplier)
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=ctx.magnitude)

    def _gold_bonus(self, ctx: HandlerContext) -> EffectResult:
        self.systems.economy.add_bonus(ctx.magnitude)
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=ctx.magnitude)

    # =========================================================================
    # Deck management
    # =========================================================================

    def _destroy_card(self, ctx: HandlerContext) -> EffectResult:
        destroyed = sum(1 for card in ctx.targets if self.systems.deck.destroy(card))
        return EffectResult(ctx.kind, True, count=destroyed, value=ctx.magnitude)

    def _destroy_pollution(self, ctx: HandlerContext) -> EffectResult:
        targets = ctx.targets
        if not targets:
            pollution = [card for card in ctx.state.hand if self._card_type(card) == CardType.POLLUTION]
            limit = ctx.magnitude if ctx.magnitude > 0 else len(pollution)
            targets = pollution[:limit]

        destroyed = sum(1 for card in targets if self.systems.deck.destroy(card))
        return EffectResult(ctx.kind, True, count=destroyed, value=ctx.magnitude)

    def _move_to_deck_bottom(self, ctx: HandlerContext) -> EffectResult:
        moved = self.systems.deck.move_to_bottom(ctx.targets)
        return EffectResult(ctx.kind, True, count=moved, value=ctx.magnitude)

    def _shuffle_deck(self, ctx: HandlerContext) -> EffectResult:
        self.systems.deck.shuffle()
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=ctx.magnitude)

    # =========================================================================
    # Gambling / reveal
    # =========================================================================

    def _gamble(self, ctx: HandlerContext) -> EffectResult:
        roll = self.rng.randrange(100)
        won = roll < ctx.effect.success_chance

        success_value = self.values.resolve_amount(ctx.effect.success_value, ctx.state, ctx.results)
        fail_value = self.values.resolve_amount(ctx.effect.fail_value, ctx.state, ctx.results)
        outcome = success_value if won else fail_value

        self._apply_gold(outcome)
        logger.info("Gamble %s (roll %d vs %d%%): %+d gold",
                    "won" if won else "lost", roll, ctx.effect.success_chance, outcome)
        return EffectResult(ctx.kind, won, count=len(ctx.targets), value=outcome)

    def _reveal_and_gain(self, ctx: HandlerContext) -> EffectResult:
        count = ctx.magnitude if ctx.magnitude > 0 else DEFAULT_REVEAL_COUNT
        revealed = self.systems.deck.reveal_top(count)
        if not revealed:
            logger.info("Nothing to reveal, deck is empty")
            return EffectResult(ctx.kind, False)

        gained = 0
        for card in revealed:
            if self._card_type(card) == CardType.TREASURE:
                ctx.state.hand.append(card)
                gained += 1
            else:
                ctx.state.discard_pile.append(card)
        logger.info("Revealed %d cards, %d treasures to hand", len(revealed), gained)
        return EffectResult(ctx.kind, True, count=gained, value=len(revealed))

    # =========================================================================
    # Persistent
    # =========================================================================

    def _delayed_gold(self, ctx: HandlerContext) -> EffectResult:
        return self._add_persistent(ctx, PersistentEffectKind.DELAYED_GOLD, DEFAULT_PERSISTENT_DURATION)

    def _persistent_gold(self, ctx: HandlerContext) -> EffectResult:
        return self._add_persistent(ctx, PersistentEffectKind.GOLD_PER_TURN, DEFAULT_PERSISTENT_DURATION)

    def _persistent_maintenance(self, ctx: HandlerContext) -> EffectResult:
        return self._add_persistent(ctx, PersistentEffectKind.MAINTENANCE_INCREASE, DEFAULT_PERSISTENT_DURATION)

    def _maintenance_modifier(self, ctx: HandlerContext) -> EffectResult:
        return self._add_persistent(ctx, PersistentEffectKind.MAINTENANCE_INCREASE, DEFAULT_MAINTENANCE_DURATION)

    def _add_persistent(self, ctx: HandlerContext, kind: PersistentEffectKind, default_duration: int) -> EffectResult:
        duration = ctx.effect.duration if ctx.effect.duration > 0 else default_duration
        record = PersistentEffect(
            effect_id=ctx.state.new_effect_id(),
            kind=kind,
            value=ctx.magnitude,
            remaining_turns=duration,
        )
        ctx.state.active_effects.append(record)
        logger.info("Scheduled %s %d for %d turns", kind.value, ctx.magnitude, duration)
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=ctx.magnitude)

    # =========================================================================
    # Special
    # =========================================================================

    def _draw_until(self, ctx: HandlerContext) -> EffectResult:
        missing = ctx.magnitude - len(ctx.state.hand)
        if missing <= 0:
            return EffectResult(ctx.kind, True, value=ctx.magnitude)
        drawn = self.systems.deck.draw(missing)
        return EffectResult(ctx.kind, True, count=len(drawn), value=ctx.magnitude)

    def _ignore_pollution(self, ctx: HandlerContext) -> EffectResult:
        ctx.state.pollution_ignored = True
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=ctx.magnitude)

    # =========================================================================
    # Units
    # =========================================================================

    def _gain_unit(self, ctx: HandlerContext) -> EffectResult:
        hint = (ctx.effect.card_id or "").lower()
        job = UNIT_JOB_HINTS.get(hint, Job.PAWN)
        name = f"Recruit {len(ctx.state.units) + 1}"

        unit = self.systems.units.create_unit(name, job, GrowthStage.YOUNG)
        self.systems.houses.auto_place(unit)
        return EffectResult(ctx.kind, True, count=1, value=ctx.magnitude)

    def _remove_unit(self, ctx: HandlerContext) -> EffectResult:
        if not ctx.state.units:
            logger.info("No unit to remove")
            return EffectResult(ctx.kind, False)
        victim = self.rng.choice(ctx.state.units)
        self.systems.units.kill_unit(victim)
        return EffectResult(ctx.kind, True, count=1, value=ctx.magnitude)

    def _free_promotion(self, ctx: HandlerContext) -> EffectResult:
        promotable = [u for u in ctx.state.units if u.can_promote(self.max_promotion_level)]
        if not promotable:
            logger.info("No promotable unit")
            return EffectResult(ctx.kind, False)
        unit = self.rng.choice(promotable)
        granted = self.systems.units.request_free_promotion(unit)
        return EffectResult(ctx.kind, granted, count=1 if granted else 0, value=ctx.magnitude)

    def _add_promotion_level(self, ctx: HandlerContext) -> EffectResult:
        if not ctx.state.units:
            logger.info("No unit to promote")
            return EffectResult(ctx.kind, False)
        unit = self.rng.choice(ctx.state.units)
        level = min(self.max_promotion_level, unit.promotion_level + ctx.magnitude)
        self.systems.units.set_promotion_level(unit, level)
        logger.info("%s promotion level -> %d", unit.name, level)
        return EffectResult(ctx.kind, True, count=1, value=ctx.magnitude)

    # =========================================================================
    # Whole deck
    # =========================================================================

    def _add_card_to_deck(self, ctx: HandlerContext) -> EffectResult:
        card_id = ctx.effect.card_id
        if not card_id or not self.catalog.has_card(card_id):
            logger.warning("add_card_to_deck: unknown card %r", card_id)
            return EffectResult(ctx.kind, False)

        copies = ctx.magnitude if ctx.magnitude > 0 else 1
        for _ in range(copies):
            self.systems.deck.add_to_discard(card_id)
        return EffectResult(ctx.kind, True, count=copies, value=ctx.magnitude)

    def _remove_card_from_deck(self, ctx: HandlerContext) -> EffectResult:
        wanted = ctx.magnitude if ctx.magnitude > 0 else 1
        removed = 0
        for _ in range(wanted):
            found = self._find_in_all_zones(ctx.state, ctx.effect.card_id)
            if found is None:
                break
            zone, card = found
            zone.remove(card)
            removed += 1

        if removed == 0:
            logger.info("remove_card_from_deck: nothing to remove")
        return EffectResult(ctx.kind, removed > 0, count=removed, value=ctx.magnitude)

    def _upgrade_card_in_deck(self, ctx: HandlerContext) -> EffectResult:
        from_id = ctx.effect.card_id or "copper"
        to_id = DECK_UPGRADES.get(from_id)
        if to_id is None:
            logger.info("%s cannot be upgraded", from_id)
            return EffectResult(ctx.kind, False)

        found = self._find_in_all_zones(ctx.state, from_id)
        if found is None:
            logger.info("No %s to upgrade", from_id)
            return EffectResult(ctx.kind, False)

        zone, card = found
        replacement = ctx.state.new_card(to_id)
        replacement.owner_unit_id = card.owner_unit_id
        zone[zone.index(card)] = replacement
        return EffectResult(ctx.kind, True, count=1, value=ctx.magnitude)

    # =========================================================================
    # Gold / turn modifiers
    # =========================================================================

    def _spend_gold_percent(self, ctx: HandlerContext) -> EffectResult:
        loss = round(ctx.state.gold * ctx.magnitude / 100)
        if loss > 0:
            self.systems.economy.subtract_gold(loss)
        logger.info("Lost %d%% of gold: -%d", ctx.magnitude, loss)
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=loss)

    def _promotion_discount(self, ctx: HandlerContext) -> EffectResult:
        ctx.state.promotion_discount = ctx.magnitude
        return EffectResult(ctx.kind, True, count=len(ctx.targets), value=ctx.magnitude)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _apply_gold(self, amount: int) -> None:
        if amount >= 0:
            self.systems.economy.add_gold(amount)
        else:
            self.systems.economy.subtract_gold(-amount)

    def _card_type(self, card: CardInstance) -> CardType | None:
        definition = self.catalog.get_card(card.card_id)
        return definition.card_type if definition else None

    def _find_in_all_zones(
        self,
        state: GameState,
        card_id: str | None,
    ) -> tuple[list[CardInstance], CardInstance] | None:
        """
        First matching card in deck, then discard pile, then hand.

        With no card_id, the first pollution card matches.
        """
        for zone in (state.deck, state.discard_pile, state.hand):
            for card in zone:
                if card_id is not None:
                    if card.card_id == card_id:
                        return zone, card
                elif self._card_type(card) == CardType.POLLUTION:
                    return zone, card
        return None
