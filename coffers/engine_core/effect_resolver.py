"""
Effect Resolver - Queue-based effect resolution engine.

This module runs one activation (a card play or an event) at a time:
- Conditional groups are expanded into a flat queue of pending effects
- Effects execute strictly in queue order
- Each result is pushed onto a result stack that later effects can read
- Effects targeting hand cards pause resolution until targets are provided

The resolver is two-phase. begin_activation() runs until the queue is empty
or a target selection is needed; resume() and cancel() continue from the
suspension point. Every call returns an ActivationOutcome.

State machine:
    IDLE -> EXPANDING -> (per effect) AUTO_TARGETING | AWAITING_TARGET
         -> DISPATCHING -> ... -> COMPLETED
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence
import logging
import random

from ..config import EngineConfig, ReentryPolicy
from ..definitions.effect_dsl import ConditionGroup, EffectDefinition, kind_name
from ..definitions.cards import CardCatalog
from .state import CardInstance, GameState
from .results import EffectResult, ResultStack
from .conditions import ConditionEvaluator
from .values import ValueResolver
from .targeting import TargetingGateway, TargetRequest, requires_selection
from .handlers import EffectHandlers, HandlerContext
from .systems import Collaborators, reference_collaborators
from .observers import EffectObserver
from .errors import ActivationInProgressError, InvalidSelectionError, NoPendingSelectionError

logger = logging.getLogger(__name__)


class ResolverState(Enum):
    """State of the effect resolver."""
    IDLE = "idle"  # Nothing has run yet
    EXPANDING = "expanding"  # Evaluating groups into the queue
    AUTO_TARGETING = "auto_targeting"  # Collecting targets without input
    AWAITING_TARGET = "awaiting_target"  # Paused for a target selection
    DISPATCHING = "dispatching"  # Running a handler
    COMPLETED = "completed"  # Queue drained


@dataclass
class PendingEffect:
    """An effect waiting in the queue, with its speculative magnitude."""
    effect: EffectDefinition
    speculative_value: int
    source_card: CardInstance | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": kind_name(self.effect.kind),
            "speculative_value": self.speculative_value,
            "target": self.effect.target.value,
        }


@dataclass
class ActivationOutcome:
    """
    Where an activation stands after a resolver call.

    `results` is a snapshot of the result stack at that point.
    """
    state: ResolverState
    results: list[EffectResult] = field(default_factory=list)
    target_request: TargetRequest | None = None
    source_card: CardInstance | None = None

    @property
    def completed(self) -> bool:
        return self.state == ResolverState.COMPLETED

    @property
    def awaiting_target(self) -> bool:
        return self.state == ResolverState.AWAITING_TARGET

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "results": [r.to_dict() for r in self.results],
            "target_request": self.target_request.to_dict() if self.target_request else None,
            "source_card": self.source_card.to_dict() if self.source_card else None,
        }


class EffectResolver:
    """
    Resolves activations against one GameState.

    The resolver is stateful during an activation; the GameState is shared
    by reference and mutated in place by the handlers.
    """

    def __init__(
        self,
        game_state: GameState,
        catalog: CardCatalog,
        systems: Collaborators | None = None,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.game_state = game_state
        self.catalog = catalog
        self.config = config or EngineConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.systems = systems or reference_collaborators(
            game_state,
            catalog,
            self.rng,
            max_hand_size=self.config.max_hand_size,
            max_promotion_level=self.config.max_promotion_level,
        )

        self.conditions = ConditionEvaluator(catalog, self.config.max_promotion_level)
        self.values = ValueResolver(catalog, self.rng)
        self.targeting = TargetingGateway(catalog, self.rng)
        self.handlers = EffectHandlers(
            catalog,
            self.systems,
            self.values,
            self.rng,
            max_promotion_level=self.config.max_promotion_level,
        )

        self.state = ResolverState.IDLE
        self.results = ResultStack()
        self.observers: list[EffectObserver] = []

        self._queue: deque[PendingEffect] = deque()
        self._current: PendingEffect | None = None
        self._request: TargetRequest | None = None
        self._source_card: CardInstance | None = None
        self._activation = 0

    # =========================================================================
    # Observers
    # =========================================================================

    def add_observer(self, observer: EffectObserver) -> None:
        self.observers.append(observer)

    def remove_observer(self, observer: EffectObserver) -> None:
        if observer in self.observers:
            self.observers.remove(observer)

    @property
    def is_busy(self) -> bool:
        return self.state not in (ResolverState.IDLE, ResolverState.COMPLETED)

    @property
    def pending_request(self) -> TargetRequest | None:
        return self._request

    # =========================================================================
    # Two-phase API
    # =========================================================================

    def begin_activation(
        self,
        groups: Sequence[ConditionGroup],
        source_card: CardInstance | None = None,
    ) -> ActivationOutcome:
        """
        Begin resolving a list of conditional groups.

        Returns an outcome that is either completed or awaiting a target.
        """
        if self.is_busy:
            if self.config.reentry_policy == ReentryPolicy.REJECT:
                raise ActivationInProgressError(
                    f"Activation already in progress (state: {self.state.value})"
                )
            logger.warning(
                "Activation started while another is in progress (state: %s); "
                "discarding %d queued effects",
                self.state.value, len(self._queue),
            )

        self._activation += 1
        activation = self._activation
        self._queue.clear()
        self.results = ResultStack()
        self._current = None
        self._request = None
        self._source_card = source_card

        for observer in self.observers:
            observer.on_activation_started(source_card)
        if activation != self._activation:
            return self._outcome()

        self._expand(groups, source_card)
        if activation != self._activation:
            return self._outcome()
        return self._drain(activation)

    def resume(self, selection: Sequence[str | CardInstance]) -> ActivationOutcome:
        """
        Provide the selected targets for the pending request.

        Accepts instance ids or card instances. Raises InvalidSelectionError
        (and stays suspended) for cards outside the candidates or too many
        cards.
        """
        if self.state != ResolverState.AWAITING_TARGET or self._request is None:
            raise NoPendingSelectionError("No target selection pending")

        targets = self._validate_selection(selection, self._request)
        pending = self._current
        self._request = None

        activation = self._activation
        self._dispatch(pending, targets)
        if activation != self._activation:
            return self._outcome()
        return self._drain(activation)

    def cancel(self) -> ActivationOutcome:
        """
        Cancel the pending target selection.

        The current effect fails with count 0 and the rest of the queue
        still runs. Cancelling with nothing pending does nothing.
        """
        if self.state != ResolverState.AWAITING_TARGET:
            logger.info("cancel() with no pending selection ignored (state: %s)", self.state.value)
            return self._outcome()

        pending = self._current
        self._request = None
        logger.info("Target selection cancelled for %s", kind_name(pending.effect.kind))

        activation = self._activation
        self._complete(pending, EffectResult(pending.effect.kind, False), pending.speculative_value)
        if activation != self._activation:
            return self._outcome()
        return self._drain(activation)

    def preview(self) -> list[PendingEffect]:
        """Effects still queued (the awaiting one first) with speculative values."""
        pending = list(self._queue)
        if self.state == ResolverState.AWAITING_TARGET and self._current is not None:
            pending.insert(0, self._current)
        return pending

    # =========================================================================
    # Resolution
    # =========================================================================

    def _expand(self, groups: Sequence[ConditionGroup], source_card: CardInstance | None) -> None:
        """
        Evaluate every group and enqueue its then/else effects.

        All groups are evaluated before any effect runs.
        """
        self.state = ResolverState.EXPANDING
        for index, group in enumerate(groups):
            satisfied = self.conditions.group_satisfied(group, self.game_state, self.results)
            chosen = group.effects if satisfied else group.else_effects
            logger.debug("Group %d %s: %d effects", index, "matched" if satisfied else "else", len(chosen))

            for effect in chosen:
                value = self.values.resolve_effect(effect, self.game_state, self.results)
                self._queue.append(PendingEffect(effect, value, source_card))

    def _drain(self, activation: int) -> ActivationOutcome:
        """
        Run queued effects until complete or a selection is needed.
        """
        while self._queue:
            pending = self._queue.popleft()
            self._current = pending
            effect = pending.effect

            if requires_selection(effect.target):
                candidates = self.targeting.selectable_cards(effect, self.game_state)
                if not candidates:
                    logger.info("No eligible targets for %s, skipping", kind_name(effect.kind))
                    self._complete(pending, EffectResult(effect.kind, False), pending.speculative_value)
                else:
                    request = self.targeting.build_request(effect, candidates)
                    if not self.config.auto_select_targets:
                        return self._suspend(request)
                    self._dispatch(pending, candidates[:request.max_selections])
            else:
                self.state = ResolverState.AUTO_TARGETING
                targets = self.targeting.auto_targets(effect, self.game_state, pending.source_card)
                self._dispatch(pending, targets)

            if activation != self._activation:
                # A handler or observer started a new activation
                return self._outcome()

        return self._finish()

    def _suspend(self, request: TargetRequest) -> ActivationOutcome:
        self.state = ResolverState.AWAITING_TARGET
        self._request = request
        logger.debug("Awaiting up to %d targets (%s)", request.max_selections, request.target_kind.value)
        for observer in self.observers:
            observer.on_target_required(request)
        return self._outcome()

    def _dispatch(self, pending: PendingEffect, targets: list[CardInstance]) -> None:
        """Re-resolve the magnitude, run the handler, record the result."""
        self.state = ResolverState.DISPATCHING
        effect = pending.effect

        magnitude = pending.speculative_value
        if effect.has_dynamic_value:
            magnitude = self.values.resolve(effect.dynamic, self.game_state, self.results, targets)
            logger.debug("Re-resolved %s: %d -> %d", kind_name(effect.kind), pending.speculative_value, magnitude)

        ctx = HandlerContext(
            effect=effect,
            magnitude=magnitude,
            state=self.game_state,
            results=self.results,
            targets=targets,
            source_card=pending.source_card,
        )
        try:
            result = self.handlers.execute(ctx)
        except Exception:
            logger.exception("Handler for %s failed", kind_name(effect.kind))
            result = EffectResult(effect.kind, False)

        self._complete(pending, result, magnitude)

    def _complete(self, pending: PendingEffect, result: EffectResult, magnitude: int) -> None:
        self.results.push(result)
        self._current = None
        logger.info(
            "%s -> success=%s count=%d value=%d",
            kind_name(result.kind), result.success, result.count, result.value,
        )
        for observer in self.observers:
            observer.on_effect_executed(pending.effect.kind, magnitude, result)

    def _finish(self) -> ActivationOutcome:
        self.state = ResolverState.COMPLETED
        source_card = self._source_card
        outcome = self._outcome()

        self._queue.clear()
        self.results = ResultStack()
        self._current = None
        self._source_card = None

        logger.debug("Activation complete (%d results)", len(outcome.results))
        for observer in self.observers:
            observer.on_activation_completed(source_card)
        return outcome

    def _outcome(self) -> ActivationOutcome:
        return ActivationOutcome(
            state=self.state,
            results=self.results.snapshot(),
            target_request=self._request,
            source_card=self._source_card,
        )

    def _validate_selection(
        self,
        selection: Sequence[str | CardInstance],
        request: TargetRequest,
    ) -> list[CardInstance]:
        by_id = {card.instance_id: card for card in request.candidates}
        ids = [item.instance_id if isinstance(item, CardInstance) else item for item in selection]

        invalid = [instance_id for instance_id in ids if instance_id not in by_id]
        if invalid:
            raise InvalidSelectionError(f"Cards are not eligible targets: {invalid}", invalid)
        if len(set(ids)) != len(ids):
            raise InvalidSelectionError("A card was selected more than once")
        if len(ids) > request.max_selections:
            raise InvalidSelectionError(
                f"Selected {len(ids)} cards, at most {request.max_selections} allowed"
            )
        return [by_id[instance_id] for instance_id in ids]
