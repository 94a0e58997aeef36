"""
Definition Validation - Consistency checks for a card catalog.

Validates that:
1. Required fields are present (ids, names, treasure grades, pollution types)
2. References are valid (card ids named by effects exist)
3. Effect parameters make sense for their kind
4. Unknown kinds are reported (as warnings, since the engine tolerates them)
"""

from __future__ import annotations
from dataclasses import dataclass

from .cards import CardCatalog, CardDefinition, CardType, EventDefinition, TreasureGrade
from .effect_dsl import (
    Condition,
    ConditionGroup,
    ConditionKind,
    DynamicValueSource,
    EffectDefinition,
    EffectKind,
    TargetKind,
    ValueSourceKind,
    kind_name,
)


class DefinitionValidationError(Exception):
    """Raised when catalog validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Definition validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(catalog: CardCatalog, raise_on_error: bool = False) -> ValidationResult:
    """
    Validate every card and event in a catalog.

    Returns ValidationResult with errors and warnings.
    Raises DefinitionValidationError if raise_on_error=True and errors exist.
    """
    errors: list[str] = []
    warnings: list[str] = []

    for card in catalog.cards.values():
        card_errors, card_warnings = _validate_card(card, catalog)
        errors.extend(card_errors)
        warnings.extend(card_warnings)

    for event in catalog.events.values():
        event_errors, event_warnings = _validate_event(event, catalog)
        errors.extend(event_errors)
        warnings.extend(event_warnings)

    if not catalog.cards:
        warnings.append("No cards defined")

    if errors and raise_on_error:
        raise DefinitionValidationError(errors)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_card(card: CardDefinition, catalog: CardCatalog) -> tuple[list[str], list[str]]:
    """Validate a single card definition."""
    errors = []
    warnings = []
    if not card.id:
        errors.append("Card has empty id")
    if not card.name:
        errors.append(f"Card '{card.id}' has empty name")

    if card.card_type == CardType.TREASURE and card.treasure_grade is None:
        errors.append(f"Treasure card '{card.id}' has no treasure_grade")
    if card.card_type == CardType.POLLUTION and card.pollution_type is None:
        errors.append(f"Pollution card '{card.id}' has no pollution_type")
    if card.card_type == CardType.ACTION and not card.effects:
        warnings.append(f"Action card '{card.id}' has no effects")
    if card.card_type != CardType.ACTION and card.effects:
        warnings.append(f"Card '{card.id}' is not an action card; its effects never run on play")

    group_errors, group_warnings = _validate_groups(card.effects, catalog)
    errors.extend(f"Card '{card.id}': {e}" for e in group_errors)
    warnings.extend(f"Card '{card.id}': {w}" for w in group_warnings)
    return errors, warnings


def _validate_event(event: EventDefinition, catalog: CardCatalog) -> tuple[list[str], list[str]]:
    """Validate an event, its trigger conditions and choices."""
    errors = []
    warnings = []
    if not event.id:
        errors.append("Event has empty id")
    if not event.name:
        errors.append(f"Event '{event.id}' has empty name")

    for condition in event.trigger_conditions:
        _check_condition(condition, errors, warnings)

    group_errors, group_warnings = _validate_groups(event.effects, catalog)
    errors.extend(group_errors)
    warnings.extend(group_warnings)

    choice_ids = set()
    for choice in event.choices:
        if choice.choice_id in choice_ids:
            errors.append(f"Duplicate choice_id '{choice.choice_id}'")
        choice_ids.add(choice.choice_id)

        for condition in choice.requirements:
            _check_condition(condition, errors, warnings)
        choice_errors, choice_warnings = _validate_groups(choice.effects, catalog)
        errors.extend(f"choice '{choice.choice_id}': {e}" for e in choice_errors)
        warnings.extend(f"choice '{choice.choice_id}': {w}" for w in choice_warnings)

    if not event.effects and not event.choices:
        warnings.append(f"Event '{event.id}' has neither effects nor choices")
    if event.effects and event.choices:
        warnings.append("effects are ignored on a choice event")

    return (
        [f"Event '{event.id}': {e}" for e in errors],
        [f"Event '{event.id}': {w}" for w in warnings],
    )


def _validate_groups(groups: list[ConditionGroup], catalog: CardCatalog) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []
    for group in groups:
        for condition in group.conditions:
            _check_condition(condition, errors, warnings)
        if group.else_effects and not group.conditions:
            warnings.append("else_effects on a group without conditions never run")
        for effect in group.effects + group.else_effects:
            _check_effect(effect, catalog, errors, warnings)
    return errors, warnings


def _check_condition(condition: Condition, errors: list[str], warnings: list[str]) -> None:
    if not isinstance(condition.kind, ConditionKind):
        warnings.append(f"Unknown condition kind '{kind_name(condition.kind)}' is always true")
        return
    if condition.kind == ConditionKind.HAS_SPECIFIC_CARD_IN_DECK and not condition.card_id:
        errors.append("has_specific_card_in_deck requires card_id")


def _check_effect(
    effect: EffectDefinition,
    catalog: CardCatalog,
    errors: list[str],
    warnings: list[str],
) -> None:
    """Validate effect parameters for its kind."""
    if not isinstance(effect.kind, EffectKind):
        warnings.append(f"Unknown effect kind '{kind_name(effect.kind)}' is skipped")
        return

    name = effect.kind.value
    if effect.max_targets < 0:
        errors.append(f"{name}: max_targets must be >= 0")

    if effect.kind == EffectKind.CREATE_TEMP_TREASURE:
        grades = {grade.value for grade in TreasureGrade}
        if effect.create_grade not in grades:
            errors.append(f"{name}: create_grade must be one of {sorted(grades)}")

    if effect.kind == EffectKind.GAMBLE and not 0 <= effect.success_chance <= 100:
        errors.append(f"{name}: success_chance must be between 0 and 100")

    if effect.kind == EffectKind.GOLD_MULTIPLIER and effect.dynamic is None:
        errors.append(f"{name}: requires a dynamic source carrying the multiplier")

    if effect.kind == EffectKind.ADD_CARD_TO_DECK:
        if not effect.card_id:
            errors.append(f"{name}: requires card_id")
        elif not catalog.has_card(effect.card_id):
            errors.append(f"{name}: references unknown card '{effect.card_id}'")

    if effect.kind == EffectKind.REMOVE_CARD_FROM_DECK and effect.card_id and not catalog.has_card(effect.card_id):
        warnings.append(f"{name}: references unknown card '{effect.card_id}'")

    if effect.kind == EffectKind.PERMANENT_UPGRADE and effect.target not in (
        TargetKind.HAND_TREASURE, TargetKind.HAND_CARD, TargetKind.ALL_HAND_TREASURE,
    ):
        warnings.append(f"{name}: target '{effect.target.value}' never yields treasures to upgrade")

    for source in _sources(effect):
        _check_source(name, source, effect, errors, warnings)


def _sources(effect: EffectDefinition) -> list[DynamicValueSource]:
    sources = []
    for candidate in (effect.dynamic, effect.success_value, effect.fail_value):
        if isinstance(candidate, DynamicValueSource):
            sources.append(candidate)
    return sources


def _check_source(
    name: str,
    source: DynamicValueSource,
    effect: EffectDefinition,
    errors: list[str],
    warnings: list[str],
) -> None:
    if not isinstance(source.kind, ValueSourceKind):
        warnings.append(f"{name}: unknown value source '{kind_name(source.kind)}' resolves to its base")
        return
    if source.kind == ValueSourceKind.RANDOM_RANGE and source.min > source.max:
        warnings.append(f"{name}: random_range min {source.min} > max {source.max}")
    if source.kind == ValueSourceKind.RANDOM_DICE and source.base < 1:
        errors.append(f"{name}: random_dice needs base >= 1 (die size)")
    if source.kind == ValueSourceKind.TARGET_GOLD_VALUE and effect.target == TargetKind.NONE:
        warnings.append(f"{name}: target_gold_value without a target is always 0")
