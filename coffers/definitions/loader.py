"""
Definition Loader - Reads card and event definitions from JSON.

The JSON document is validated with pydantic models and then converted to
the immutable engine definitions. Structural problems (missing fields,
wrong types, unknown target kinds) raise pydantic.ValidationError.

Kind strings the engine does not know (effect, condition or value-source
kinds) are NOT errors: they are kept as raw strings with a warning so the
engine's permissive fallbacks apply at runtime.

Document shape:
    {
      "cards":  [{"id", "name", "card_type", "treasure_grade", "effects": [group, ...]}, ...],
      "events": [{"id", "name", "trigger_conditions": [...], "effects": [...], "choices": [...]}, ...]
    }
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .cards import (
    CardCatalog,
    CardDefinition,
    CardRarity,
    CardType,
    EventChoice,
    EventDefinition,
    PollutionType,
    TreasureGrade,
    TREASURE_CARD_IDS,
)
from .effect_dsl import (
    Comparison,
    Condition,
    ConditionGroup,
    ConditionKind,
    DynamicValueSource,
    EffectDefinition,
    EffectKind,
    TargetKind,
    ValueSourceKind,
    parse_kind,
)

logger = logging.getLogger(__name__)

_GRADE_BY_CARD_ID = {card_id: grade for grade, card_id in TREASURE_CARD_IDS.items()}


def parse_grade(raw: Union[int, str]) -> TreasureGrade:
    """Accept a grade number, a grade name ("emerald") or a treasure card id ("gold_coin")."""
    if isinstance(raw, int):
        return TreasureGrade(raw)
    key = raw.strip().lower()
    if key in _GRADE_BY_CARD_ID:
        return _GRADE_BY_CARD_ID[key]
    try:
        return TreasureGrade[key.upper()]
    except KeyError:
        raise ValueError(f"Unknown treasure grade: {raw!r}")


# =============================================================================
# Document models
# =============================================================================

class DynamicValueModel(BaseModel):
    """A dynamic value source."""
    kind: str = "fixed"
    base: int = 0
    multiplier: float = Field(1.0, allow_inf_nan=False)
    min: int = 0
    max: int = 0


class ConditionModel(BaseModel):
    """A single condition."""
    kind: str
    value: int = 0
    comparison: Optional[Comparison] = None
    card_id: Optional[str] = None


class EffectModel(BaseModel):
    """A single effect."""
    kind: str
    value: int = 0
    dynamic: Optional[DynamicValueModel] = None
    target: TargetKind = TargetKind.NONE
    max_targets: int = Field(0, ge=0, description="0 = every eligible candidate")
    create_grade: Optional[Union[int, str]] = None
    duration: int = Field(0, ge=0)
    success_chance: int = Field(0, ge=0, le=100)
    success_value: Union[int, DynamicValueModel] = 0
    fail_value: Union[int, DynamicValueModel] = 0
    card_id: Optional[str] = None
    card_rarity: Optional[str] = None
    job_pool: Optional[str] = None

    @field_validator("create_grade")
    @classmethod
    def _check_grade(cls, v):
        if v is not None:
            parse_grade(v)
        return v


class ConditionGroupModel(BaseModel):
    """Conditions (AND) with then/else effect lists."""
    conditions: list[ConditionModel] = Field(default_factory=list)
    effects: list[EffectModel] = Field(default_factory=list)
    else_effects: list[EffectModel] = Field(default_factory=list)


class CardModel(BaseModel):
    """A card definition."""
    id: str
    name: str
    card_type: CardType
    description: str = ""
    rarity: CardRarity = CardRarity.BASIC
    treasure_grade: Optional[Union[int, str]] = None
    pollution_type: Optional[PollutionType] = None
    job_pools: list[str] = Field(default_factory=list)
    effects: list[ConditionGroupModel] = Field(default_factory=list)

    @field_validator("treasure_grade")
    @classmethod
    def _check_grade(cls, v):
        if v is not None:
            parse_grade(v)
        return v


class EventChoiceModel(BaseModel):
    choice_id: str
    text: str = ""
    requirements: list[ConditionModel] = Field(default_factory=list)
    effects: list[ConditionGroupModel] = Field(default_factory=list)


class EventModel(BaseModel):
    """A random event."""
    id: str
    name: str
    description: str = ""
    event_type: str = "positive"
    trigger_conditions: list[ConditionModel] = Field(default_factory=list)
    effects: list[ConditionGroupModel] = Field(default_factory=list)
    choices: list[EventChoiceModel] = Field(default_factory=list)


class DefinitionsDocument(BaseModel):
    """Root of a definitions JSON file."""
    cards: list[CardModel] = Field(default_factory=list)
    events: list[EventModel] = Field(default_factory=list)


# =============================================================================
# Conversion
# =============================================================================

def _kind(enum_cls: type[Enum], raw: str, where: str):
    kind = parse_kind(enum_cls, raw)
    if isinstance(kind, str):
        logger.warning("Unknown %s %r in %s, keeping as-is", enum_cls.__name__, raw, where)
    return kind


def _dynamic(model: DynamicValueModel, where: str) -> DynamicValueSource:
    return DynamicValueSource(
        kind=_kind(ValueSourceKind, model.kind, where),
        base=model.base,
        multiplier=model.multiplier,
        min=model.min,
        max=model.max,
    )


def _amount(raw: Union[int, DynamicValueModel], where: str) -> Union[int, DynamicValueSource]:
    if isinstance(raw, DynamicValueModel):
        return _dynamic(raw, where)
    return raw


def _condition(model: ConditionModel, where: str) -> Condition:
    return Condition(
        kind=_kind(ConditionKind, model.kind, where),
        value=model.value,
        comparison=model.comparison,
        card_id=model.card_id,
    )


def _effect(model: EffectModel, where: str) -> EffectDefinition:
    return EffectDefinition(
        kind=_kind(EffectKind, model.kind, where),
        value=model.value,
        dynamic=_dynamic(model.dynamic, where) if model.dynamic else None,
        target=model.target,
        max_targets=model.max_targets,
        create_grade=parse_grade(model.create_grade).value if model.create_grade is not None else None,
        duration=model.duration,
        success_chance=model.success_chance,
        success_value=_amount(model.success_value, where),
        fail_value=_amount(model.fail_value, where),
        card_id=model.card_id,
        card_rarity=model.card_rarity,
        job_pool=model.job_pool,
    )


def _group(model: ConditionGroupModel, where: str) -> ConditionGroup:
    return ConditionGroup(
        conditions=tuple(_condition(c, where) for c in model.conditions),
        effects=tuple(_effect(e, where) for e in model.effects),
        else_effects=tuple(_effect(e, where) for e in model.else_effects),
    )


def card_from_model(model: CardModel) -> CardDefinition:
    where = f"card {model.id}"
    return CardDefinition(
        id=model.id,
        name=model.name,
        card_type=model.card_type,
        description=model.description,
        rarity=model.rarity,
        treasure_grade=parse_grade(model.treasure_grade) if model.treasure_grade is not None else None,
        pollution_type=model.pollution_type,
        job_pools=list(model.job_pools),
        effects=[_group(g, where) for g in model.effects],
    )


def event_from_model(model: EventModel) -> EventDefinition:
    where = f"event {model.id}"
    return EventDefinition(
        id=model.id,
        name=model.name,
        description=model.description,
        event_type=model.event_type,
        trigger_conditions=[_condition(c, where) for c in model.trigger_conditions],
        effects=[_group(g, where) for g in model.effects],
        choices=[
            EventChoice(
                choice_id=choice.choice_id,
                text=choice.text,
                requirements=[_condition(c, where) for c in choice.requirements],
                effects=[_group(g, where) for g in choice.effects],
            )
            for choice in model.choices
        ],
    )


def load_catalog_from_dict(data: dict[str, Any], catalog: Optional[CardCatalog] = None) -> CardCatalog:
    """
    Build (or extend) a catalog from a parsed JSON document.

    Raises pydantic.ValidationError for malformed documents.
    """
    document = DefinitionsDocument.model_validate(data)
    catalog = catalog if catalog is not None else CardCatalog()
    for card in document.cards:
        catalog.add_card(card_from_model(card))
    for event in document.events:
        catalog.add_event(event_from_model(event))
    logger.info("Loaded %d cards and %d events", len(document.cards), len(document.events))
    return catalog


def load_catalog(path: Union[str, Path], catalog: Optional[CardCatalog] = None) -> CardCatalog:
    """Load a definitions JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    return load_catalog_from_dict(data, catalog)
