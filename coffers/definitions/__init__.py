"""Card and effect definitions - data only, no behavior."""

from .effect_dsl import (
    EffectKind,
    TargetKind,
    ConditionKind,
    Comparison,
    ValueSourceKind,
    DynamicValueSource,
    Condition,
    EffectDefinition,
    ConditionGroup,
    always,
    when,
    draw_effect,
    gold_effect,
    chained_effect,
    settle_effect,
    gamble_effect,
)
from .cards import (
    CardType,
    TreasureGrade,
    CardRarity,
    PollutionType,
    CardDefinition,
    EventChoice,
    EventDefinition,
    CardCatalog,
)
from .loader import load_catalog, load_catalog_from_dict, DefinitionsDocument
from .validation import validate_catalog, DefinitionValidationError, ValidationResult

__all__ = [
    "EffectKind",
    "TargetKind",
    "ConditionKind",
    "Comparison",
    "ValueSourceKind",
    "DynamicValueSource",
    "Condition",
    "EffectDefinition",
    "ConditionGroup",
    "always",
    "when",
    "draw_effect",
    "gold_effect",
    "chained_effect",
    "settle_effect",
    "gamble_effect",
    "CardType",
    "TreasureGrade",
    "CardRarity",
    "PollutionType",
    "CardDefinition",
    "EventChoice",
    "EventDefinition",
    "CardCatalog",
    "load_catalog",
    "load_catalog_from_dict",
    "DefinitionsDocument",
    "validate_catalog",
    "DefinitionValidationError",
    "ValidationResult",
]
