"""
Tests for loading and validating card definitions.

Tests:
- JSON document parsing into engine definitions
- Unknown kinds kept for permissive evaluation
- Structural errors from pydantic
- Catalog consistency checks
"""

import json

import pytest
from pydantic import ValidationError

from ..definitions import (
    CardCatalog,
    CardDefinition,
    CardType,
    Comparison,
    ConditionKind,
    DefinitionValidationError,
    DynamicValueSource,
    EffectDefinition,
    EffectKind,
    EventChoice,
    EventDefinition,
    TargetKind,
    TreasureGrade,
    ValueSourceKind,
    always,
    load_catalog,
    load_catalog_from_dict,
    validate_catalog,
)
from ..definitions.loader import parse_grade


CARD_DOCUMENT = {
    "cards": [
        {"id": "copper", "name": "Copper", "card_type": "treasure", "treasure_grade": 1},
        {"id": "silver", "name": "Silver", "card_type": "treasure", "treasure_grade": "silver"},
        {
            "id": "assay",
            "name": "Assay",
            "card_type": "action",
            "effects": [
                {
                    "conditions": [{"kind": "gold_above", "value": 5, "comparison": ">"}],
                    "effects": [{"kind": "add_gold", "value": 2}],
                    "else_effects": [
                        {"kind": "draw_card", "dynamic": {"kind": "hand_count", "multiplier": 0.5}},
                    ],
                },
                {
                    "effects": [
                        {"kind": "settle_card", "target": "hand_treasure", "max_targets": 2},
                        {"kind": "gamble", "success_chance": 30,
                         "success_value": {"kind": "previous_value", "multiplier": 2.0}, "fail_value": -1},
                    ],
                },
            ],
        },
    ],
    "events": [
        {
            "id": "crossroads",
            "name": "Crossroads",
            "trigger_conditions": [{"kind": "has_unit"}],
            "choices": [
                {"choice_id": "left", "effects": [{"effects": [{"kind": "add_gold", "value": 1}]}]},
                {"choice_id": "right", "requirements": [{"kind": "gold_above", "value": 3}]},
            ],
        },
    ],
}


class TestLoader:
    """Tests for the JSON loader."""

    def test_loads_cards(self):
        catalog = load_catalog_from_dict(CARD_DOCUMENT)
        assert catalog.get_card("silver").treasure_grade == TreasureGrade.SILVER
        assert catalog.get_card("copper").gold_value == 1

        assay = catalog.get_card("assay")
        assert assay.card_type == CardType.ACTION
        first, second = assay.effects
        condition = first.conditions[0]
        assert condition.kind == ConditionKind.GOLD_ABOVE
        assert condition.comparison == Comparison.GREATER_THAN
        assert first.else_effects[0].dynamic.kind == ValueSourceKind.HAND_COUNT

        settle, gamble = second.effects
        assert settle.target == TargetKind.HAND_TREASURE
        assert settle.max_targets == 2
        assert isinstance(gamble.success_value, DynamicValueSource)
        assert gamble.fail_value == -1

    def test_loads_events(self):
        catalog = load_catalog_from_dict(CARD_DOCUMENT)
        event = catalog.get_event("crossroads")
        assert event.has_choices
        assert event.get_choice("right").requirements[0].value == 3
        assert event.get_choice("missing") is None

    def test_extends_existing_catalog(self, catalog):
        count = len(catalog.cards)
        load_catalog_from_dict({"cards": [CARD_DOCUMENT["cards"][2]]}, catalog)
        assert len(catalog.cards) == count + 1

    def test_unknown_kinds_are_kept(self):
        catalog = load_catalog_from_dict({
            "cards": [{
                "id": "odd",
                "name": "Odd",
                "card_type": "action",
                "effects": [{
                    "conditions": [{"kind": "moon_is_full"}],
                    "effects": [{"kind": "summon_dragon", "dynamic": {"kind": "dragon_count"}}],
                }],
            }],
        })
        group = catalog.get_card("odd").effects[0]
        assert group.conditions[0].kind == "moon_is_full"
        assert group.effects[0].kind == "summon_dragon"
        assert group.effects[0].dynamic.kind == "dragon_count"

    def test_unknown_target_is_rejected(self):
        with pytest.raises(ValidationError):
            load_catalog_from_dict({
                "cards": [{
                    "id": "bad", "name": "Bad", "card_type": "action",
                    "effects": [{"effects": [{"kind": "draw_card", "target": "opponent"}]}],
                }],
            })

    def test_missing_field_is_rejected(self):
        with pytest.raises(ValidationError):
            load_catalog_from_dict({"cards": [{"id": "nameless", "card_type": "action"}]})

    def test_gamble_chance_range(self):
        with pytest.raises(ValidationError):
            load_catalog_from_dict({
                "cards": [{
                    "id": "bad", "name": "Bad", "card_type": "action",
                    "effects": [{"effects": [{"kind": "gamble", "success_chance": 150}]}],
                }],
            })

    @pytest.mark.parametrize("multiplier", ["inf", "-inf", "nan", float("inf")])
    def test_non_finite_multiplier_is_rejected(self, multiplier):
        with pytest.raises(ValidationError):
            load_catalog_from_dict({
                "cards": [{
                    "id": "bad", "name": "Bad", "card_type": "action",
                    "effects": [{"effects": [{
                        "kind": "add_gold",
                        "dynamic": {"kind": "current_gold", "multiplier": multiplier},
                    }]}],
                }],
            })

    def test_non_finite_gamble_multiplier_is_rejected(self):
        with pytest.raises(ValidationError):
            load_catalog_from_dict({
                "cards": [{
                    "id": "bad", "name": "Bad", "card_type": "action",
                    "effects": [{"effects": [{
                        "kind": "gamble", "success_chance": 50,
                        "success_value": {"kind": "current_gold", "multiplier": "nan"},
                    }]}],
                }],
            })

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "cards.json"
        path.write_text(json.dumps(CARD_DOCUMENT), encoding="utf-8")
        catalog = load_catalog(path)
        assert catalog.has_card("assay")

    @pytest.mark.parametrize("raw, expected", [
        (3, TreasureGrade.GOLD),
        ("emerald", TreasureGrade.EMERALD),
        ("gold_coin", TreasureGrade.GOLD),
        ("Diamond", TreasureGrade.DIAMOND),
    ])
    def test_parse_grade(self, raw, expected):
        assert parse_grade(raw) == expected

    def test_parse_grade_rejects_unknown(self):
        with pytest.raises(ValueError):
            parse_grade("platinum")


class TestValidation:
    """Tests for catalog validation."""

    def test_starter_catalog_is_valid(self, catalog):
        result = validate_catalog(catalog)
        assert result.valid, result.errors

    def test_treasure_without_grade(self):
        catalog = CardCatalog()
        catalog.add_card(CardDefinition(id="lump", name="Lump", card_type=CardType.TREASURE))
        result = validate_catalog(catalog)
        assert not result.valid
        assert any("treasure_grade" in e for e in result.errors)

    def test_unknown_card_reference(self, catalog):
        catalog.add_card(CardDefinition(
            id="summoner",
            name="Summoner",
            card_type=CardType.ACTION,
            effects=[always(EffectDefinition(kind=EffectKind.ADD_CARD_TO_DECK, card_id="dragon"))],
        ))
        result = validate_catalog(catalog)
        assert any("dragon" in e for e in result.errors)

    def test_multiplier_needs_source(self, catalog):
        catalog.add_card(CardDefinition(
            id="broken_bank",
            name="Broken Bank",
            card_type=CardType.ACTION,
            effects=[always(EffectDefinition(kind=EffectKind.GOLD_MULTIPLIER, value=2))],
        ))
        assert not validate_catalog(catalog).valid

    def test_unknown_kinds_are_warnings(self, catalog):
        catalog.add_card(CardDefinition(
            id="odd",
            name="Odd",
            card_type=CardType.ACTION,
            effects=[always(EffectDefinition(kind="summon_dragon"))],
        ))
        result = validate_catalog(catalog)
        assert result.valid
        assert any("summon_dragon" in w for w in result.warnings)

    def test_dice_without_faces(self, catalog):
        catalog.add_card(CardDefinition(
            id="blank_die",
            name="Blank Die",
            card_type=CardType.ACTION,
            effects=[always(EffectDefinition(
                kind=EffectKind.ADD_GOLD,
                dynamic=DynamicValueSource(kind=ValueSourceKind.RANDOM_DICE, base=0),
            ))],
        ))
        assert not validate_catalog(catalog).valid

    def test_raise_on_error(self):
        catalog = CardCatalog()
        catalog.add_card(CardDefinition(id="lump", name="Lump", card_type=CardType.TREASURE))
        with pytest.raises(DefinitionValidationError) as exc_info:
            validate_catalog(catalog, raise_on_error=True)
        assert exc_info.value.errors

    def test_choice_event_effects_are_warned(self, catalog):
        catalog.add_event(EventDefinition(
            id="crossroads",
            name="Crossroads",
            effects=[always(EffectDefinition(kind=EffectKind.ADD_GOLD, value=5))],
            choices=[EventChoice(choice_id="left", text="Go left")],
        ))
        result = validate_catalog(catalog)
        assert result.valid
        assert any("ignored on a choice event" in w for w in result.warnings)
