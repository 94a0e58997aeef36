"""
Starter Cards - Card and event definitions for the sample game.

Card structure:
- Treasures: the seven-grade ladder, copper to diamond
- Pollution: one card per pollution type
- Actions: conditional effect groups
- Events: trigger conditions, effects, and optional choices
"""

from __future__ import annotations

from ...definitions.cards import (
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
from ...definitions.effect_dsl import (
    Condition,
    ConditionKind,
    DynamicValueSource,
    EffectDefinition,
    EffectKind,
    TargetKind,
    ValueSourceKind,
    always,
    chained_effect,
    draw_effect,
    gamble_effect,
    gold_effect,
    settle_effect,
    when,
)


TREASURE_NAMES: dict[TreasureGrade, str] = {
    TreasureGrade.COPPER: "Copper",
    TreasureGrade.SILVER: "Silver",
    TreasureGrade.GOLD: "Gold Coin",
    TreasureGrade.EMERALD: "Emerald",
    TreasureGrade.SAPPHIRE: "Sapphire",
    TreasureGrade.RUBY: "Ruby",
    TreasureGrade.DIAMOND: "Diamond",
}


def _treasures() -> list[CardDefinition]:
    return [
        CardDefinition(
            id=TREASURE_CARD_IDS[grade],
            name=TREASURE_NAMES[grade],
            card_type=CardType.TREASURE,
            treasure_grade=grade,
        )
        for grade in TreasureGrade
    ]


def _pollution() -> list[CardDefinition]:
    return [
        CardDefinition(
            id=pollution.value,
            name=pollution.value.title(),
            card_type=CardType.POLLUTION,
            pollution_type=pollution,
        )
        for pollution in PollutionType
    ]


# ============================================================================
# Action cards
# ============================================================================

SMELTING = CardDefinition(
    id="smelting",
    name="Smelting",
    card_type=CardType.ACTION,
    description="Settle any treasures in hand. Draw a card for each one settled.",
    job_pools=["pawn"],
    effects=[
        always(
            settle_effect(),
            chained_effect(EffectKind.DRAW_CARD, ValueSourceKind.PREVIOUS_COUNT),
        ),
    ],
)

APPRAISAL = CardDefinition(
    id="appraisal",
    name="Appraisal",
    card_type=CardType.ACTION,
    description="If you have 10 or more gold, +3 gold. Otherwise draw a card.",
    job_pools=["pawn"],
    effects=[
        when(
            Condition(kind=ConditionKind.GOLD_ABOVE, value=10),
            then=[gold_effect(3)],
            otherwise=[draw_effect(1)],
        ),
    ],
)

ALCHEMY = CardDefinition(
    id="alchemy",
    name="Alchemy",
    card_type=CardType.ACTION,
    description="Raise one treasure in hand by two grades this turn.",
    rarity=CardRarity.ADVANCED,
    job_pools=["bishop"],
    effects=[
        always(
            EffectDefinition(
                kind=EffectKind.BOOST_TREASURE,
                value=2,
                target=TargetKind.HAND_TREASURE,
                max_targets=1,
            ),
        ),
    ],
)

REFINE = CardDefinition(
    id="refine",
    name="Refine",
    card_type=CardType.ACTION,
    description="Permanently upgrade one treasure in hand.",
    rarity=CardRarity.ADVANCED,
    job_pools=["bishop"],
    effects=[
        always(
            EffectDefinition(
                kind=EffectKind.PERMANENT_UPGRADE,
                target=TargetKind.HAND_TREASURE,
                max_targets=1,
            ),
        ),
    ],
)

MINT = CardDefinition(
    id="mint",
    name="Mint",
    card_type=CardType.ACTION,
    description="Create a temporary silver in hand.",
    job_pools=["pawn"],
    effects=[
        always(
            EffectDefinition(
                kind=EffectKind.CREATE_TEMP_TREASURE,
                create_grade=TreasureGrade.SILVER.value,
            ),
        ),
    ],
)

GAMBLERS_DEN = CardDefinition(
    id="gamblers_den",
    name="Gambler's Den",
    card_type=CardType.ACTION,
    description="50%: +8 gold. Otherwise lose 2 gold.",
    job_pools=["knight"],
    effects=[always(gamble_effect(50, 8, -2))],
)

PROSPECTING = CardDefinition(
    id="prospecting",
    name="Prospecting",
    card_type=CardType.ACTION,
    description="Reveal the top 3 cards. Treasures go to hand, the rest are discarded.",
    job_pools=["knight"],
    effects=[always(EffectDefinition(kind=EffectKind.REVEAL_AND_GAIN, value=3))],
)

PURIFY = CardDefinition(
    id="purify",
    name="Purify",
    card_type=CardType.ACTION,
    description="Destroy up to two pollution cards in hand.",
    job_pools=["bishop"],
    effects=[
        always(
            EffectDefinition(
                kind=EffectKind.DESTROY_POLLUTION,
                target=TargetKind.HAND_POLLUTION,
                max_targets=2,
            ),
        ),
    ],
)

INVESTMENT = CardDefinition(
    id="investment",
    name="Investment",
    card_type=CardType.ACTION,
    description="Double all gold gained this turn.",
    rarity=CardRarity.RARE,
    job_pools=["queen"],
    effects=[
        always(
            EffectDefinition(
                kind=EffectKind.GOLD_MULTIPLIER,
                dynamic=DynamicValueSource(multiplier=2.0),
            ),
        ),
    ],
)

RALLY = CardDefinition(
    id="rally",
    name="Rally",
    card_type=CardType.ACTION,
    description="+2 actions. Draw until you have 5 cards.",
    job_pools=["rook"],
    effects=[
        always(
            EffectDefinition(kind=EffectKind.ADD_ACTION, value=2),
            EffectDefinition(kind=EffectKind.DRAW_UNTIL, value=5),
        ),
    ],
)

TITHE = CardDefinition(
    id="tithe",
    name="Tithe",
    card_type=CardType.ACTION,
    description="Gain 20% of your gold.",
    job_pools=["bishop"],
    effects=[
        always(
            EffectDefinition(
                kind=EffectKind.ADD_GOLD,
                dynamic=DynamicValueSource(kind=ValueSourceKind.CURRENT_GOLD_PERCENT, base=20),
            ),
        ),
    ],
)

MERCHANT_GUILD = CardDefinition(
    id="merchant_guild",
    name="Merchant Guild",
    card_type=CardType.ACTION,
    description="+2 gold at the start of each of the next 3 turns.",
    rarity=CardRarity.ADVANCED,
    job_pools=["pawn"],
    effects=[always(EffectDefinition(kind=EffectKind.PERSISTENT_GOLD, value=2, duration=3))],
)

WINDFALL = CardDefinition(
    id="windfall",
    name="Windfall",
    card_type=CardType.ACTION,
    description="Roll a die and gain that much gold.",
    job_pools=["knight"],
    effects=[
        always(
            EffectDefinition(
                kind=EffectKind.ADD_GOLD,
                dynamic=DynamicValueSource(kind=ValueSourceKind.RANDOM_DICE, base=6),
            ),
        ),
    ],
)

FORESIGHT = CardDefinition(
    id="foresight",
    name="Foresight",
    card_type=CardType.ACTION,
    description="If the top card of your deck is a treasure, draw it. Otherwise shuffle your deck.",
    job_pools=["rook"],
    effects=[
        when(
            Condition(kind=ConditionKind.DECK_TOP_IS_TREASURE),
            then=[draw_effect(1)],
            otherwise=[EffectDefinition(kind=EffectKind.SHUFFLE_DECK)],
        ),
    ],
)

ACTION_CARDS: list[CardDefinition] = [
    SMELTING,
    APPRAISAL,
    ALCHEMY,
    REFINE,
    MINT,
    GAMBLERS_DEN,
    PROSPECTING,
    PURIFY,
    INVESTMENT,
    RALLY,
    TITHE,
    MERCHANT_GUILD,
    WINDFALL,
    FORESIGHT,
]


# ============================================================================
# Events
# ============================================================================

EVENTS: list[EventDefinition] = [
    EventDefinition(
        id="wandering_knight",
        name="Wandering Knight",
        description="A knight offers to join your household.",
        effects=[always(EffectDefinition(kind=EffectKind.GAIN_UNIT, card_id="knight"))],
    ),
    EventDefinition(
        id="bandit_raid",
        name="Bandit Raid",
        description="Bandits take 30% of your gold.",
        event_type="negative",
        trigger_conditions=[Condition(kind=ConditionKind.GOLD_ABOVE, value=20)],
        effects=[always(EffectDefinition(kind=EffectKind.SPEND_GOLD_PERCENT, value=30))],
    ),
    EventDefinition(
        id="hidden_treasure",
        name="Hidden Treasure",
        description="Two silvers are added to your discard pile.",
        effects=[always(EffectDefinition(kind=EffectKind.ADD_CARD_TO_DECK, card_id="silver", value=2))],
    ),
    EventDefinition(
        id="purifying_wind",
        name="Purifying Wind",
        description="A pollution card is removed from your deck.",
        trigger_conditions=[Condition(kind=ConditionKind.HAS_POLLUTION_IN_DECK)],
        effects=[always(EffectDefinition(kind=EffectKind.REMOVE_CARD_FROM_DECK, value=1))],
    ),
    EventDefinition(
        id="artisan_blessing",
        name="Artisan's Blessing",
        description="A copper in your deck becomes silver.",
        trigger_conditions=[Condition(kind=ConditionKind.HAS_COPPER_IN_DECK)],
        effects=[always(EffectDefinition(kind=EffectKind.UPGRADE_CARD_IN_DECK, card_id="copper"))],
    ),
    EventDefinition(
        id="inspiration",
        name="Inspiration",
        description="One of your units may promote for free.",
        trigger_conditions=[Condition(kind=ConditionKind.HAS_PROMOTABLE_UNIT)],
        effects=[always(EffectDefinition(kind=EffectKind.FREE_PROMOTION))],
    ),
    EventDefinition(
        id="peddler",
        name="Travelling Peddler",
        description="Promotions cost 5 less this turn.",
        effects=[always(EffectDefinition(kind=EffectKind.PROMOTION_DISCOUNT, value=5))],
    ),
    EventDefinition(
        id="famine",
        name="Famine",
        description="Upkeep rises by 2 for three turns.",
        event_type="negative",
        effects=[always(EffectDefinition(kind=EffectKind.MAINTENANCE_MODIFIER, value=2))],
    ),
    EventDefinition(
        id="mysterious_altar",
        name="Mysterious Altar",
        description="Sacrifice a unit to empower another.",
        event_type="choice",
        trigger_conditions=[Condition(kind=ConditionKind.HAS_UNIT)],
        choices=[
            EventChoice(
                choice_id="sacrifice",
                text="Offer a unit at the altar",
                requirements=[Condition(kind=ConditionKind.HAS_MULTIPLE_UNITS)],
                effects=[
                    always(
                        EffectDefinition(kind=EffectKind.REMOVE_UNIT),
                        EffectDefinition(kind=EffectKind.ADD_PROMOTION_LEVEL, value=2),
                    ),
                ],
            ),
            EventChoice(choice_id="leave", text="Walk away"),
        ],
    ),
]


def create_starter_catalog() -> CardCatalog:
    """Build the catalog holding every starter card and event."""
    catalog = CardCatalog()
    for card in _treasures() + _pollution() + ACTION_CARDS:
        catalog.add_card(card)
    for event in EVENTS:
        catalog.add_event(event)
    return catalog
