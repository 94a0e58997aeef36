"""
Tests for session management.

Tests:
- Session creation and lifecycle
- Card play rules
- Event triggering and choices
- Target selection through a session
"""

import time

import pytest

from ..config import EngineConfig
from ..definitions import EventChoice, EventDefinition, always, gold_effect
from ..engine_core.errors import ActivationInProgressError
from ..session import (
    CardNotPlayableError,
    EventNotAvailableError,
    SessionManager,
    SessionState,
)


@pytest.fixture
def manager(catalog):
    return SessionManager(config=EngineConfig(), catalog=catalog)


def card_in_hand(session, card_id):
    return next(c for c in session.game_state.hand if c.card_id == card_id)


class TestSessionManager:
    """Tests for SessionManager."""

    def test_create_session(self, manager):
        session = manager.create_session(random_seed=11)
        state = session.game_state

        assert session.is_active()
        assert len(state.hand) == 5
        assert len(state.deck) == 5
        assert len(state.units) == 2
        assert state.houses[0].adult_a == state.units[0].unit_id
        assert session.session_id in manager.list_active_sessions()

    def test_seed_is_reproducible(self, manager):
        first = manager.create_session(random_seed=5)
        second = manager.create_session(random_seed=5)
        assert [c.card_id for c in first.game_state.hand] == [c.card_id for c in second.game_state.hand]

    def test_get_and_end_session(self, manager):
        session = manager.create_session(random_seed=1)
        assert manager.get_session(session.session_id) is session

        assert manager.end_session(session.session_id)
        assert session.state == SessionState.ENDED
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_cleanup_stale_sessions(self, manager):
        old = manager.create_session(random_seed=1)
        fresh = manager.create_session(random_seed=2)
        old.created_at = time.time() - 7200

        assert manager.cleanup_stale_sessions(max_age_seconds=3600) == 1
        assert manager.list_active_sessions() == [fresh.session_id]


class TestPlayCard:
    """Tests for the card play lifecycle."""

    def test_play_action_card(self, manager, make_state):
        """Playing moves the card to the play area, spends an action and runs effects."""
        session = manager.create_session(
            game_state=make_state(hand=["appraisal", "copper"], deck=["silver"]))
        card = card_in_hand(session, "appraisal")

        outcome = session.play_card(card.instance_id)

        state = session.game_state
        assert outcome.completed
        assert outcome.source_card is card
        assert state.play_area == [card]
        assert state.actions_remaining == 0
        assert [c.card_id for c in state.hand] == ["copper", "silver"]

    def test_treasure_is_not_playable(self, manager, make_state):
        session = manager.create_session(game_state=make_state(hand=["copper"]))
        with pytest.raises(CardNotPlayableError):
            session.play_card(session.game_state.hand[0].instance_id)

    def test_pollution_is_not_playable(self, manager, make_state):
        session = manager.create_session(game_state=make_state(hand=["curse"]))
        with pytest.raises(CardNotPlayableError):
            session.play_card(session.game_state.hand[0].instance_id)

    def test_no_actions_left(self, manager, make_state):
        session = manager.create_session(game_state=make_state(hand=["mint"], actions=0))
        card = session.game_state.hand[0]
        with pytest.raises(CardNotPlayableError):
            session.play_card(card.instance_id)
        assert card in session.game_state.hand

    def test_card_not_in_hand(self, manager, make_state):
        session = manager.create_session(game_state=make_state(deck=["mint"]))
        with pytest.raises(CardNotPlayableError):
            session.play_card(session.game_state.deck[0].instance_id)

    def test_rally_grants_actions(self, manager, make_state):
        session = manager.create_session(
            game_state=make_state(hand=["rally", "mint"], deck=["copper"] * 6))
        session.play_card(card_in_hand(session, "rally").instance_id)

        state = session.game_state
        assert state.actions_remaining == 2
        assert len(state.hand) == 5

        session.play_card(card_in_hand(session, "mint").instance_id)
        assert state.actions_remaining == 1
        assert any(c.card_id == "silver" and c.is_temporary for c in state.hand)

    def test_smelting_settles_and_draws(self, manager, make_state):
        session = manager.create_session(
            game_state=make_state(hand=["smelting", "copper", "silver", "curse"], deck=["gold_coin"] * 3))
        outcome = session.play_card(card_in_hand(session, "smelting").instance_id)
        assert outcome.awaiting_target
        assert session.state == SessionState.AWAITING_TARGET

        outcome = session.select_targets(outcome.target_request.candidate_ids)
        state = session.game_state
        assert outcome.completed
        assert session.state == SessionState.ACTIVE
        assert state.gold == 3
        assert [c.card_id for c in state.hand] == ["curse", "gold_coin", "gold_coin"]


class TestTargetSelection:
    """Tests for selections through a session."""

    def test_play_blocked_while_waiting(self, manager, make_state):
        session = manager.create_session(
            game_state=make_state(hand=["refine", "copper", "mint"], actions=2))
        session.play_card(card_in_hand(session, "refine").instance_id)

        with pytest.raises(ActivationInProgressError):
            session.play_card(card_in_hand(session, "mint").instance_id)

    def test_refine_upgrades_selected_treasure(self, manager, make_state):
        session = manager.create_session(game_state=make_state(hand=["refine", "copper"]))
        session.play_card(card_in_hand(session, "refine").instance_id)
        session.select_targets([card_in_hand(session, "copper").instance_id])
        assert [c.card_id for c in session.game_state.hand] == ["silver"]

    def test_cancel_selection(self, manager, make_state):
        session = manager.create_session(game_state=make_state(hand=["alchemy", "copper"]))
        session.play_card(card_in_hand(session, "alchemy").instance_id)

        outcome = session.cancel_selection()
        assert outcome.completed
        assert not outcome.results[0].success
        assert session.state == SessionState.ACTIVE
        assert session.game_state.hand[0].boosted_grade is None

    def test_observer_records_activity(self, manager, make_state):
        session = manager.create_session(game_state=make_state(hand=["mint"]))
        session.play_card(session.game_state.hand[0].instance_id)
        assert [e[0] for e in session.observer.events] == ["started", "executed", "completed"]

    def test_to_dict_shows_pending_request(self, manager, make_state):
        session = manager.create_session(game_state=make_state(hand=["purify", "curse", "debt"]))
        session.play_card(card_in_hand(session, "purify").instance_id)

        data = session.to_dict()
        assert data["state"] == "awaiting_target"
        assert data["pending_request"]["max_selections"] == 2
        assert len(data["pending_request"]["candidates"]) == 2
        assert data["pending_effects"][0]["kind"] == "destroy_pollution"


class TestEvents:
    """Tests for event triggering."""

    def test_event_without_conditions(self, manager, make_state):
        session = manager.create_session(game_state=make_state())
        outcome = session.trigger_event("hidden_treasure")
        assert outcome.completed
        assert outcome.source_card is None
        assert [c.card_id for c in session.game_state.discard_pile] == ["silver", "silver"]

    def test_unmet_trigger_condition(self, manager, make_state):
        session = manager.create_session(game_state=make_state(gold=10))
        with pytest.raises(EventNotAvailableError):
            session.trigger_event("bandit_raid")

    def test_bandit_raid(self, manager, make_state):
        session = manager.create_session(game_state=make_state(gold=30))
        session.trigger_event("bandit_raid")
        assert session.game_state.gold == 21

    def test_unknown_event(self, manager, make_state):
        session = manager.create_session(game_state=make_state())
        with pytest.raises(EventNotAvailableError):
            session.trigger_event("meteor")

    def test_wandering_knight_joins(self, manager, make_state):
        session = manager.create_session(game_state=make_state())
        session.trigger_event("wandering_knight")
        unit = session.game_state.units[0]
        assert unit.job.value == "knight"
        assert unit.house_id == "house_1"

    def test_choice_required(self, manager, make_state):
        session = manager.create_session(game_state=make_state(units=2))
        with pytest.raises(EventNotAvailableError):
            session.trigger_event("mysterious_altar")

    def test_choice_requirements(self, manager, make_state):
        session = manager.create_session(game_state=make_state(units=1))
        choices = {c.choice_id: c.can_select for c in session.event_choices("mysterious_altar")}
        assert choices == {"sacrifice": False, "leave": True}

        with pytest.raises(EventNotAvailableError):
            session.trigger_event("mysterious_altar", "sacrifice")

    def test_sacrifice_choice(self, manager, make_state):
        session = manager.create_session(game_state=make_state(units=2))
        outcome = session.trigger_event("mysterious_altar", "sacrifice")

        units = session.game_state.units
        assert outcome.completed
        assert len(units) == 1
        assert units[0].promotion_level == 2

    def test_leave_choice_does_nothing(self, manager, make_state):
        session = manager.create_session(game_state=make_state(units=1))
        outcome = session.trigger_event("mysterious_altar", "leave")
        assert outcome.completed
        assert outcome.results == []

    def test_choice_replaces_event_effects(self, manager, catalog, make_state):
        """A choice event runs the chosen option and skips the base effects."""
        catalog.add_event(EventDefinition(
            id="crossroads",
            name="Crossroads",
            effects=[always(gold_effect(100))],
            choices=[EventChoice(choice_id="left", text="Go left", effects=[always(gold_effect(1))])],
        ))
        session = manager.create_session(game_state=make_state(gold=0))

        outcome = session.trigger_event("crossroads", "left")
        assert [r.value for r in outcome.results] == [1]
        assert session.game_state.gold == 1
