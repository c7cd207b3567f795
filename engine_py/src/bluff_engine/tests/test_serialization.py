"""
State sanitization, redaction and event model tests.
"""

import orjson
import pytest

from bluff_engine.errors import NoPendingClaim
from bluff_engine.events import (
    ActionType, ErrorCode, create_error_event, create_state_changed_event, parse_action_request,
)
from bluff_engine.models import Action
from bluff_engine.serialization import dumps, public_history, redact_state, sanitize_state

from conftest import cards


def test_sanitize_hides_other_hands(three_players):
    data = sanitize_state(three_players.state, "bob")
    players = {p["id"]: p for p in data["players"]}
    assert "hand" not in players["alice"]
    assert players["alice"]["hand_count"] == 4
    assert sorted(c["id"] for c in players["bob"]["hand"]) == ["3H", "KD", "KS"]


def test_sanitize_hides_placed_cards(three_players):
    """Only the author sees what was placed; everyone sees the count."""
    three_players.submit_action("alice", Action.place("alice", cards("2C", "5H"), "A"))
    for_bob = sanitize_state(three_players.state, "bob")
    for_alice = sanitize_state(three_players.state, "alice")

    assert for_bob["pile_count"] == 2
    assert "pile" not in for_bob
    assert "cards" not in for_bob["last_action"]
    assert for_bob["last_action"]["card_count"] == 2
    assert [c["id"] for c in for_alice["last_action"]["cards"]] == ["2C", "5H"]


def test_challenge_reveals_cards(three_players):
    three_players.submit_action("alice", Action.place("alice", cards("2C"), "A"))
    three_players.submit_action("bob", Action.challenge("bob"))
    data = sanitize_state(three_players.state, "carol")
    last = data["last_action"]
    assert last["was_successful"] is True
    assert last["target_player_id"] == "alice"
    assert [c["id"] for c in last["revealed"]] == ["2C"]
    assert [a["type"] for a in public_history(three_players.state, "carol")] == ["place", "challenge"]


def test_redact_state_is_a_safe_copy(three_players):
    """Bots get a copy with only their own hand and no face-down cards."""
    three_players.submit_action("alice", Action.place("alice", cards("2C"), "A"))
    view = redact_state(three_players.state, "carol")

    assert view is not three_players.state
    hands = {p.id: p.hand for p in view.players}
    assert hands["alice"] == [] and hands["bob"] == []
    assert len(hands["carol"]) == 3
    assert view.get_player("alice").hand_count == 3
    assert view.pile == [] and view.undealt == []
    assert view.last_action.cards == []
    assert view.history[0].cards == []
    assert view.pending_claim is not None

    # The authoritative state is untouched
    assert len(three_players.state.pile) == 1
    assert three_players.state.last_action.cards


def test_dumps_produces_json(three_players):
    payload = dumps(sanitize_state(three_players.state, "alice"))
    assert isinstance(payload, bytes)
    assert orjson.loads(payload)["game_id"] == "test"


def test_parse_place_request():
    request = parse_action_request({"type": "place", "card_ids": ["AS", "JOKERb"], "declared_value": "A"})
    assert request.type == ActionType.PLACE
    action = request.to_action("alice")
    assert action.is_place
    assert action.player_id == "alice"
    assert [c.id for c in action.cards] == ["AS", "JOKERb"]
    assert action.cards[1].is_joker


def test_parse_challenge_and_pass():
    challenge = parse_action_request({"type": "challenge", "target_seq": 4}).to_action("bob")
    assert challenge.is_challenge and challenge.target_seq == 4
    assert parse_action_request({"type": "pass"}).to_action("bob").is_pass


@pytest.mark.parametrize("data", [
    {},
    {"type": "shout"},
    {"type": "place", "card_ids": [], "declared_value": "A"},
    {"type": "place", "card_ids": ["AS"], "declared_value": "Z"},
    {"type": "place", "card_ids": ["AS"]},
])
def test_malformed_requests_rejected(data):
    with pytest.raises(ValueError):
        parse_action_request(data)


def test_bad_card_id_rejected():
    request = parse_action_request({"type": "place", "card_ids": ["1Z"], "declared_value": "A"})
    with pytest.raises(ValueError):
        request.to_action("alice")


def test_outbound_events(three_players):
    event = create_state_changed_event(sanitize_state(three_players.state, "alice"))
    assert event.version == three_players.state.version
    assert event.model_dump(mode="json")["type"] == "state_changed"

    error = create_error_event(NoPendingClaim())
    assert error.code == ErrorCode.NO_PENDING_CLAIM
    assert error.message == "No pending claim to challenge"
