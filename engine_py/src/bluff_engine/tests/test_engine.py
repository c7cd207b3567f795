"""
Game engine tests: placement, challenges, passes, turns and errors.
"""

import pytest

from bluff_engine.constants import STAGE_FINISHED, STAGE_PLAYING, STAGE_WAITING
from bluff_engine.engine import BluffEngine
from bluff_engine.errors import (
    GAME_NOT_READY, ILLEGAL_CARDS, INVALID_EVENT, INVALID_TURN, NO_PENDING_CLAIM, UNKNOWN_PLAYER,
    GameNotReady, InvalidTurn,
)
from bluff_engine.models import Action
from bluff_engine.rules import create_rules

from conftest import cards, rigged_engine


def hand_ids(engine, player_id):
    return sorted(card.id for card in engine.state.get_player(player_id).hand)


def test_create_and_start_game():
    """Dealing leaves every player with an equal hand and the first seat to act."""
    engine = BluffEngine()
    state = engine.create_game("room")
    assert state.stage == STAGE_WAITING
    for name in ["Alice", "Bob", "Carol", "Dave"]:
        engine.add_player(name, player_id=name.lower())

    state = engine.start_game(seed=3)
    assert state.stage == STAGE_PLAYING
    assert state.current_player_id == "alice"
    assert state.initial_hand_size == 13
    assert all(p.hand_count == 13 for p in state.players)
    assert len(state.undealt) == 2
    assert state.total_cards() == state.deck_size == 54


def test_start_game_needs_enough_players():
    """A single player can't start."""
    engine = BluffEngine()
    engine.create_game()
    engine.add_player("Alice")
    with pytest.raises(GameNotReady):
        engine.start_game()


def test_cannot_join_after_start(three_players):
    """Seats are fixed once the game is under way."""
    with pytest.raises(GameNotReady) as exc:
        three_players.add_player("Late")
    assert exc.value.code == GAME_NOT_READY


def test_place_moves_cards_to_pile(three_players):
    """Placed cards leave the hand face down and the turn moves on."""
    result = three_players.submit_action("alice", Action.place("alice", cards("AD", "AS"), "A"))
    assert result.success
    state = result.state
    assert hand_ids(three_players, "alice") == ["2C", "5H"]
    assert [c.id for c in state.pile] == ["AD", "AS"]
    assert state.current_player_id == "bob"
    assert state.current_claim == "A"
    assert state.pending_claim is result.action
    assert result.action.seq == 1
    assert state.history == [result.action]


def test_challenge_catches_mismatched_card(three_players):
    """[AD, AS, 2C] declared as A is a bluff: the placer takes all three back."""
    placed = three_players.submit_action("alice", Action.place("alice", cards("AD", "AS", "2C"), "A"))
    result = three_players.submit_action("bob", Action.challenge("bob", target_seq=placed.action.seq))

    assert result.success
    assert result.action.was_successful is True
    assert result.action.target_player_id == "alice"
    assert [c.id for c in result.action.revealed] == ["AD", "AS", "2C"]
    assert hand_ids(three_players, "alice") == ["2C", "5H", "AD", "AS"]
    assert result.state.pile == []
    assert result.state.current_player_id == "alice"
    assert result.state.current_claim is None


def test_challenge_against_truth_fails():
    """[KD, KS] declared as K is honest: the challenger takes the pile."""
    engine = rigged_engine({
        "Alice": ["KD", "KS", "3H"],
        "Bob": ["4C", "5C"],
    })
    engine.submit_action("alice", Action.place("alice", cards("KD", "KS"), "K"))
    result = engine.submit_action("bob", Action.challenge("bob"))

    assert result.success
    assert result.action.was_successful is False
    assert hand_ids(engine, "bob") == ["4C", "5C", "KD", "KS"]
    assert result.state.current_player_id == "bob"


@pytest.mark.parametrize("declared", ["Q", "7", "A"])
def test_joker_matches_any_declared_value(declared):
    """A joker never makes a placement a bluff."""
    engine = rigged_engine({
        "Alice": ["JOKERa", f"{declared}H", "3C"],
        "Bob": ["4C", "5C"],
    })
    engine.submit_action("alice", Action.place("alice", cards("JOKERa", f"{declared}H"), declared))
    result = engine.submit_action("bob", Action.challenge("bob"))
    assert result.action.was_successful is False


def test_declaring_joker_with_ranked_cards_is_a_bluff():
    """Only jokers back a JOKER declaration."""
    engine = rigged_engine({"Alice": ["3H", "4H"], "Bob": ["5C", "6C"]})
    engine.submit_action("alice", Action.place("alice", cards("3H"), "JOKER"))
    result = engine.submit_action("bob", Action.challenge("bob"))
    assert result.action.was_successful is True


def test_round_reset_after_three_passes(three_players):
    """With three active players, three passes after a placement retire the pile."""
    three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    three_players.submit_action("bob", Action.pass_turn("bob"))
    three_players.submit_action("carol", Action.pass_turn("carol"))
    assert len(three_players.state.pile) == 1

    result = three_players.submit_action("alice", Action.pass_turn("alice"))
    state = result.state
    assert state.pile == []
    assert [c.id for c in state.discard] == ["5H"]
    assert state.last_action is None
    assert state.current_claim is None
    assert state.consecutive_passes == 0
    assert state.current_player_id == "bob"


def test_round_reset_needs_four_passes_with_four_players():
    """A fourth active player means a fourth pass is required."""
    engine = rigged_engine({
        "Alice": ["2H", "3H"],
        "Bob": ["4H", "5H"],
        "Carol": ["6H", "7H"],
        "Dave": ["8H", "9H"],
    })
    engine.submit_action("alice", Action.place("alice", cards("2H"), "2"))
    for player_id in ["bob", "carol", "dave"]:
        engine.submit_action(player_id, Action.pass_turn(player_id))
    assert len(engine.state.pile) == 1
    assert engine.state.last_action.is_pass

    engine.submit_action("alice", Action.pass_turn("alice"))
    assert engine.state.pile == []
    assert engine.state.last_action is None


def test_placement_resets_pass_count(three_players):
    """Passes must be consecutive to clear the pile."""
    three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    three_players.submit_action("bob", Action.pass_turn("bob"))
    three_players.submit_action("carol", Action.place("carol", cards("7C"), "5"))
    three_players.submit_action("alice", Action.pass_turn("alice"))
    three_players.submit_action("bob", Action.pass_turn("bob"))
    assert len(three_players.state.pile) == 2
    assert three_players.state.consecutive_passes == 2


def test_win_on_empty_hand():
    """Placing the last card ends the game at once."""
    engine = rigged_engine({"Alice": ["2H"], "Bob": ["4H", "5H"]})
    result = engine.submit_action("alice", Action.place("alice", cards("2H"), "2"))

    assert result.state.stage == STAGE_FINISHED
    assert result.state.winner == "alice"
    assert result.state.current_player_id is None
    assert not result.state.challenge_window_open

    late = engine.submit_action("bob", Action.challenge("bob"))
    assert not late.success
    assert late.error_code == INVALID_TURN


def test_rejections_leave_state_untouched(three_players):
    """Every error kind is reported without touching the state."""
    before = three_players.state.version
    cases = [
        ("bob", Action.place("bob", cards("KD"), "K"), INVALID_TURN),
        ("alice", Action.place("alice", cards("KD"), "K"), ILLEGAL_CARDS),
        ("alice", Action.place("alice", [], "K"), ILLEGAL_CARDS),
        ("alice", Action.place("alice", cards("AD", "AD"), "A"), ILLEGAL_CARDS),
        ("alice", Action.place("alice", cards("AD"), "Z"), ILLEGAL_CARDS),
        ("bob", Action.challenge("bob"), NO_PENDING_CLAIM),
        ("bob", Action.pass_turn("bob"), INVALID_TURN),
        ("zed", Action.pass_turn("zed"), UNKNOWN_PLAYER),
        ("alice", Action("shuffle", "alice"), INVALID_EVENT),
    ]
    for player_id, action, code in cases:
        result = three_players.submit_action(player_id, action)
        assert not result.success
        assert result.error_code == code
    assert three_players.state.version == before
    assert hand_ids(three_players, "alice") == ["2C", "5H", "AD", "AS"]
    assert three_players.state.history == []


def test_rejection_is_idempotent(three_players):
    """Submitting the same illegal action twice gives the same answer both times."""
    action = Action.place("bob", cards("KD"), "K")
    first = three_players.submit_action("bob", action)
    snapshot = (three_players.state.version, hand_ids(three_players, "bob"))
    second = three_players.submit_action("bob", action)
    assert first.error_code == second.error_code == INVALID_TURN
    assert (three_players.state.version, hand_ids(three_players, "bob")) == snapshot


def test_raise_for_error(three_players):
    """Rejections can be turned back into exceptions."""
    result = three_players.submit_action("bob", Action.pass_turn("bob"))
    with pytest.raises(InvalidTurn):
        result.raise_for_error()


def test_cannot_challenge_own_placement(three_players):
    three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    result = three_players.submit_action("alice", Action.challenge("alice"))
    assert result.error_code == NO_PENDING_CLAIM


def test_first_challenge_wins(three_players):
    """Once a placement is resolved, a second challenge to it is rejected."""
    placed = three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    seq = placed.action.seq
    first = three_players.submit_action("carol", Action.challenge("carol", target_seq=seq))
    second = three_players.submit_action("bob", Action.challenge("bob", target_seq=seq))
    assert first.success
    assert second.error_code == NO_PENDING_CLAIM
    assert len(three_players.state.history) == 2


def test_stale_target_is_rejected(three_players):
    """A challenge aimed at an older placement does not hit the newer one."""
    first = three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    three_players.submit_action("bob", Action.place("bob", cards("3H"), "5"))
    result = three_players.submit_action("carol", Action.challenge("carol", target_seq=first.action.seq))
    assert result.error_code == NO_PENDING_CLAIM
    assert len(three_players.state.pile) == 2


def test_pass_closes_challenge_window(three_players):
    """The next actor passing ends the chance to challenge."""
    three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    three_players.submit_action("bob", Action.pass_turn("bob"))
    result = three_players.submit_action("carol", Action.challenge("carol"))
    assert result.error_code == NO_PENDING_CLAIM


def test_challenge_window_closes_on_timer(scheduler):
    """After the window elapses the placement can no longer be challenged."""
    engine = rigged_engine(
        {"Alice": ["2H", "3H"], "Bob": ["4H", "5H"]},
        rules=create_rules(challenge_window=5),
        scheduler=scheduler,
    )
    engine.submit_action("alice", Action.place("alice", cards("2H"), "2"))
    version = engine.state.version

    scheduler.advance(4.9)
    assert engine.state.challenge_window_open

    scheduler.advance(0.2)
    assert not engine.state.challenge_window_open
    assert engine.state.version == version + 1
    assert engine.state.current_player_id == "bob"
    assert engine.submit_action("bob", Action.challenge("bob")).error_code == NO_PENDING_CLAIM


def test_window_timer_cancelled_by_next_action(scheduler):
    """A resolved placement's timer does nothing when it falls due."""
    engine = rigged_engine(
        {"Alice": ["2H", "3H"], "Bob": ["4H", "5H"]},
        rules=create_rules(challenge_window=5),
        scheduler=scheduler,
    )
    engine.submit_action("alice", Action.place("alice", cards("2H"), "2"))
    engine.submit_action("bob", Action.challenge("bob"))
    version = engine.state.version
    assert scheduler.advance(10) == 0
    assert engine.state.version == version


def test_inactive_players_are_skipped(three_players):
    """Turn order passes over players who can't act."""
    three_players.set_player_status("bob", is_active=False)
    result = three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    assert result.state.current_player_id == "carol"

    three_players.set_player_status("carol", is_disconnected=True)
    assert three_players.state.current_player_id == "alice"

    three_players.set_player_status("bob", is_active=True)
    three_players.submit_action("alice", Action.pass_turn("alice"))
    assert three_players.state.current_player_id == "bob"


def test_inactive_players_do_not_count_for_round_reset(three_players):
    """Two active players clear the pile with two passes."""
    three_players.set_player_status("carol", is_blacklisted=True)
    three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    three_players.submit_action("bob", Action.pass_turn("bob"))
    three_players.submit_action("alice", Action.pass_turn("alice"))
    assert three_players.state.pile == []


def test_inactive_player_cannot_challenge(three_players):
    three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    three_players.set_player_status("carol", is_active=False)
    assert three_players.submit_action("carol", Action.challenge("carol")).error_code == INVALID_TURN


def test_listeners_see_every_change(three_players):
    """Subscribers are called after each applied action."""
    versions = []
    three_players.subscribe(lambda state: versions.append(state.version))
    three_players.submit_action("alice", Action.place("alice", cards("5H"), "5"))
    three_players.submit_action("bob", Action.challenge("bob"))
    three_players.submit_action("carol", Action.pass_turn("carol"))
    assert len(versions) == 2
    assert versions == sorted(versions)


def test_cards_are_conserved(three_players):
    """Hands, pile and discard always add up to the cards dealt."""
    total = three_players.state.total_cards()
    script = [
        ("alice", Action.place("alice", cards("AD", "2C"), "A")),
        ("bob", Action.challenge("bob")),
        ("alice", Action.place("alice", cards("5H"), "5")),
        ("bob", Action.pass_turn("bob")),
        ("carol", Action.pass_turn("carol")),
        ("alice", Action.pass_turn("alice")),
        ("bob", Action.place("bob", cards("KD", "KS"), "K")),
        ("carol", Action.challenge("carol")),
    ]
    for player_id, action in script:
        result = three_players.submit_action(player_id, action)
        assert result.success, result.error_message
        assert result.state.total_cards() == total
        assert result.state.current_player_id is not None
