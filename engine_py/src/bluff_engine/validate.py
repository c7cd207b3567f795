"""
Action validation.

Validators only read the state; they raise a GameError subclass when the
action must be rejected and return what the engine needs to apply it.
"""

from typing import List

from .constants import DECLARABLE_VALUES, STAGE_PLAYING
from .errors import IllegalCards, InvalidTurn, NoPendingClaim, UnknownPlayer
from .models import Action, Card, GameState, Player


def require_player(state: GameState, player_id: str) -> Player:
    player = state.get_player(player_id)
    if player is None:
        raise UnknownPlayer(player_id)
    return player


def require_playing(state: GameState):
    if state.stage != STAGE_PLAYING:
        raise InvalidTurn(f"Game is not in progress (current: {state.stage})")


def require_turn(state: GameState, player: Player):
    if state.current_player_id != player.id:
        raise InvalidTurn(f"Not {player.name}'s turn")
    if not player.can_act:
        raise InvalidTurn(f"{player.name} is not active")


def resolve_cards(player: Player, action: Action) -> List[Card]:
    """
    Map the requested cards onto the actor's hand.

    Cards are matched by id so the authoritative hand copies are the ones
    that move; a caller can't smuggle in a card with a different value.
    """
    if not action.cards:
        raise IllegalCards("Must place at least one card")

    ids = [card.id for card in action.cards]
    if len(ids) != len(set(ids)):
        raise IllegalCards("Cannot place the same card twice")

    hand_by_id = {card.id: card for card in player.hand}
    missing = [card_id for card_id in ids if card_id not in hand_by_id]
    if missing:
        raise IllegalCards(f"{player.name} does not hold {', '.join(missing)}")

    return [hand_by_id[card_id] for card_id in ids]


def validate_place(state: GameState, action: Action) -> List[Card]:
    """Validate a placement; returns the hand cards being placed."""
    player = require_player(state, action.player_id)
    require_playing(state)
    require_turn(state, player)
    if action.declared_value not in DECLARABLE_VALUES:
        raise IllegalCards(f"Unknown declared value: {action.declared_value}")
    return resolve_cards(player, action)


def validate_challenge(state: GameState, action: Action) -> Action:
    """Validate a challenge; returns the placement it targets."""
    player = require_player(state, action.player_id)
    require_playing(state)
    if not player.can_act:
        raise InvalidTurn(f"{player.name} is not active")

    placement = state.last_action
    if placement is None or not placement.is_place:
        raise NoPendingClaim("Last action is not a placement")
    if not state.challenge_window_open:
        raise NoPendingClaim("Challenge window has closed")
    if action.target_seq is not None and action.target_seq != placement.seq:
        raise NoPendingClaim("That placement has already been resolved")
    if placement.player_id == player.id:
        raise NoPendingClaim("Cannot challenge your own placement")
    return placement


def validate_pass(state: GameState, action: Action):
    player = require_player(state, action.player_id)
    require_playing(state)
    require_turn(state, player)


def is_bluff(placement: Action) -> bool:
    """A placement is a lie if any non-joker card differs from the declared value."""
    return any(not card.matches(placement.declared_value) for card in placement.cards)
