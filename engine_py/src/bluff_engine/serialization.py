"""
State serialization and redaction.

Hands and face-down cards are only visible to their owner: other players
see card counts. Cards flipped by a challenge are public.
"""

import copy
from typing import Any, Dict, List, Optional

import orjson

from .models import Action, Card, GameState


def serialize_card(card: Card) -> Dict[str, Any]:
    return {
        "id": card.id,
        "value": card.value,
        "suit": card.suit,
        "is_joker": card.is_joker,
    }


def serialize_action(action: Optional[Action], viewer_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """Serialize an action; a placement's cards are shown to its author only."""
    if action is None:
        return None

    data = {
        "type": action.type,
        "player_id": action.player_id,
        "seq": action.seq,
        "declared_value": action.declared_value,
        "card_count": action.card_count,
    }
    if action.is_place and action.player_id == viewer_id:
        data["cards"] = [serialize_card(c) for c in action.cards]
    if action.is_challenge:
        data.update({
            "target_player_id": action.target_player_id,
            "target_seq": action.target_seq,
            "was_successful": action.was_successful,
            "revealed": [serialize_card(c) for c in action.revealed],
        })
    if action.flavor_line:
        data["flavor_line"] = action.flavor_line
    return data


def sanitize_state(state: GameState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Sanitize game state for an observer.

    Args:
        state: Authoritative game state
        viewer_id: ID of the player viewing the state (to show their cards)

    Returns:
        Sanitized state dictionary safe for JSON transmission
    """
    sanitized = {
        "game_id": state.game_id,
        "version": state.version,
        "stage": state.stage,
        "current_player_id": state.current_player_id,
        "winner": state.winner,
        "pile_count": len(state.pile),
        "discard_count": len(state.discard),
        "undealt_count": len(state.undealt),
        "current_claim": state.current_claim,
        "challenge_window_open": state.challenge_window_open,
        "last_action": serialize_action(state.last_action, viewer_id),
        "players": [],
    }

    for player in state.players:
        sanitized_player = {
            "id": player.id,
            "name": player.name,
            "seat": player.seat,
            "is_bot": player.is_bot,
            "is_active": player.is_active,
            "is_blacklisted": player.is_blacklisted,
            "is_disconnected": player.is_disconnected,
            "hand_count": len(player.hand),
        }

        # Show full hand only to the viewer
        if player.id == viewer_id:
            sanitized_player["hand"] = [serialize_card(c) for c in player.hand]

        sanitized["players"].append(sanitized_player)

    return sanitized


def redact_action(action: Optional[Action], viewer_id: Optional[str]) -> Optional[Action]:
    """Copy of a placement by someone else with its card faces removed."""
    if action is None or not action.is_place or action.player_id == viewer_id:
        return action
    redacted = copy.copy(action)
    redacted.cards = []
    return redacted


def redact_state(state: GameState, viewer_id: Optional[str] = None) -> GameState:
    """
    Deep copy of the state as one participant may see it.

    Other players' hands are emptied (hand_count stays), the pile is face
    down, and placements by others lose their card faces.
    """
    view = copy.deepcopy(state)
    for player in view.players:
        if player.id != viewer_id:
            player.hand = []
    view.pile = []
    view.discard = []
    view.undealt = []
    view.last_action = redact_action(view.last_action, viewer_id)
    view.history = [redact_action(a, viewer_id) for a in view.history]
    return view


def dumps(payload: Any) -> bytes:
    """Serialize a sanitized payload to JSON bytes."""
    return orjson.dumps(payload)


def public_history(state: GameState, viewer_id: Optional[str] = None) -> List[Dict[str, Any]]:
    return [serialize_action(a, viewer_id) for a in state.history]
