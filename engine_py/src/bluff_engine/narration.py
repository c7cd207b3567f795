"""
Narration hooks.

The engine and orchestrator never announce anything themselves; a session
hands events to an injected Narrator, which may render them as speech,
text or nothing at all.
"""

import logging
from typing import List, Optional

from .constants import STAGE_FINISHED
from .models import Action, GameState

logger = logging.getLogger(__name__)


def _name(state: GameState, player_id: Optional[str]) -> str:
    player = state.get_player(player_id) if player_id else None
    return player.name if player else str(player_id)


def describe_action(state: GameState, action: Action) -> str:
    """One-line public description of an action."""
    actor = _name(state, action.player_id)
    if action.is_place:
        noun = "card" if action.card_count == 1 else "cards"
        return f"{actor} placed {action.card_count} {noun} as {action.declared_value}"
    if action.is_challenge:
        target = _name(state, action.target_player_id)
        text = f"{actor} challenged {target}"
        if action.was_successful is None:
            return text
        if action.was_successful:
            return f"{text}. Challenge successful! {target} takes the cards."
        return f"{text}. Challenge failed! {actor} takes the cards."
    return f"{actor} passed"


class Narrator:
    """Receives game events; the base class ignores them."""

    def on_state_changed(self, state: GameState, action: Optional[Action] = None):
        pass

    def on_bot_action(self, bot_id: str, action: Action):
        pass


class LoggingNarrator(Narrator):
    """Writes announcements to the log and keeps them for inspection."""

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logger
        self.announcements: List[str] = []
        self._state: Optional[GameState] = None

    def announce(self, message: str):
        self.announcements.append(message)
        self.log.info(message)

    def on_state_changed(self, state: GameState, action: Optional[Action] = None):
        self._state = state
        if action is None:
            return
        self.announce(describe_action(state, action))
        if state.stage == STAGE_FINISHED and state.winner:
            self.announce(f"Game over! {_name(state, state.winner)} has won the game!")
        elif state.current_player_id:
            self.announce(f"{_name(state, state.current_player_id)}'s turn")

    def on_bot_action(self, bot_id: str, action: Action):
        if not action.flavor_line:
            return
        name = _name(self._state, bot_id) if self._state else bot_id
        self.announce(f'{name}: "{action.flavor_line}"')
