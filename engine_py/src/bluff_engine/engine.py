"""Authoritative game engine: validates and applies actions, resolves challenges"""

import dataclasses
import logging
import random
import threading
import uuid
from typing import Callable, List, Optional

from .constants import STAGE_FINISHED, STAGE_PLAYING, STAGE_WAITING
from .errors import INVALID_EVENT, GameError, GameNotReady
from .models import Action, GameState, Player
from .rules import RuleConfig, default_rules
from .scheduler import ScheduledCall, Scheduler
from .shuffle import create_deck, deal_cards, shuffle_deck
from .validate import is_bluff, require_player, validate_challenge, validate_pass, validate_place

logger = logging.getLogger(__name__)

StateListener = Callable[[GameState], None]


class ActionResult:
    """Result of submitting an action."""

    def __init__(
        self,
        success: bool,
        state: Optional[GameState] = None,
        action: Optional[Action] = None,
        error: Optional[GameError] = None
    ):
        self.success = success
        self.state = state
        self.action = action
        self.error = error

    @property
    def error_code(self) -> Optional[str]:
        return self.error.code if self.error else None

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None

    @classmethod
    def accepted(cls, state: GameState, action: Action) -> 'ActionResult':
        return cls(success=True, state=state, action=action)

    @classmethod
    def rejected(cls, state: GameState, error: GameError) -> 'ActionResult':
        return cls(success=False, state=state, error=error)

    def raise_for_error(self):
        if self.error is not None:
            raise self.error


class BluffEngine:
    """Owns the single GameState; nothing else mutates it."""

    def __init__(self, rules: RuleConfig = default_rules, scheduler: Optional[Scheduler] = None):
        self.rules = rules
        self.scheduler = scheduler
        self.state = GameState(game_id="", deck_size=rules.get_deck_size())
        self._lock = threading.RLock()
        self._listeners: List[StateListener] = []
        self._window_call: Optional[ScheduledCall] = None

    def subscribe(self, listener: StateListener):
        self._listeners.append(listener)

    def unsubscribe(self, listener: StateListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self):
        for listener in list(self._listeners):
            listener(self.state)

    # ------------------------------------------------------------------ setup

    def create_game(self, game_id: Optional[str] = None) -> GameState:
        """Start a fresh game in the waiting stage."""
        with self._lock:
            self._cancel_window()
            self.state = GameState(
                game_id=game_id or str(uuid.uuid4())[:8],
                deck_size=self.rules.get_deck_size()
            )
            logger.info(f"Created game {self.state.game_id}")
            return self.state

    def add_player(self, name: str, is_bot: bool = False, player_id: Optional[str] = None) -> Player:
        with self._lock:
            state = self.state
            if state.stage != STAGE_WAITING:
                raise GameNotReady("Players can only join before the game starts")
            if len(state.players) >= self.rules.max_players:
                raise GameNotReady("Game is full")
            player_id = player_id or str(uuid.uuid4())[:8]
            if state.get_player(player_id) is not None:
                raise GameNotReady(f"Player id {player_id} already taken")
            player = Player(id=player_id, name=name, seat=len(state.players), is_bot=is_bot)
            state.players.append(player)
            state.version += 1
        self._notify()
        return player

    def start_game(self, rng: Optional[random.Random] = None, seed: Optional[int] = None) -> GameState:
        """Shuffle, deal and hand the first turn to the first active seat."""
        with self._lock:
            state = self.state
            if state.stage != STAGE_WAITING:
                raise GameNotReady(f"Game already {state.stage}")
            if not self.rules.validate_player_count(len(state.players)):
                raise GameNotReady(
                    f"Need {self.rules.min_players}-{self.rules.max_players} players, "
                    f"have {len(state.players)}"
                )

            deck = shuffle_deck(create_deck(self.rules), rng=rng, seed=seed)
            hands, remainder = deal_cards(deck, [p.id for p in state.players])
            cards_per_player = len(deck) // len(state.players)
            if cards_per_player == 0:
                raise GameNotReady("Not enough cards to deal")

            for player in state.players:
                player.hand = list(hands[player.id])
                player.hand_count = len(player.hand)
            state.undealt = list(remainder)
            state.initial_hand_size = cards_per_player
            state.stage = STAGE_PLAYING
            starter = next((p for p in state.players if p.can_act), state.players[0])
            state.current_player_id = starter.id
            state.version += 1
            logger.info(
                f"Game {state.game_id} started: {len(state.players)} players, "
                f"{cards_per_player} cards each, {len(remainder)} undealt; {starter.name} goes first"
            )
        self._notify()
        return self.state

    def set_player_status(
        self,
        player_id: str,
        is_active: Optional[bool] = None,
        is_blacklisted: Optional[bool] = None,
        is_disconnected: Optional[bool] = None
    ) -> GameState:
        """Update a player's activity flags; the turn moves on if the current actor drops out."""
        with self._lock:
            state = self.state
            player = require_player(state, player_id)
            if is_active is not None:
                player.is_active = is_active
            if is_blacklisted is not None:
                player.is_blacklisted = is_blacklisted
            if is_disconnected is not None:
                player.is_disconnected = is_disconnected
            if state.stage == STAGE_PLAYING and state.current_player_id == player_id and not player.can_act:
                self._advance_turn(state, player_id)
                logger.info(f"{player.name} can no longer act, turn passes to {state.current_player_id}")
            state.version += 1
        self._notify()
        return self.state

    # ----------------------------------------------------------------- actions

    def submit_action(self, player_id: str, action: Action) -> ActionResult:
        """Validate and apply an action. Rejections leave the state untouched."""
        action = dataclasses.replace(action, player_id=player_id)
        with self._lock:
            try:
                if action.is_place:
                    resolved = self._apply_place(action)
                elif action.is_challenge:
                    resolved = self._apply_challenge(action)
                elif action.is_pass:
                    resolved = self._apply_pass(action)
                else:
                    raise GameError(INVALID_EVENT, f"Unknown action type: {action.type}")
            except GameError as e:
                logger.info(f"Rejected {action.type} from {player_id}: {e}")
                return ActionResult.rejected(self.state, e)
            self._check_game_end(self.state)
            self.state.version += 1
        self._notify()
        return ActionResult.accepted(self.state, resolved)

    def _record(self, state: GameState, action: Action) -> Action:
        action.seq = state.next_seq
        state.next_seq += 1
        state.history.append(action)
        return action

    def _apply_place(self, action: Action) -> Action:
        state = self.state
        cards = validate_place(state, action)
        player = state.get_player(action.player_id)

        placed_ids = {card.id for card in cards}
        player.hand = [card for card in player.hand if card.id not in placed_ids]
        player.hand_count = len(player.hand)
        state.pile.extend(cards)

        resolved = self._record(state, Action.place(
            action.player_id, cards, action.declared_value, flavor_line=action.flavor_line
        ))
        state.last_action = resolved
        state.current_claim = action.declared_value
        state.consecutive_passes = 0
        self._advance_turn(state, player.id)
        self._open_window(resolved)
        logger.info(f"{player.name} placed {len(cards)} card(s) as {action.declared_value}")
        return resolved

    def _apply_challenge(self, action: Action) -> Action:
        state = self.state
        placement = validate_challenge(state, action)
        challenger = state.get_player(action.player_id)
        placer = state.get_player(placement.player_id)

        was_successful = is_bluff(placement)
        loser = placer if was_successful else challenger
        pile_size = len(state.pile)
        loser.hand.extend(state.pile)
        loser.hand_count = len(loser.hand)
        state.pile = []

        resolved = self._record(state, Action(
            type=action.type,
            player_id=challenger.id,
            declared_value=placement.declared_value,
            card_count=len(placement.cards),
            target_player_id=placer.id,
            target_seq=placement.seq,
            was_successful=was_successful,
            revealed=list(placement.cards),
            flavor_line=action.flavor_line,
        ))
        state.last_action = resolved
        state.current_claim = None
        state.consecutive_passes = 0
        self._cancel_window()
        state.challenge_window_open = False

        if loser.can_act:
            state.current_player_id = loser.id
        else:
            self._advance_turn(state, loser.id)
        logger.info(
            f"{challenger.name} challenged {placer.name} ({placement.declared_value}): "
            f"{'bluff caught' if was_successful else 'truthful'}, "
            f"{loser.name} takes {pile_size} card(s)"
        )
        return resolved

    def _apply_pass(self, action: Action) -> Action:
        state = self.state
        validate_pass(state, action)
        player = state.get_player(action.player_id)

        resolved = self._record(state, Action.pass_turn(player.id, flavor_line=action.flavor_line))
        state.consecutive_passes += 1
        self._cancel_window()
        state.challenge_window_open = False

        if state.consecutive_passes >= len(state.active_players()):
            logger.info(f"All {state.consecutive_passes} active players passed, {len(state.pile)} card(s) retired")
            state.discard.extend(state.pile)
            state.pile = []
            state.last_action = None
            state.current_claim = None
            state.consecutive_passes = 0
        else:
            state.last_action = resolved
        self._advance_turn(state, player.id)
        return resolved

    # ----------------------------------------------------------------- helpers

    def _advance_turn(self, state: GameState, from_player_id: str):
        """Move to the next player able to act; stay put if nobody else can."""
        n = len(state.players)
        idx = state.player_index(from_player_id)
        for i in range(1, n + 1):
            nxt = state.players[(idx + i) % n]
            if nxt.can_act:
                state.current_player_id = nxt.id
                return
        state.current_player_id = from_player_id

    def _check_game_end(self, state: GameState) -> bool:
        """Any empty hand ends the game at once."""
        if state.stage != STAGE_PLAYING:
            return state.stage == STAGE_FINISHED
        winner = next((p for p in state.players if len(p.hand) == 0), None)
        if winner is None:
            return False
        state.stage = STAGE_FINISHED
        state.winner = winner.id
        state.current_player_id = None
        state.challenge_window_open = False
        self._cancel_window()
        logger.info(f"Game {state.game_id} finished, {winner.name} wins")
        return True

    def _open_window(self, placement: Action):
        self._cancel_window()
        self.state.challenge_window_open = True
        if self.scheduler is None or self.rules.challenge_window <= 0:
            return
        self._window_call = self.scheduler.schedule(
            self.rules.challenge_window,
            lambda: self._close_window(placement.seq),
            label=f"challenge-window-{placement.seq}",
        )

    def _close_window(self, placement_seq: int):
        with self._lock:
            state = self.state
            last = state.last_action
            if not state.challenge_window_open or last is None or last.seq != placement_seq:
                return
            state.challenge_window_open = False
            self._window_call = None
            state.version += 1
            logger.debug(f"Challenge window closed for placement {placement_seq}")
        self._notify()

    def _cancel_window(self):
        if self._window_call is not None:
            self._window_call.cancel()
            self._window_call = None

    def teardown(self):
        """Cancel outstanding timers; the state is left as-is."""
        with self._lock:
            self._cancel_window()
            self.state.challenge_window_open = False
