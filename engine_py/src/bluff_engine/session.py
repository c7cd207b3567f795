"""
Game session: one engine, its bots, a scheduler and a narrator wired together.

This is the surface a presentation layer talks to. Everything it hands
out is sanitized for a human seat; only the engine sees whole hands.
"""

import logging
import random
from typing import Any, Callable, Dict, List, Optional, Tuple

from .bots.agent import create_bots
from .bots.orchestrator import BotOrchestrator
from .engine import ActionResult, BluffEngine
from .errors import INVALID_EVENT, GameError, IllegalCards, UnknownPlayer
from .events import (
    create_bot_action_event, create_error_event,
    create_state_changed_event, parse_action_request,
)
from .models import Action, GameState
from .narration import Narrator
from .rules import RuleConfig, default_rules
from .scheduler import Scheduler, VirtualScheduler
from .serialization import dumps, redact_state, sanitize_state, serialize_action

logger = logging.getLogger(__name__)

StateCallback = Callable[[Dict[str, Any]], None]
BotActionCallback = Callable[[str, Dict[str, Any]], None]


class GameSession:
    """Hosts a single Bluff table with human and bot seats."""

    def __init__(
        self,
        rules: RuleConfig = default_rules,
        scheduler: Optional[Scheduler] = None,
        narrator: Optional[Narrator] = None,
        on_state_changed: Optional[StateCallback] = None,
        on_bot_action: Optional[BotActionCallback] = None,
        rng: Optional[random.Random] = None,
    ):
        self.rules = rules
        self.scheduler = scheduler or VirtualScheduler()
        self.narrator = narrator or Narrator()
        self.on_state_changed = on_state_changed
        self.on_bot_action = on_bot_action
        self.rng = rng or random.Random()
        self.engine = BluffEngine(rules, scheduler=self.scheduler)
        self.engine.subscribe(self._handle_state_change)
        self.orchestrator: Optional[BotOrchestrator] = None
        self.viewer_id: Optional[str] = None
        self._roster: List[Tuple[str, str, bool]] = []
        self._last_seq = 0

    @property
    def human_ids(self) -> List[str]:
        return [player_id for player_id, _, is_bot in self._roster if not is_bot]

    def create_game(
        self,
        players: List[str],
        bot_count: int = 0,
        difficulty: Optional[str] = None,
        seed: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Seat the named humans followed by ``bot_count`` bots and deal.

        Humans get ids player-1, player-2, ...; the first of them is the
        local viewer for callbacks and for the returned view.

        Raises:
            GameNotReady: If the player count is outside the configured range
            ValueError: If the difficulty is unknown
        """
        if self.orchestrator is not None:
            self.orchestrator.shutdown()
        difficulty = difficulty or self.rules.default_difficulty
        if seed is not None:
            self.rng.seed(seed)

        agents = create_bots(bot_count, difficulty, rng=self.rng, rules=self.rules)
        self._roster = [(f"player-{i + 1}", name, False) for i, name in enumerate(players)]
        self._roster += [(agent.player_id, agent.name, True) for agent in agents]
        self.viewer_id = self._roster[0][0] if players else None

        self.orchestrator = BotOrchestrator(
            self.engine, agents, self.scheduler,
            rng=self.rng, on_bot_action=self._handle_bot_action,
        )
        logger.info(f"New session: {len(players)} human(s), {bot_count} {difficulty} bot(s)")
        self._deal(seed)
        return self.view()

    def new_game(self, seed: Optional[int] = None) -> Dict[str, Any]:
        """Redeal with the same seats; bots forget the previous game."""
        if not self._roster or self.orchestrator is None:
            raise RuntimeError("create_game must be called first")
        self.orchestrator.reset_all()
        self._deal(seed)
        return self.view()

    def _deal(self, seed: Optional[int]):
        self.engine.create_game()
        self._last_seq = 0
        for player_id, name, is_bot in self._roster:
            self.engine.add_player(name, is_bot=is_bot, player_id=player_id)
        self.engine.start_game(rng=self.rng if seed is None else None, seed=seed)

    def submit_action(self, player_id: str, action: Action) -> ActionResult:
        """
        Submit an action for a human seat.

        The result carries that seat's redacted copy of the state, never
        the engine's own.
        """
        if player_id not in self.human_ids:
            return self._for_seat(ActionResult.rejected(self.engine.state, UnknownPlayer(player_id)), None)
        return self._for_seat(self.engine.submit_action(player_id, action), player_id)

    def submit_request(self, player_id: str, data: Dict[str, Any]) -> ActionResult:
        """Validate a raw client payload and submit it."""
        seat = player_id if player_id in self.human_ids else None
        try:
            request = parse_action_request(data)
        except ValueError as e:
            return self._for_seat(ActionResult.rejected(self.engine.state, GameError(INVALID_EVENT, str(e))), seat)
        try:
            action = request.to_action(player_id)
        except ValueError as e:
            return self._for_seat(ActionResult.rejected(self.engine.state, IllegalCards(str(e))), seat)
        return self.submit_action(player_id, action)

    def _for_seat(self, result: ActionResult, player_id: Optional[str]) -> ActionResult:
        result.state = redact_state(result.state, player_id)
        return result

    def view(self, viewer_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Sanitized state for a human seat (the local viewer by default).

        Raises:
            UnknownPlayer: If ``viewer_id`` is not a human seat
        """
        viewer_id = viewer_id or self.viewer_id
        if viewer_id is not None and viewer_id not in self.human_ids:
            raise UnknownPlayer(viewer_id)
        return sanitize_state(self.engine.state, viewer_id)

    def snapshot(self, viewer_id: Optional[str] = None) -> bytes:
        """State-changed event as JSON bytes."""
        event = create_state_changed_event(self.view(viewer_id))
        return dumps(event.model_dump(mode="json"))

    def error_payload(self, result: ActionResult) -> Optional[bytes]:
        if result.error is None:
            return None
        return dumps(create_error_event(result.error).model_dump(mode="json"))

    def bot_personality(self, bot_id: str) -> Optional[Dict[str, str]]:
        if self.orchestrator is None:
            return None
        return self.orchestrator.get_bot_personality_info(bot_id)

    def close(self):
        """Cancel every timer and detach from the engine."""
        if self.orchestrator is not None:
            self.orchestrator.shutdown()
        self.engine.teardown()
        self.engine.unsubscribe(self._handle_state_change)
        logger.info(f"Session for game {self.engine.state.game_id} closed")

    # ------------------------------------------------------------- callbacks

    def _handle_state_change(self, state: GameState):
        fresh = [a for a in state.history if a.seq is not None and a.seq > self._last_seq]
        if fresh:
            self._last_seq = fresh[-1].seq
        self.narrator.on_state_changed(state, fresh[-1] if fresh else None)
        if self.on_state_changed is not None:
            self.on_state_changed(sanitize_state(state, self.viewer_id))

    def _handle_bot_action(self, bot_id: str, action: Action):
        self.narrator.on_bot_action(bot_id, action)
        if self.on_bot_action is not None:
            event = create_bot_action_event(bot_id, serialize_action(action, self.viewer_id))
            self.on_bot_action(bot_id, event.model_dump(mode="json"))
