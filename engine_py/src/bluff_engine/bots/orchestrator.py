"""
Bot orchestration.

The orchestrator listens to the engine, mirrors every new action into
each agent's memory and asks agents for decisions one at a time, each
after a cancellable thinking delay.
"""

import logging
import random
from typing import Callable, Dict, Iterable, List, Optional

from ..constants import STAGE_PLAYING
from ..engine import BluffEngine
from ..models import Action, GameState
from ..scheduler import ScheduledCall, Scheduler
from ..serialization import redact_action, redact_state
from .agent import BotAgent

logger = logging.getLogger(__name__)

BotActionListener = Callable[[str, Action], None]


class BotOrchestrator:
    """Drives the bot seats of one engine."""

    def __init__(
        self,
        engine: BluffEngine,
        agents: Iterable[BotAgent],
        scheduler: Scheduler,
        rng: Optional[random.Random] = None,
        on_bot_action: Optional[BotActionListener] = None
    ):
        self.engine = engine
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.on_bot_action = on_bot_action
        self.agents: Dict[str, BotAgent] = {agent.player_id: agent for agent in agents}
        self._last_seq = 0
        self._queue: List[str] = []
        self._pending: Optional[ScheduledCall] = None
        self._closed = False
        engine.subscribe(self.handle_state_change)

    # -------------------------------------------------------------- mirroring

    def handle_state_change(self, state: GameState):
        """Engine listener: mirror new actions, then re-plan decisions."""
        if self._closed:
            return
        self._mirror_history(state)
        self._cancel_pending()
        if state.stage != STAGE_PLAYING:
            self._queue = []
            return
        self._queue = self._plan(state)
        self._schedule_next(state.version)

    def _mirror_history(self, state: GameState):
        fresh = [a for a in state.history if a.seq is not None and a.seq > self._last_seq]
        for action in fresh:
            if action.is_challenge:
                self.update_bots_with_challenge_result(action)
            else:
                for agent in self.agents.values():
                    agent.observe(redact_action(action, agent.player_id))
            self._last_seq = action.seq

    def update_bots_with_challenge_result(self, action: Action):
        """Every bot learns a challenge's outcome, not only the two players involved."""
        for agent in self.agents.values():
            agent.update_memory_with_challenge_result(action)

    # --------------------------------------------------------------- planning

    def _plan(self, state: GameState) -> List[str]:
        """
        Bots to ask, in order. With a claim open every other eligible bot
        may contest it first, in seat order after the placer; the current
        actor is asked last.
        """
        queue = []
        claim = state.pending_claim
        current = state.current_player_id
        if claim is not None:
            start = state.player_index(claim.player_id)
            n = len(state.players)
            for i in range(1, n):
                player = state.players[(start + i) % n]
                if player.id == current or player.id == claim.player_id:
                    continue
                if player.id in self.agents and player.can_act:
                    queue.append(player.id)
        current_player = state.get_player(current) if current else None
        if current_player is not None and current_player.id in self.agents and current_player.can_act:
            queue.append(current_player.id)
        return queue

    def _schedule_next(self, version: int):
        if not self._queue:
            return
        bot_id = self._queue.pop(0)
        delay = self.rng.uniform(self.engine.rules.bot_delay_min, self.engine.rules.bot_delay_max)
        self._pending = self.scheduler.schedule(
            delay,
            lambda: self._run_decision(bot_id, version),
            label=f"bot-{bot_id}-v{version}",
        )

    def _cancel_pending(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    # -------------------------------------------------------------- executing

    def _run_decision(self, bot_id: str, version: int):
        self._pending = None
        state = self.engine.state
        if self._closed or state.version != version or state.stage != STAGE_PLAYING:
            logger.debug(f"Discarding stale decision for {bot_id}")
            return
        player = state.get_player(bot_id)
        agent = self.agents.get(bot_id)
        if player is None or agent is None or not player.can_act:
            logger.debug(f"Bot {bot_id} can no longer act")
            self._schedule_next(version)
            return

        action = agent.decide(redact_state(state, bot_id))
        if action is None:
            self._schedule_next(version)
            return

        logger.info(f"Bot {agent.name} chose: {action.type}")
        result = self.engine.submit_action(bot_id, action)
        if result.success:
            if self.on_bot_action is not None:
                self.on_bot_action(bot_id, result.action)
            return

        logger.warning(f"Bot {agent.name} action rejected: {result.error_message}")
        if not action.is_pass and self.engine.state.current_player_id == bot_id:
            fallback = self.engine.submit_action(bot_id, Action.pass_turn(bot_id))
            if fallback.success:
                if self.on_bot_action is not None:
                    self.on_bot_action(bot_id, fallback.action)
                return
            logger.error(f"Bot {agent.name} could not pass either: {fallback.error_message}")
        self._schedule_next(version)

    # -------------------------------------------------------------- lifecycle

    def get_bot_personality_info(self, bot_id: str) -> Optional[Dict[str, str]]:
        agent = self.agents.get(bot_id)
        if agent is None:
            return None
        return {
            "name": agent.personality_name,
            "description": agent.personality_description,
        }

    def reset_all(self):
        """Clear every agent's memory and streaks between games."""
        self._cancel_pending()
        self._queue = []
        self._last_seq = 0
        for agent in self.agents.values():
            agent.reset_memory()

    def shutdown(self):
        """Cancel outstanding decisions and stop listening to the engine."""
        self._closed = True
        self._cancel_pending()
        self._queue = []
        self.engine.unsubscribe(self.handle_state_change)
