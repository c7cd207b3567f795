"""
Bot agent: personality, memory and strategy for one seat.
"""

import logging
import random
from typing import Dict, List, Optional, Type

from ..constants import (
    ACTION_CHALLENGE, ACTION_PASS, ACTION_PLACE, DIFFICULTY_ADVANCED,
    DIFFICULTY_BEGINNER, DIFFICULTY_INTERMEDIATE, LINE_CHALLENGE, LINE_PASS,
    LINE_PLACE,
)
from ..models import Action, Card, GameState
from ..rules import RuleConfig, default_rules
from .advanced import AdvancedStrategy
from .base import BaseStrategy
from .beginner import BeginnerStrategy
from .intermediate import IntermediateStrategy
from .memory import MemorySystem
from .personalities import Personality, personality_for_difficulty

logger = logging.getLogger(__name__)

STRATEGIES: Dict[str, Type[BaseStrategy]] = {
    DIFFICULTY_BEGINNER: BeginnerStrategy,
    DIFFICULTY_INTERMEDIATE: IntermediateStrategy,
    DIFFICULTY_ADVANCED: AdvancedStrategy,
}

BASE_PASS = 0.2
MIN_PASS = 0.05
MAX_PASS = 0.5
PASS_DAMPING = 0.15
CHALLENGE_STREAK = 2
CHALLENGE_DAMPING = 0.7


class BotAgent:
    """
    A computer-controlled player.

    The agent only ever sees redacted views of the game: its own hand,
    everyone's card counts, and card faces revealed by challenges.
    """

    def __init__(
        self,
        player_id: str,
        name: str,
        difficulty: str = DIFFICULTY_BEGINNER,
        personality: Optional[Personality] = None,
        rng: Optional[random.Random] = None,
        rules: RuleConfig = default_rules
    ):
        self.player_id = player_id
        self.name = name
        if difficulty not in STRATEGIES:
            raise ValueError(f"Unknown difficulty: {difficulty}")
        self.difficulty = difficulty
        self.rng = rng or random.Random()
        self.personality = personality or personality_for_difficulty(self.difficulty, self.rng)
        self.memory = MemorySystem(
            adaptive_rate=self.personality.adaptive_rate,
            history_size=rules.history_size,
            recent_action_size=rules.recent_action_size,
            cards_per_rank=rules.suit_count,
        )
        self.strategy = STRATEGIES[self.difficulty](self.personality, self.rng)
        self._memory_ready = False
        self._last_seen_seq = 0
        self._streak_type: Optional[str] = None
        self._streak_count = 0

    def __repr__(self):
        return f"BotAgent({self.player_id!r}, {self.difficulty}, {self.personality.name})"

    @property
    def personality_name(self) -> str:
        return self.personality.name

    @property
    def personality_description(self) -> str:
        return self.personality.description

    # ------------------------------------------------------------- observing

    def observe(self, action: Optional[Action]):
        """Feed an action into memory once; repeats (by seq) are ignored."""
        if action is None:
            return
        if action.is_challenge:
            self.update_memory_with_challenge_result(action)
            return
        if not self._mark_seen(action):
            return
        self.memory.record_action(action)

    def update_memory_with_challenge_result(self, action: Action):
        if not action.is_challenge or action.was_successful is None:
            return
        if not self._mark_seen(action):
            return
        self.memory.record_challenge_result(action)

    def _mark_seen(self, action: Action) -> bool:
        if action.seq is None:
            return True
        if action.seq <= self._last_seen_seq:
            return False
        self._last_seen_seq = action.seq
        return True

    def reset_memory(self):
        """Forget opponents and streaks before a new game."""
        self.memory.reset()
        self._memory_ready = False
        self._last_seen_seq = 0
        self._streak_type = None
        self._streak_count = 0

    # -------------------------------------------------------------- deciding

    def decide(self, state: GameState) -> Optional[Action]:
        """
        Choose an action for the given view of the game.

        Returns None when the agent has nothing to do: no claim it wants to
        contest and not its turn.
        """
        if not self._memory_ready:
            self.memory.initialize_players(p.id for p in state.players)
            self._memory_ready = True

        self.observe(state.last_action)
        hand = self._hand(state)

        claim = state.pending_claim
        if claim is not None and claim.player_id != self.player_id:
            if self.strategy.decide_challenge(state, hand, self.memory) and not self._damp_challenge():
                return Action.challenge(
                    self.player_id,
                    target_seq=claim.seq,
                    flavor_line=self.personality.flavor_line(LINE_CHALLENGE, self.rng),
                )

        if state.current_player_id != self.player_id or not hand:
            return None

        if self.rng.random() < self._pass_probability():
            self._track(ACTION_PASS)
            return Action.pass_turn(
                self.player_id,
                flavor_line=self.personality.flavor_line(LINE_PASS, self.rng),
            )

        selection = self.strategy.select_play(state, hand, self.memory)
        self._track(ACTION_PLACE)
        return Action.place(
            self.player_id,
            selection.cards,
            selection.declared_value,
            flavor_line=self.personality.flavor_line(LINE_PLACE, self.rng),
        )

    def _hand(self, state: GameState) -> List[Card]:
        player = state.get_player(self.player_id)
        return list(player.hand) if player else []

    def _damp_challenge(self) -> bool:
        """True when a long challenge streak should be broken this time."""
        if self._streak_type != ACTION_CHALLENGE:
            self._streak_type = ACTION_CHALLENGE
            self._streak_count = 1
            return False
        self._streak_count += 1
        if self._streak_count > CHALLENGE_STREAK and self.rng.random() < CHALLENGE_DAMPING:
            logger.debug(f"{self.name} holds back after {self._streak_count - 1} challenges in a row")
            self._streak_count = 0
            return True
        return False

    def _pass_probability(self) -> float:
        probability = BASE_PASS + self.personality.pass_modifier
        if self._streak_type == ACTION_PASS:
            probability -= PASS_DAMPING * self._streak_count
        return max(MIN_PASS, min(MAX_PASS, probability))

    def _track(self, action_type: str):
        if self._streak_type == action_type:
            self._streak_count += 1
        else:
            self._streak_type = action_type
            self._streak_count = 1


def create_bots(
    count: int,
    difficulty: str = DIFFICULTY_BEGINNER,
    rng: Optional[random.Random] = None,
    rules: RuleConfig = default_rules
) -> List[BotAgent]:
    """Create ``count`` agents named bot-1/Bot 1, bot-2/Bot 2, ..."""
    if difficulty not in STRATEGIES:
        raise ValueError(f"Unknown difficulty: {difficulty}")
    rng = rng or random.Random()
    bots = []
    for i in range(count):
        bots.append(BotAgent(
            player_id=f"bot-{i + 1}",
            name=f"Bot {i + 1}",
            difficulty=difficulty,
            rng=random.Random(rng.random()),
            rules=rules,
        ))
    return bots
