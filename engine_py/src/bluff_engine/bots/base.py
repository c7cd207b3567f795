"""
Base strategy interface and utilities.
"""

import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..constants import CARD_VALUES, JOKER, value_index
from ..models import Action, Card, GameState, Player
from ..shuffle import group_by_value
from .memory import MemorySystem
from .personalities import Personality


@dataclass
class PlaySelection:
    """Cards to place and the value to declare for them."""
    cards: List[Card]
    declared_value: str


class BaseStrategy(ABC):
    """
    Decision algorithm for one difficulty tier.

    Strategies are stateless apart from their personality and random
    source; repetition damping lives in the agent.
    """

    def __init__(self, personality: Personality, rng: Optional[random.Random] = None):
        self.personality = personality
        self.rng = rng or random.Random()

    @abstractmethod
    def decide_challenge(self, state: GameState, hand: List[Card], memory: Optional[MemorySystem]) -> bool:
        """
        Decide whether to challenge the pending placement.

        Args:
            state: Game state as this bot may see it
            hand: This bot's cards
            memory: This bot's memory, if any

        Returns:
            True to challenge
        """

    @abstractmethod
    def select_play(self, state: GameState, hand: List[Card], memory: Optional[MemorySystem]) -> PlaySelection:
        """Choose cards from a non-empty hand and a value to declare."""

    def roll(self, probability: float) -> bool:
        return self.rng.random() < probability

    @staticmethod
    def clamp(value: float, low: float = 0.1, high: float = 0.9) -> float:
        return max(low, min(high, value))

    def group_cards_by_value(self, hand: List[Card]) -> Dict[str, List[Card]]:
        return group_by_value(hand)

    def count_value(self, hand: List[Card], value: Optional[str]) -> int:
        return sum(1 for card in hand if card.value == value)

    def cards_to_play(self, cards: List[Card], spread: float = 2, limit: Optional[int] = None) -> List[Card]:
        """
        Take 1 + floor(random * spread) cards, nudged by the personality's
        multi-card propensity, never more than are available (or limit).
        """
        count = 1 + int(self.rng.random() * spread)
        modifier = self.personality.multi_card_modifier
        if modifier > 0 and self.roll(modifier):
            count += 1
        elif modifier < 0 and self.roll(-modifier):
            count -= 1
        count = max(1, min(len(cards), limit or len(cards), count))
        return cards[:count]

    def honest_value(self, value: str, state: GameState) -> str:
        """A truthful declaration; jokers can claim the open value or any rank."""
        if value != JOKER:
            return value
        return state.current_claim if state.current_claim in CARD_VALUES else self.rng.choice(CARD_VALUES)

    def random_value(self, exclude: Optional[str] = None) -> str:
        choices = [v for v in CARD_VALUES if v != exclude]
        return self.rng.choice(choices)

    def pending_claim(self, state: GameState) -> Optional[Action]:
        return state.pending_claim

    def player(self, state: GameState, player_id: str) -> Optional[Player]:
        return state.get_player(player_id)

    def nearby_value(self, value: str) -> str:
        """A different value within one step, for a plausible lie."""
        if value not in CARD_VALUES:
            return self.random_value()
        idx = value_index(value)
        offsets = [o for o in (-1, 1) if 0 <= idx + o < len(CARD_VALUES)]
        return CARD_VALUES[idx + self.rng.choice(offsets)]

    def fallback_play(self, state: GameState, hand: List[Card]) -> PlaySelection:
        card = hand[0]
        return PlaySelection([card], state.current_claim or self.honest_value(card.value, state))
