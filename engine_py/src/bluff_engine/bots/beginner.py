"""
Beginner strategy: flat probabilities, no use of memory.
"""

from typing import List, Optional

from ..models import Card, GameState
from .base import BaseStrategy, PlaySelection
from .memory import MemorySystem

BASE_CHALLENGE = 0.2
BASE_BLUFF = 0.2


class BeginnerStrategy(BaseStrategy):
    """
    Rarely guesses at bluffs and plays the first group in hand.

    Strategy:
    - Challenge with a flat, personality-adjusted probability
    - Place 1-2 cards of the first value held
    - Occasionally declare a random value instead of the true one
    """

    def decide_challenge(self, state: GameState, hand: List[Card], memory: Optional[MemorySystem]) -> bool:
        if self.pending_claim(state) is None:
            return False
        return self.roll(BASE_CHALLENGE + self.personality.challenge_modifier)

    def select_play(self, state: GameState, hand: List[Card], memory: Optional[MemorySystem]) -> PlaySelection:
        for value, cards in self.group_cards_by_value(hand).items():
            if not cards:
                continue
            selected = self.cards_to_play(cards, spread=2, limit=2)
            if self.roll(BASE_BLUFF + self.personality.bluff_modifier):
                return PlaySelection(selected, self.random_value())
            return PlaySelection(selected, self.honest_value(value, state))

        return self.fallback_play(state, hand)
