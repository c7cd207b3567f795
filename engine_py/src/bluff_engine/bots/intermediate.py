"""
Intermediate strategy: memory-informed challenges and value selection.
"""

from collections import Counter
from typing import Dict, List, Optional

from ..models import Card, GameState
from .base import BaseStrategy, PlaySelection
from .memory import MemorySystem

BASE_CHALLENGE = 0.25
SUSPICIOUS_BLUFF_RATIO = 0.4
FORCED_BLUFF = 0.3
FREE_BLUFF = 0.5


class IntermediateStrategy(BaseStrategy):
    """
    Uses what it remembers about opponents and the values in play.

    Strategy:
    - Challenge more against players known to bluff, when holding copies
      of the claimed value, and when many cards were placed at once
    - Follow the table's open value when holding it
    - Otherwise play the value most often declared, or the largest group
    - Keep lies plausible: declare a value one step from the truth
    """

    def decide_challenge(self, state: GameState, hand: List[Card], memory: Optional[MemorySystem]) -> bool:
        claim = self.pending_claim(state)
        if claim is None:
            return False

        bluff_ratio = memory.bluff_probability(claim.player_id) if memory else 0.3
        probability = BASE_CHALLENGE + self.personality.challenge_modifier

        if bluff_ratio > SUSPICIOUS_BLUFF_RATIO:
            probability += 0.2

        # Every copy we hold is one the claimant can't have
        probability += 0.1 * self.count_value(hand, claim.declared_value)

        if claim.card_count >= 3:
            probability += 0.1 * (claim.card_count - 2)

        probability = self.clamp(probability) + self.personality.noise(self.rng)
        return self.roll(probability)

    def select_play(self, state: GameState, hand: List[Card], memory: Optional[MemorySystem]) -> PlaySelection:
        groups = self.group_cards_by_value(hand)
        forced = state.current_claim
        frequency = memory.declared_value_counts() if memory else Counter()

        if forced and groups.get(forced):
            selected = self.cards_to_play(groups[forced], spread=2)
            if self.roll(FORCED_BLUFF + self.personality.bluff_modifier):
                return PlaySelection(selected, self.nearby_value(forced))
            return PlaySelection(selected, forced)

        best_value = self._best_value(groups, frequency)
        if best_value is not None:
            selected = self.cards_to_play(groups[best_value], spread=2)
            must_follow = bool(forced) and best_value != forced
            if must_follow or self.roll(FREE_BLUFF + self.personality.bluff_modifier):
                return PlaySelection(selected, forced or self.nearby_value(best_value))
            return PlaySelection(selected, self.honest_value(best_value, state))

        return self.fallback_play(state, hand)

    def _best_value(self, groups: Dict[str, List[Card]], frequency: Counter) -> Optional[str]:
        """Most frequently declared value we hold, else our largest group."""
        best_value = None
        max_frequency = 0
        for value in groups:
            if frequency[value] > max_frequency:
                best_value = value
                max_frequency = frequency[value]

        if best_value is None:
            max_cards = 0
            for value, cards in groups.items():
                if len(cards) > max_cards:
                    max_cards = len(cards)
                    best_value = value
        return best_value
