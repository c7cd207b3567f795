"""
Advanced strategy: combines opponent models, card counting and game stage.
"""

from collections import Counter
from typing import Dict, List, Optional

from ..constants import CARD_VALUES, JOKER
from ..models import Action, Card, GameState
from .base import BaseStrategy, PlaySelection
from .memory import MemorySystem

BASE_CHALLENGE = 0.2
FORCED_BLUFF = 0.4
FREE_BLUFF = 0.7
SUSPECT_THRESHOLD = 0.6
NEAR_WIN = 3


class AdvancedStrategy(BaseStrategy):
    """
    Weighs everything it knows before each decision.

    Strategy:
    - Challenge from the claimant's bluff rate, trust score, how plausible
      the specific claim is and how close either side is to winning
    - Score each value held by group size, estimated opponent holdings,
      late-game pressure and recent popularity
    - Bluff with one of the three best-scoring believable values, never
      the value actually played
    """

    def decide_challenge(self, state: GameState, hand: List[Card], memory: Optional[MemorySystem]) -> bool:
        claim = self.pending_claim(state)
        if claim is None:
            return False

        # A joker claim we already doubt: let the window close instead
        if claim.declared_value == JOKER and self.suspect_bluff(claim, memory):
            return False

        bluff_ratio = memory.bluff_probability(claim.player_id) if memory else 0.3
        trust = memory.trust_score(claim.player_id) if memory else 0.5
        truthfulness = self.claim_truthfulness(claim, state, hand, memory)
        stage = self.game_stage(state, memory)

        probability = BASE_CHALLENGE + self.personality.challenge_modifier
        if bluff_ratio > SUSPECT_THRESHOLD:
            probability += 0.3
        probability += (1 - trust) * 0.4
        probability += (1 - truthfulness) * 0.3

        if stage < 0.3:
            probability -= 0.1
        elif stage > 0.7:
            probability += 0.1

        target = self.player(state, claim.player_id)
        if target is not None and target.hand_count <= NEAR_WIN:
            probability += 0.2
        if len(hand) <= NEAR_WIN:
            probability -= 0.15

        probability *= self.personality.risk_tolerance * 2
        probability = self.clamp(probability) + self.personality.noise(self.rng)
        return self.roll(probability)

    def suspect_bluff(self, claim: Action, memory: Optional[MemorySystem]) -> bool:
        if memory is None:
            return False
        return memory.bluff_probability(claim.player_id) > SUSPECT_THRESHOLD

    def claim_truthfulness(
        self,
        claim: Action,
        state: GameState,
        hand: List[Card],
        memory: Optional[MemorySystem]
    ) -> float:
        """Estimated chance this particular claim is honest."""
        probability = 0.7
        probability -= 0.1 * self.count_value(hand, claim.declared_value)
        if claim.card_count >= 3:
            probability -= 0.1 * (claim.card_count - 2)
        # Players bluff more as their hands shrink
        probability -= self.game_stage(state, memory) * 0.2

        if memory is not None:
            remembered = 1 - memory.card_bluff_probability(claim.player_id, claim.declared_value)
            probability = (probability + remembered) / 2
        return self.clamp(probability)

    def game_stage(self, state: GameState, memory: Optional[MemorySystem]) -> float:
        if memory is not None:
            return memory.game_stage_estimate(state)
        return MemorySystem().game_stage_estimate(state)

    def estimate_other_player_cards(self, hand: List[Card], memory: Optional[MemorySystem]) -> Dict[str, int]:
        """Unseen copies of each value that must sit with someone else."""
        counts = {}
        for value in CARD_VALUES:
            unseen = memory.remaining(value) if memory else 4
            counts[value] = max(0, unseen - self.count_value(hand, value))
        return counts

    def select_play(self, state: GameState, hand: List[Card], memory: Optional[MemorySystem]) -> PlaySelection:
        groups = self.group_cards_by_value(hand)
        forced = state.current_claim
        stage = self.game_stage(state, memory)
        others = self.estimate_other_player_cards(hand, memory)
        spread = min(3, stage * 5)

        if forced and groups.get(forced):
            selected = self.cards_to_play(groups[forced], spread=spread)
            if self.roll(FORCED_BLUFF + self.personality.bluff_modifier):
                bluff = self.choose_bluff_value(others, hand, memory)
                return PlaySelection(selected, self._avoid_truth(bluff, forced))
            return PlaySelection(selected, forced)

        frequency = memory.declared_value_counts() if memory else Counter()
        ranked = self._rank_groups(groups, others, frequency, stage)
        if ranked:
            best_value = ranked[0]
            selected = self.cards_to_play(groups[best_value], spread=spread)
            must_follow = bool(forced) and best_value != forced
            if must_follow or self.roll(FREE_BLUFF + self.personality.bluff_modifier):
                bluff = forced or self.choose_bluff_value(others, hand, memory)
                return PlaySelection(selected, self._avoid_truth(bluff, best_value))
            return PlaySelection(selected, self.honest_value(best_value, state))

        return self.fallback_play(state, hand)

    def _rank_groups(
        self,
        groups: Dict[str, List[Card]],
        others: Dict[str, int],
        frequency: Counter,
        stage: float
    ) -> List[str]:
        scores = {}
        for value, cards in groups.items():
            if not cards:
                continue
            score = len(cards) * 2
            score -= others.get(value, 0) * 0.5
            if stage > 0.7 and len(cards) >= 3:
                score += 3  # shed big groups late
            score += frequency[value] * 0.5
            scores[value] = score
        return sorted(scores, key=lambda v: scores[v], reverse=True)

    def choose_bluff_value(self, others: Dict[str, int], hand: List[Card], memory: Optional[MemorySystem]) -> str:
        """One of the three most believable values to claim."""
        recent = memory.declared_value_counts(last=5) if memory else Counter()
        scores = {}
        for value in CARD_VALUES:
            score = 5
            score += self.count_value(hand, value) * 2  # easier to back up later
            score -= others.get(value, 0)
            score += recent[value]
            scores[value] = score
        ranked = sorted(CARD_VALUES, key=lambda v: scores[v], reverse=True)
        return ranked[self.rng.randrange(3)]

    def _avoid_truth(self, bluff: str, true_value: str) -> str:
        if bluff == true_value:
            return self.random_value(exclude=true_value)
        return bluff
