"""
Memory system for bots.

Each bot keeps its own MemorySystem: one behavioral profile per observed
player, a bounded log of recent actions and a running count of how many
cards of each rank are still unseen. Statistics are exponential averages
whose speed is the personality's adaptive rate.
"""

import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Optional

from ..constants import CARD_VALUES
from ..models import Action, Card, GameState

logger = logging.getLogger(__name__)

NEUTRAL = 0.5
MIN_RESOLVED = 3
TRUST_FLOOR = 0.1
TRUST_CEILING = 0.9


@dataclass
class ValuePattern:
    count: int = 0
    bluff_count: int = 0


@dataclass
class MemoryEntry:
    action: Action
    was_bluff: Optional[bool] = None


@dataclass
class PlayerProfile:
    player_id: str
    bluff_frequency: float = NEUTRAL
    challenge_frequency: float = NEUTRAL
    trust_score: float = NEUTRAL  # 0 = never truthful, 1 = always truthful
    proven_bluffs: int = 0
    proven_truths: int = 0
    successful_challenges: int = 0
    failed_challenges: int = 0
    total_actions: int = 0
    recent_actions: Deque[Action] = field(default_factory=deque)
    value_patterns: Dict[str, ValuePattern] = field(default_factory=dict)

    @property
    def resolved_placements(self) -> int:
        return self.proven_bluffs + self.proven_truths


class MemorySystem:
    """Per-bot memory of opponents' behavior."""

    def __init__(
        self,
        adaptive_rate: float = 0.2,
        history_size: int = 50,
        recent_action_size: int = 10,
        cards_per_rank: int = 4
    ):
        if not 0 < adaptive_rate <= 1:
            raise ValueError(f"adaptive_rate must be in (0, 1], got {adaptive_rate}")
        self.adaptive_rate = adaptive_rate
        self.recent_action_size = recent_action_size
        self.cards_per_rank = cards_per_rank
        self.profiles: Dict[str, PlayerProfile] = {}
        self.history: Deque[MemoryEntry] = deque(maxlen=history_size)
        self.card_counts: Dict[str, int] = {}
        self._reset_card_counts()

    def _reset_card_counts(self):
        self.card_counts = {value: self.cards_per_rank for value in CARD_VALUES}

    def initialize_players(self, player_ids: Iterable[str]):
        for player_id in player_ids:
            self.profile(player_id)

    def profile(self, player_id: str) -> PlayerProfile:
        """Get a profile, creating it on first sight."""
        profile = self.profiles.get(player_id)
        if profile is None:
            profile = PlayerProfile(
                player_id=player_id,
                recent_actions=deque(maxlen=self.recent_action_size)
            )
            self.profiles[player_id] = profile
        return profile

    def update_frequency(self, current: float, observation: float) -> float:
        return current * (1 - self.adaptive_rate) + observation * self.adaptive_rate

    # ------------------------------------------------------------- recording

    def record_action(self, action: Action, was_bluff: Optional[bool] = None):
        """
        Record an observed action.

        was_bluff is None until a challenge reveals the truth; placements
        recorded with a known outcome are scored immediately.
        """
        self.history.append(MemoryEntry(action, was_bluff))
        profile = self.profile(action.player_id)
        profile.total_actions += 1
        profile.recent_actions.append(action)

        if action.is_place and action.declared_value:
            pattern = profile.value_patterns.setdefault(action.declared_value, ValuePattern())
            pattern.count += 1
            if was_bluff is not None:
                self._apply_bluff_outcome(profile, action.declared_value, was_bluff)
                self.reveal_cards(action.cards)

        if action.is_challenge and action.was_successful is not None:
            self._apply_challenge_outcome(profile, action.was_successful)

    def record_challenge_result(self, challenge: Action):
        """
        Score a resolved challenge: the challenger's success rate, the
        target placement's truthfulness, and the cards it revealed.
        """
        if not challenge.is_challenge or challenge.was_successful is None:
            return

        self.history.append(MemoryEntry(challenge, challenge.was_successful))
        challenger = self.profile(challenge.player_id)
        challenger.total_actions += 1
        challenger.recent_actions.append(challenge)
        self._apply_challenge_outcome(challenger, challenge.was_successful)

        if challenge.target_player_id is None:
            return
        for entry in reversed(self.history):
            if entry.action.is_place and entry.action.seq == challenge.target_seq:
                entry.was_bluff = challenge.was_successful
                break

        target = self.profile(challenge.target_player_id)
        self._apply_bluff_outcome(target, challenge.declared_value, challenge.was_successful)
        self.reveal_cards(challenge.revealed)

    def _apply_bluff_outcome(self, profile: PlayerProfile, declared_value: Optional[str], was_bluff: bool):
        observation = 1.0 if was_bluff else 0.0
        profile.bluff_frequency = self.update_frequency(profile.bluff_frequency, observation)
        if was_bluff:
            profile.proven_bluffs += 1
            profile.trust_score -= self.adaptive_rate * 0.2
        else:
            profile.proven_truths += 1
            profile.trust_score += self.adaptive_rate * 0.1
        profile.trust_score = max(TRUST_FLOOR, min(TRUST_CEILING, profile.trust_score))

        if declared_value:
            pattern = profile.value_patterns.setdefault(declared_value, ValuePattern())
            if was_bluff:
                pattern.bluff_count += 1
            # A placement seen before memory was initialized still counts once
            pattern.count = max(pattern.count, pattern.bluff_count)

    def _apply_challenge_outcome(self, profile: PlayerProfile, was_successful: bool):
        if was_successful:
            profile.successful_challenges += 1
        else:
            profile.failed_challenges += 1
        profile.challenge_frequency = self.update_frequency(
            profile.challenge_frequency, 1.0 if was_successful else 0.0
        )

    def reveal_cards(self, cards: Iterable[Card]):
        """Cards flipped face up are no longer unseen."""
        for card in cards:
            if card.is_joker:
                continue
            if self.card_counts.get(card.value, 0) > 0:
                self.card_counts[card.value] -= 1

    # ---------------------------------------------------------------- queries

    def bluff_probability(self, player_id: str) -> float:
        """
        Estimated chance that the player's declarations are lies.

        Neutral with no resolved placements. Below MIN_RESOLVED outcomes the
        blended frequency is pulled toward neutral in proportion to how few
        outcomes are known; from then on it is returned as-is.
        """
        profile = self.profiles.get(player_id)
        if profile is None or profile.resolved_placements == 0:
            return NEUTRAL
        if profile.resolved_placements >= MIN_RESOLVED:
            return profile.bluff_frequency
        weight = profile.resolved_placements / MIN_RESOLVED
        return NEUTRAL + (profile.bluff_frequency - NEUTRAL) * weight

    def trust_score(self, player_id: str) -> float:
        profile = self.profiles.get(player_id)
        return profile.trust_score if profile else NEUTRAL

    def challenge_success_rate(self, player_id: str) -> float:
        profile = self.profiles.get(player_id)
        return profile.challenge_frequency if profile else NEUTRAL

    def card_bluff_probability(self, player_id: str, value: str) -> float:
        """Chance that a declaration of ``value`` by this player is a lie."""
        profile = self.profiles.get(player_id)
        if profile is None:
            return NEUTRAL

        pattern = profile.value_patterns.get(value)
        if pattern and pattern.count > 0:
            return pattern.bluff_count / pattern.count

        scarcity = 1 - self.remaining(value) / self.cards_per_rank if value in self.card_counts else 0.0
        return self.bluff_probability(player_id) * 0.7 + scarcity * 0.3

    def remaining(self, value: str) -> int:
        return self.card_counts.get(value, 0)

    def declared_value_counts(self, last: Optional[int] = None) -> Counter:
        """How often each value was declared in the remembered placements."""
        entries: List[MemoryEntry] = list(self.history)
        if last is not None:
            entries = entries[-last:]
        return Counter(
            entry.action.declared_value
            for entry in entries
            if entry.action.is_place and entry.action.declared_value
        )

    def game_stage_estimate(self, state: GameState) -> float:
        """0 at the deal, approaching 1 as hands empty."""
        if not state.players:
            return 0.0
        initial = state.initial_hand_size or (state.deck_size or 52) / len(state.players)
        if initial <= 0:
            return 0.0
        average = sum(p.hand_count for p in state.players) / len(state.players)
        return max(0.0, min(1.0, 1 - average / initial))

    def reset(self):
        """Forget everything; used between games."""
        self.profiles.clear()
        self.history.clear()
        self._reset_card_counts()
        logger.debug("Memory reset")
