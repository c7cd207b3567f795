"""
Card shuffling and dealing utilities.
"""

import random
from typing import Dict, List, Optional, Tuple

from .constants import CARD_VALUES, JOKER, JOKER_SUFFIXES, SUITS
from .models import Card
from .rules import RuleConfig, default_rules


def create_deck(rules: RuleConfig = default_rules) -> List[Card]:
    """Create the deck: suit_count x 13 ranked cards plus the configured jokers."""
    deck = []

    for suit in SUITS[:rules.suit_count]:
        for value in CARD_VALUES:
            deck.append(Card(id=f"{value}{suit}", value=value, suit=suit))

    for suffix in JOKER_SUFFIXES[:rules.joker_count]:
        deck.append(Card(id=f"{JOKER}{suffix}", value=JOKER, is_joker=True))

    return deck


def shuffle_deck(
    deck: List[Card],
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> List[Card]:
    """
    Fisher-Yates shuffle of a copy of the deck.

    Args:
        deck: Cards to shuffle
        rng: Random source; takes precedence over seed
        seed: Optional seed for deterministic shuffling

    Returns:
        Shuffled copy of the deck
    """
    if rng is None:
        rng = random.Random(seed) if seed is not None else random.Random()

    deck_copy = list(deck)
    for i in range(len(deck_copy) - 1, 0, -1):
        j = rng.randrange(i + 1)
        deck_copy[i], deck_copy[j] = deck_copy[j], deck_copy[i]
    return deck_copy


def deal_cards(deck: List[Card], player_ids: List[str]) -> Tuple[Dict[str, List[Card]], List[Card]]:
    """
    Deal contiguous, equal slices of the deck.

    Args:
        deck: Shuffled deck of cards
        player_ids: Players in seat order

    Returns:
        (hands by player id, undealt remainder). The remainder never enters play.
    """
    if not player_ids:
        return {}, list(deck)

    cards_per_player = len(deck) // len(player_ids)
    hands = {}
    for i, player_id in enumerate(player_ids):
        start_idx = i * cards_per_player
        hands[player_id] = deck[start_idx:start_idx + cards_per_player]

    remainder = deck[cards_per_player * len(player_ids):]
    return hands, remainder


def group_by_value(cards: List[Card]) -> Dict[str, List[Card]]:
    """Group cards by value, preserving first-seen order."""
    groups: Dict[str, List[Card]] = {}
    for card in cards:
        groups.setdefault(card.value, []).append(card)
    return groups
