"""Game constants and card utilities"""

from typing import Optional, Tuple

CARD_VALUES = ["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"]
SUITS = ['S', 'H', 'D', 'C']
JOKER = "JOKER"
JOKER_SUFFIXES = "abcdefgh"

# A joker declaration is legal; every non-joker card then contradicts it
DECLARABLE_VALUES = CARD_VALUES + [JOKER]

# Game stages
STAGE_WAITING = "waiting"
STAGE_PLAYING = "playing"
STAGE_FINISHED = "finished"

# Action types
ACTION_PLACE = "place"
ACTION_CHALLENGE = "challenge"
ACTION_PASS = "pass"
ACTION_TYPES = [ACTION_PLACE, ACTION_CHALLENGE, ACTION_PASS]

# Difficulty levels
DIFFICULTY_BEGINNER = "beginner"
DIFFICULTY_INTERMEDIATE = "intermediate"
DIFFICULTY_ADVANCED = "advanced"
DIFFICULTIES = [DIFFICULTY_BEGINNER, DIFFICULTY_INTERMEDIATE, DIFFICULTY_ADVANCED]

# Flavor line keys
LINE_PLACE = "place"
LINE_CHALLENGE = "challenge"
LINE_PASS = "pass"
LINE_WIN = "win"
LINE_LOSE = "lose"


def parse_card(card_id: str) -> Tuple[str, Optional[str]]:
    """Split a card id such as ``10H`` or ``JOKERa`` into (value, suit)."""
    if card_id.startswith(JOKER):
        return JOKER, None
    value, suit = card_id[:-1], card_id[-1]
    if value not in CARD_VALUES or suit not in SUITS:
        raise ValueError(f"Invalid card id: {card_id}")
    return value, suit


def value_index(value: str) -> int:
    """Position of a value in ace-low order."""
    return CARD_VALUES.index(value)
