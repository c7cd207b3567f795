"""
Shared fixtures for engine and bot tests.
"""

from typing import Dict, List, Optional

import pytest

from bluff_engine.engine import BluffEngine
from bluff_engine.models import Card
from bluff_engine.rules import RuleConfig, create_rules
from bluff_engine.scheduler import Scheduler, VirtualScheduler


def cards(*card_ids: str) -> List[Card]:
    return [Card.from_id(card_id) for card_id in card_ids]


def rigged_engine(
    hands: Dict[str, List[str]],
    rules: Optional[RuleConfig] = None,
    scheduler: Optional[Scheduler] = None
) -> BluffEngine:
    """
    Start a game, then replace the dealt hands with the given ones.

    Player ids are the lower-cased names; seats follow dict order.
    """
    engine = BluffEngine(rules or create_rules(challenge_window=0), scheduler=scheduler)
    engine.create_game("test")
    for name in hands:
        engine.add_player(name, player_id=name.lower())
    engine.start_game(seed=1)
    for player in engine.state.players:
        player.hand = cards(*hands[player.name])
        player.hand_count = len(player.hand)
    engine.state.undealt = []
    return engine


@pytest.fixture
def scheduler():
    return VirtualScheduler()


@pytest.fixture
def three_players():
    return rigged_engine({
        "Alice": ["AD", "AS", "2C", "5H"],
        "Bob": ["KD", "KS", "3H"],
        "Carol": ["7C", "8C", "9C"],
    })
