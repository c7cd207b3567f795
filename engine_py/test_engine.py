#!/usr/bin/env python3
"""Simple smoke test: four bots play a whole Bluff game on a virtual clock"""

from src.bluff_engine.rules import configure_logging, rules_from_env
from src.bluff_engine.narration import LoggingNarrator
from src.bluff_engine.session import GameSession


def test_basic_game():
    """Test basic game functionality"""
    print("🧪 Testing Bluff engine...")
    configure_logging()

    narrator = LoggingNarrator()
    session = GameSession(rules=rules_from_env(), narrator=narrator)
    view = session.create_game([], bot_count=4, seed=1)
    print(f"✅ Created game: {view['game_id']}")
    print(f"✅ Players: {[p['name'] for p in view['players']]}")
    for player in view["players"]:
        info = session.bot_personality(player["id"])
        print(f"✅ {player['name']} ({info['name']}) has {player['hand_count']} cards")

    steps = session.scheduler.run_until_idle(max_steps=20000)
    view = session.view()
    cards_left = (sum(p["hand_count"] for p in view["players"])
                  + view["pile_count"] + view["discard_count"] + view["undealt_count"])
    print(f"✅ Finished after {steps} scheduled steps and {len(narrator.announcements)} announcements")
    print(f"✅ Stage: {view['stage']}, winner: {view['winner']}")
    print(f"✅ Cards accounted for: {cards_left} of {session.rules.get_deck_size()}")
    session.close()

    print("🎉 All tests passed! Engine is working correctly.")


if __name__ == "__main__":
    test_basic_game()
