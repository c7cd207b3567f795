"""
Personality catalog tests.
"""

import random

import pytest

from bluff_engine.bots.personalities import (
    AGGRESSIVE, BALANCED, CAUTIOUS, UNPREDICTABLE, get_personality,
    personality_for_difficulty, personality_names,
)
from bluff_engine.constants import (
    DIFFICULTY_ADVANCED, DIFFICULTY_BEGINNER, DIFFICULTY_INTERMEDIATE, LINE_CHALLENGE,
)


def draw(difficulty, n=400, seed=0):
    rng = random.Random(seed)
    return [personality_for_difficulty(difficulty, rng).name for _ in range(n)]


def test_catalog():
    assert set(personality_names()) == {"Aggressive", "Cautious", "Balanced", "Unpredictable"}
    assert get_personality("Cautious") is CAUTIOUS
    with pytest.raises(ValueError):
        get_personality("Reckless")


def test_beginner_skews_cautious():
    names = draw(DIFFICULTY_BEGINNER)
    assert "Unpredictable" not in names
    assert names.count("Cautious") > names.count("Aggressive")


def test_advanced_skews_aggressive():
    names = draw(DIFFICULTY_ADVANCED)
    assert "Cautious" not in names
    assert names.count("Aggressive") > names.count("Balanced")


def test_intermediate_draws_all():
    assert set(draw(DIFFICULTY_INTERMEDIATE)) == set(personality_names())


def test_only_unpredictable_is_noisy():
    rng = random.Random(5)
    for personality in (AGGRESSIVE, CAUTIOUS, BALANCED):
        assert personality.noise(rng) == 0.0
    samples = [UNPREDICTABLE.noise(rng) for _ in range(200)]
    assert all(-0.4 <= s <= 0.4 for s in samples)
    assert any(s != 0 for s in samples)


def test_flavor_lines():
    rng = random.Random(1)
    line = AGGRESSIVE.flavor_line(LINE_CHALLENGE, rng)
    assert line in AGGRESSIVE.flavor_lines[LINE_CHALLENGE]
    assert AGGRESSIVE.flavor_line("shrug", rng) is None


def test_pass_modifiers():
    """Cautious bots pass more, aggressive ones less."""
    assert CAUTIOUS.pass_modifier > BALANCED.pass_modifier > AGGRESSIVE.pass_modifier
