"""
Bot personalities.

Each personality is a fixed bundle of biases laid over a difficulty
strategy: additive modifiers on the base bluff/challenge/pass
probabilities, a multi-card propensity, a risk tolerance that scales the
final challenge probability, the adaptive rate of the bot's memory and
(Unpredictable only) a noise amplitude.
"""

import random
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from ..constants import (
    DIFFICULTY_ADVANCED, DIFFICULTY_BEGINNER, DIFFICULTY_INTERMEDIATE,
    LINE_CHALLENGE, LINE_LOSE, LINE_PASS, LINE_PLACE, LINE_WIN,
)


@dataclass(frozen=True)
class Personality:
    name: str
    description: str
    bluff_modifier: float = 0.0
    challenge_modifier: float = 0.0
    multi_card_modifier: float = 0.0
    pass_modifier: float = 0.0
    risk_tolerance: float = 0.5
    adaptive_rate: float = 0.2
    randomness_factor: float = 0.0
    flavor_lines: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: MappingProxyType({}))

    def noise(self, rng: random.Random) -> float:
        """Uniform noise in [-randomness_factor, +randomness_factor]."""
        if not self.randomness_factor:
            return 0.0
        return rng.uniform(-self.randomness_factor, self.randomness_factor)

    def flavor_line(self, line_type: str, rng: random.Random) -> Optional[str]:
        lines = self.flavor_lines.get(line_type)
        if not lines:
            return None
        return rng.choice(lines)


AGGRESSIVE = Personality(
    name="Aggressive",
    description="Bluffs often and challenges frequently",
    bluff_modifier=0.3,
    challenge_modifier=0.25,
    multi_card_modifier=0.2,
    pass_modifier=-0.1,
    risk_tolerance=0.8,
    adaptive_rate=0.15,
    flavor_lines=MappingProxyType({
        LINE_PLACE: ("Boom! Take that!", "Watch this move!", "Try to beat that!"),
        LINE_CHALLENGE: ("I don't believe you!", "You're bluffing!", "Caught you!"),
        LINE_PASS: ("I'll wait for now.", "Just watching for now.", "I'll get you next time."),
        LINE_WIN: ("Crushed it!", "Too easy!", "Better luck next time!"),
        LINE_LOSE: ("Impossible!", "Just got unlucky.", "Next time I'll get you."),
    }),
)

CAUTIOUS = Personality(
    name="Cautious",
    description="Rarely bluffs and challenges only when confident",
    bluff_modifier=-0.2,
    challenge_modifier=-0.15,
    multi_card_modifier=-0.1,
    pass_modifier=0.1,
    risk_tolerance=0.3,
    adaptive_rate=0.2,
    flavor_lines=MappingProxyType({
        LINE_PLACE: ("I think this works.", "Let me try this.", "This seems safe."),
        LINE_CHALLENGE: (
            "I'm quite certain you're bluffing.",
            "The odds suggest you're not truthful.",
            "I've been tracking the cards...",
        ),
        LINE_PASS: ("I'll pass for now.", "Not worth the risk.", "I need more information."),
        LINE_WIN: ("A careful strategy pays off.", "Patience is key.", "Calculated moves win games."),
        LINE_LOSE: ("I miscalculated.", "I need to reassess my approach.", "Back to the drawing board."),
    }),
)

BALANCED = Personality(
    name="Balanced",
    description="Uses a mix of bluffing and honest play",
    risk_tolerance=0.5,
    adaptive_rate=0.25,
    flavor_lines=MappingProxyType({
        LINE_PLACE: ("Here's my play.", "Let's see how this goes.", "A solid move."),
        LINE_CHALLENGE: ("I'm calling your bluff.", "That doesn't add up.", "I'm challenging that."),
        LINE_PASS: ("I'll pass.", "Not this time.", "Moving on."),
        LINE_WIN: ("Good game!", "That worked out well.", "A balanced approach wins."),
        LINE_LOSE: ("Well played.", "I'll adjust my strategy.", "Good game, everyone."),
    }),
)

UNPREDICTABLE = Personality(
    name="Unpredictable",
    description="Behavior varies wildly from round to round",
    bluff_modifier=0.1,
    challenge_modifier=0.1,
    multi_card_modifier=0.1,
    risk_tolerance=0.6,
    adaptive_rate=0.1,
    randomness_factor=0.4,
    flavor_lines=MappingProxyType({
        LINE_PLACE: ("Hmm, what about this?", "Let's try something different.", "This might be interesting."),
        LINE_CHALLENGE: ("Wait a minute!", "Something's fishy here.", "Let's see what you really have!"),
        LINE_PASS: ("Not yet...", "I'll wait.", "Passing for now."),
        LINE_WIN: ("Surprise!", "Bet you didn't see that coming!", "Unpredictability for the win!"),
        LINE_LOSE: ("Well that was unexpected.", "Interesting outcome.", "The dice didn't roll my way."),
    }),
)

PERSONALITIES = MappingProxyType({
    p.name: p for p in (AGGRESSIVE, CAUTIOUS, BALANCED, UNPREDICTABLE)
})

# Repeats weight the draw
DIFFICULTY_DISTRIBUTIONS = MappingProxyType({
    DIFFICULTY_BEGINNER: (CAUTIOUS, CAUTIOUS, BALANCED, AGGRESSIVE),
    DIFFICULTY_INTERMEDIATE: (AGGRESSIVE, CAUTIOUS, BALANCED, UNPREDICTABLE),
    DIFFICULTY_ADVANCED: (AGGRESSIVE, AGGRESSIVE, BALANCED, UNPREDICTABLE, UNPREDICTABLE),
})


def get_personality(name: str) -> Personality:
    try:
        return PERSONALITIES[name]
    except KeyError:
        raise ValueError(f"Unknown personality: {name}")


def get_random_personality(rng: Optional[random.Random] = None) -> Personality:
    rng = rng or random.Random()
    return rng.choice(list(PERSONALITIES.values()))


def personality_for_difficulty(difficulty: str, rng: Optional[random.Random] = None) -> Personality:
    """Draw a personality weighted by difficulty; unknown levels draw uniformly."""
    rng = rng or random.Random()
    distribution: Optional[Tuple[Personality, ...]] = DIFFICULTY_DISTRIBUTIONS.get(difficulty)
    if distribution is None:
        return get_random_personality(rng)
    return rng.choice(distribution)


def personality_names() -> List[str]:
    return list(PERSONALITIES.keys())
