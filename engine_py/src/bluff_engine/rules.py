"""
Game rule configuration and validation.
"""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import CARD_VALUES, DIFFICULTIES, DIFFICULTY_INTERMEDIATE


class RuleConfig(BaseModel):
    """Configuration for game rules and settings."""

    suit_count: int = Field(
        default=4,
        ge=1,
        le=4,
        description="Number of suits in the deck (13 ranks each)"
    )
    joker_count: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Number of jokers (wildcards for any declared value)"
    )
    min_players: int = Field(
        default=2,
        ge=2,
        le=8,
        description="Minimum number of players required to start"
    )
    max_players: int = Field(
        default=6,
        ge=2,
        le=8,
        description="Maximum number of players allowed"
    )
    challenge_window: float = Field(
        default=6.0,
        ge=0,
        le=60,
        description="Seconds a placement stays open to challenges (0 = until the next action)"
    )
    bot_delay_min: float = Field(
        default=1.0,
        ge=0,
        le=30,
        description="Shortest bot thinking delay in seconds"
    )
    bot_delay_max: float = Field(
        default=2.0,
        ge=0,
        le=30,
        description="Longest bot thinking delay in seconds"
    )
    history_size: int = Field(
        default=50,
        ge=1,
        description="Actions kept in a bot's memory log"
    )
    recent_action_size: int = Field(
        default=10,
        ge=1,
        description="Actions kept per observed player profile"
    )
    default_difficulty: str = Field(
        default=DIFFICULTY_INTERMEDIATE,
        description="Bot difficulty used when none is requested"
    )

    @field_validator('max_players')
    @classmethod
    def validate_max_players(cls, v, info):
        """Validate maximum players doesn't fall below the minimum."""
        min_players = info.data.get('min_players', 2)
        if v < min_players:
            raise ValueError(f'max_players ({v}) must be >= min_players ({min_players})')
        return v

    @field_validator('bot_delay_max')
    @classmethod
    def validate_bot_delay(cls, v, info):
        delay_min = info.data.get('bot_delay_min', 0)
        if v < delay_min:
            raise ValueError(f'bot_delay_max ({v}) must be >= bot_delay_min ({delay_min})')
        return v

    @field_validator('default_difficulty')
    @classmethod
    def validate_difficulty(cls, v):
        if v not in DIFFICULTIES:
            raise ValueError(f'Unknown difficulty: {v}')
        return v

    def validate_player_count(self, player_count: int) -> bool:
        """Check if a player count is valid for this configuration."""
        return self.min_players <= player_count <= self.max_players

    def get_deck_size(self) -> int:
        """Get the total number of cards in the deck."""
        return self.suit_count * len(CARD_VALUES) + self.joker_count


# Default configuration instance
default_rules = RuleConfig()


def create_rules(**overrides) -> RuleConfig:
    """Create a RuleConfig with optional overrides."""
    config_dict = default_rules.model_dump()
    config_dict.update(overrides)
    return RuleConfig(**config_dict)


_ENV_FIELDS = {
    "BLUFF_SUIT_COUNT": "suit_count",
    "BLUFF_JOKER_COUNT": "joker_count",
    "BLUFF_CHALLENGE_WINDOW": "challenge_window",
    "BLUFF_BOT_DELAY_MIN": "bot_delay_min",
    "BLUFF_BOT_DELAY_MAX": "bot_delay_max",
    "BLUFF_DIFFICULTY": "default_difficulty",
}


def rules_from_env(environ: Optional[Mapping[str, str]] = None) -> RuleConfig:
    """Build rules from BLUFF_* environment variables; pydantic coerces the strings."""
    environ = os.environ if environ is None else environ
    overrides = {
        field_name: environ[key]
        for key, field_name in _ENV_FIELDS.items()
        if environ.get(key)
    }
    return create_rules(**overrides)


def configure_logging(level: Optional[str] = None):
    """Configure root logging, defaulting to BLUFF_LOG_LEVEL or INFO."""
    level = (level or os.getenv("BLUFF_LOG_LEVEL", "info")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
