"""
Computer players for the Bluff game.
"""

from .agent import BotAgent, create_bots
from .memory import MemorySystem
from .orchestrator import BotOrchestrator
from .personalities import Personality, get_personality, personality_for_difficulty

__all__ = [
    "BotAgent",
    "BotOrchestrator",
    "MemorySystem",
    "Personality",
    "create_bots",
    "get_personality",
    "personality_for_difficulty",
]
