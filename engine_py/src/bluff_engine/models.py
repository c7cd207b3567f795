"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import (
    ACTION_CHALLENGE, ACTION_PASS, ACTION_PLACE, JOKER, STAGE_PLAYING,
    STAGE_WAITING, parse_card,
)


@dataclass(frozen=True)
class Card:
    id: str
    value: str  # "A".."K" or JOKER
    suit: Optional[str] = None
    is_joker: bool = False

    @classmethod
    def from_id(cls, card_id: str) -> 'Card':
        value, suit = parse_card(card_id)
        return cls(id=card_id, value=value, suit=suit, is_joker=value == JOKER)

    def matches(self, declared_value: str) -> bool:
        """Jokers satisfy any declared value."""
        return self.is_joker or self.value == declared_value


@dataclass
class Player:
    id: str
    name: str
    seat: int
    is_bot: bool = False
    is_active: bool = True
    is_blacklisted: bool = False
    is_disconnected: bool = False
    hand: List[Card] = field(default_factory=list)  # only the owner ever sees this
    hand_count: int = 0

    @property
    def can_act(self) -> bool:
        return self.is_active and not self.is_blacklisted and not self.is_disconnected


@dataclass
class Action:
    type: str  # place|challenge|pass
    player_id: str
    cards: List[Card] = field(default_factory=list)
    declared_value: Optional[str] = None  # the "bluff text"
    card_count: int = 0
    # Challenge bookkeeping, filled in by the engine on resolution
    target_player_id: Optional[str] = None
    target_seq: Optional[int] = None
    was_successful: Optional[bool] = None
    revealed: List[Card] = field(default_factory=list)
    flavor_line: Optional[str] = None
    seq: Optional[int] = None

    @classmethod
    def place(cls, player_id: str, cards: List[Card], declared_value: str,
              flavor_line: Optional[str] = None) -> 'Action':
        """Create a place action."""
        return cls(ACTION_PLACE, player_id, cards=list(cards), declared_value=declared_value,
                   card_count=len(cards), flavor_line=flavor_line)

    @classmethod
    def challenge(cls, player_id: str, target_seq: Optional[int] = None,
                  flavor_line: Optional[str] = None) -> 'Action':
        """Create a challenge against the last placement."""
        return cls(ACTION_CHALLENGE, player_id, target_seq=target_seq, flavor_line=flavor_line)

    @classmethod
    def pass_turn(cls, player_id: str, flavor_line: Optional[str] = None) -> 'Action':
        """Create a pass action."""
        return cls(ACTION_PASS, player_id, flavor_line=flavor_line)

    @property
    def is_place(self) -> bool:
        return self.type == ACTION_PLACE

    @property
    def is_challenge(self) -> bool:
        return self.type == ACTION_CHALLENGE

    @property
    def is_pass(self) -> bool:
        return self.type == ACTION_PASS


@dataclass
class GameState:
    game_id: str
    version: int = 0
    stage: str = STAGE_WAITING  # waiting|playing|finished
    players: List[Player] = field(default_factory=list)  # turn order
    current_player_id: Optional[str] = None
    pile: List[Card] = field(default_factory=list)  # pending, face down
    discard: List[Card] = field(default_factory=list)  # retired by a full round of passes
    undealt: List[Card] = field(default_factory=list)  # remainder stub, never in play
    last_action: Optional[Action] = None
    current_claim: Optional[str] = None
    challenge_window_open: bool = False
    consecutive_passes: int = 0
    winner: Optional[str] = None
    initial_hand_size: int = 0
    deck_size: int = 0
    history: List[Action] = field(default_factory=list)
    next_seq: int = 1

    def get_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def player_index(self, player_id: str) -> int:
        for i, p in enumerate(self.players):
            if p.id == player_id:
                return i
        return -1

    def active_players(self) -> List[Player]:
        return [p for p in self.players if p.can_act]

    @property
    def pending_claim(self) -> Optional[Action]:
        """The placement that may still be challenged, if any."""
        if (self.stage == STAGE_PLAYING and self.challenge_window_open
                and self.last_action is not None and self.last_action.is_place):
            return self.last_action
        return None

    def total_cards(self) -> int:
        in_hands = sum(len(p.hand) for p in self.players)
        return in_hands + len(self.pile) + len(self.discard) + len(self.undealt)
