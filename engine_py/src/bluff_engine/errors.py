# engine_py/src/bluff_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Specific error codes
INVALID_TURN = "INVALID_TURN"
ILLEGAL_CARDS = "ILLEGAL_CARDS"
NO_PENDING_CLAIM = "NO_PENDING_CLAIM"
UNKNOWN_PLAYER = "UNKNOWN_PLAYER"
GAME_NOT_READY = "GAME_NOT_READY"
INVALID_EVENT = "INVALID_EVENT"


class InvalidTurn(GameError):
    """Action requires turn ownership the actor does not have."""
    def __init__(self, message: str = "Not your turn"):
        super().__init__(INVALID_TURN, message)


class IllegalCards(GameError):
    """Place references cards outside the actor's hand, or nothing at all."""
    def __init__(self, message: str = "Illegal card selection"):
        super().__init__(ILLEGAL_CARDS, message)


class NoPendingClaim(GameError):
    """Challenge without an unresolved placement to contest."""
    def __init__(self, message: str = "No pending claim to challenge"):
        super().__init__(NO_PENDING_CLAIM, message)


class UnknownPlayer(GameError):
    def __init__(self, player_id: str):
        super().__init__(UNKNOWN_PLAYER, f"Unknown player: {player_id}")
        self.player_id = player_id


class GameNotReady(GameError):
    """Setup call made in the wrong stage or with a bad player count."""
    def __init__(self, message: str):
        super().__init__(GAME_NOT_READY, message)
