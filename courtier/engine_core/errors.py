"""
Engine errors.

Two families:
- IllegalAction: the request breaks a rule. Raised before any mutation,
  always recoverable, surfaced verbatim to the caller.
- ConsistencyError: a row the engine expects is missing. Fatal for the
  current request only.

Every error carries a stable UPPER_SNAKE_CASE code for the API layer.
"""


class CourtierError(Exception):
    """Base class for engine errors."""
    code = "COURTIER_ERROR"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    default_message = "Engine error"


class IllegalAction(CourtierError):
    """A request was rejected by the rules."""
    code = "ILLEGAL_ACTION"
    default_message = "Illegal action"


class NotYourTurn(IllegalAction):
    code = "NOT_YOUR_TURN"
    default_message = "Not your turn"


class MustDrawFirst(IllegalAction):
    code = "MUST_DRAW_FIRST"
    default_message = "You must draw a card before playing"


class CountessForced(IllegalAction):
    code = "COUNTESS_FORCED"
    default_message = "You must play the Countess while holding the King or a Prince"


class CardNotInHand(IllegalAction):
    code = "CARD_NOT_IN_HAND"
    default_message = "Card not in hand"


class InvalidGuess(IllegalAction):
    code = "INVALID_GUESS"
    default_message = "A Guard must name a card to guess"


class InvalidTarget(IllegalAction):
    code = "INVALID_TARGET"
    default_message = "Invalid target"


class DeckEmpty(IllegalAction):
    code = "DECK_EMPTY"
    default_message = "The deck is empty"


class AlreadyDrawn(IllegalAction):
    code = "ALREADY_DRAWN"
    default_message = "You have already drawn this turn"


class NotHost(IllegalAction):
    code = "NOT_HOST"
    default_message = "Only the host can do that"


class NoPreviousWinner(IllegalAction):
    code = "NO_PREVIOUS_WINNER"
    default_message = "The previous round has no winner yet"


class InvalidPlayerCount(IllegalAction):
    code = "INVALID_PLAYER_COUNT"
    default_message = "A game needs between 2 and 4 players"


class GameFull(IllegalAction):
    code = "GAME_FULL"
    default_message = "Game is full"


class GameAlreadyStarted(IllegalAction):
    code = "GAME_ALREADY_STARTED"
    default_message = "Game not found or already started"


class GameNotStarted(IllegalAction):
    code = "GAME_NOT_STARTED"
    default_message = "Game has not started"


class GameOver(IllegalAction):
    code = "GAME_OVER"
    default_message = "Game is over - no actions allowed"


class RoundOver(IllegalAction):
    code = "ROUND_OVER"
    default_message = "The round is over; waiting for the host to start the next round"


class RoundInProgress(IllegalAction):
    code = "ROUND_IN_PROGRESS"
    default_message = "The current round has not finished"


class PlayerNotInGame(IllegalAction):
    code = "PLAYER_NOT_IN_GAME"
    default_message = "Player is not seated in this game"


class GameNotFound(IllegalAction):
    code = "GAME_NOT_FOUND"
    default_message = "Game not found"


class ConsistencyError(CourtierError):
    """A store row the engine relies on is missing or malformed."""
    code = "CONSISTENCY_ERROR"
    default_message = "Game data is inconsistent"
