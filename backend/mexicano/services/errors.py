"""
Tournament error taxonomy.

Every failure the engine reports is a TournamentError with a stable `code`
and the HTTP status the routes map it to. None of them are fatal: they are
raised before any state is changed, so the caller can fix the input and retry.
"""
from typing import Optional


class TournamentError(Exception):
    """Base class for all engine and persistence failures"""

    code = "TOURNAMENT_ERROR"
    status_code = 422

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


# ---------------------------------------------------------------------------
# Roster / start preconditions
# ---------------------------------------------------------------------------


class InsufficientPlayersError(TournamentError):
    code = "INSUFFICIENT_PLAYERS"


class OddPlayerCountError(TournamentError):
    code = "ODD_PLAYER_COUNT"


class InvalidPlayerNameError(TournamentError):
    code = "INVALID_PLAYER_NAME"


class DuplicatePlayerError(TournamentError):
    code = "DUPLICATE_PLAYER"


class UnknownPlayerError(TournamentError):
    code = "UNKNOWN_PLAYER"
    status_code = 404


class TournamentAlreadyStartedError(TournamentError):
    code = "TOURNAMENT_ALREADY_STARTED"


class TournamentNotStartedError(TournamentError):
    code = "TOURNAMENT_NOT_STARTED"


# ---------------------------------------------------------------------------
# Match validation (reported per match)
# ---------------------------------------------------------------------------


class MatchValidationError(TournamentError):
    code = "MATCH_INVALID"

    def __init__(self, message: str, match_index: Optional[int] = None):
        super().__init__(message)
        self.match_index = match_index


class MissingScoreError(MatchValidationError):
    code = "MISSING_SCORE"


class ScoreOutOfRangeError(MatchValidationError):
    code = "SCORE_OUT_OF_RANGE"


class NoWinnerError(MatchValidationError):
    code = "NO_WINNER"


class DoubleWinnerError(MatchValidationError):
    code = "DOUBLE_WINNER"


# ---------------------------------------------------------------------------
# Round lifecycle
# ---------------------------------------------------------------------------


class IncompleteRoundError(TournamentError):
    code = "INCOMPLETE_ROUND"


class RoundLockedError(TournamentError):
    code = "ROUND_LOCKED"


class RoundNotSubmittedError(TournamentError):
    code = "ROUND_NOT_SUBMITTED"


class RoundNotFoundError(TournamentError):
    code = "ROUND_NOT_FOUND"
    status_code = 404


class MatchNotFoundError(TournamentError):
    code = "MATCH_NOT_FOUND"
    status_code = 404


# ---------------------------------------------------------------------------
# Persistence collaborator
# ---------------------------------------------------------------------------


class TournamentNotFoundError(TournamentError):
    code = "TOURNAMENT_NOT_FOUND"
    status_code = 404


class PersistenceFailureError(TournamentError):
    """
    Raised when the durable write fails.

    Carries the computed state so the caller can retry the save
    without recomputing (the in-memory result is never rolled back).
    """

    code = "PERSISTENCE_FAILURE"
    status_code = 503

    def __init__(self, message: str, state=None):
        super().__init__(message)
        self.state = state


class ConcurrentModificationError(PersistenceFailureError):
    code = "CONCURRENT_MODIFICATION"
    status_code = 409
