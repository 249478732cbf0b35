from mexicano.models.round_match import RoundMatch
from mexicano.models.tournament import Tournament
from mexicano.models.tournament_player import TournamentPlayer
from mexicano.models.tournament_round import TournamentRound

__all__ = [
    "Tournament",
    "TournamentPlayer",
    "TournamentRound",
    "RoundMatch",
]
