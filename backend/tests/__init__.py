# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from mexicano.models.round_match import RoundMatch  # noqa: F401
from mexicano.models.tournament import Tournament  # noqa: F401
from mexicano.models.tournament_player import TournamentPlayer  # noqa: F401
from mexicano.models.tournament_round import TournamentRound  # noqa: F401
