"""
Engine and session wiring.

The URL and echo flag come from config (DATABASE_URL, SQL_ECHO). SQLite
files get their parent directory created; an in-memory SQLite database is
pinned to a single shared connection so every session sees the same tables.
"""
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from mexicano import config


def create_db_engine(url: str, echo: bool = False) -> Engine:
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if ":memory:" in url:
        kwargs["poolclass"] = StaticPool
    else:
        Path(url.replace("sqlite:///", "", 1)).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, echo=echo, **kwargs)


engine: Engine = create_db_engine(config.database_url(), echo=config.sql_echo())


def get_session() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


def init_db(bind: Optional[Engine] = None) -> None:
    """Create the tournament tables on `bind` (the app engine by default)."""
    from mexicano.models.round_match import RoundMatch  # noqa: F401
    from mexicano.models.tournament import Tournament  # noqa: F401
    from mexicano.models.tournament_player import TournamentPlayer  # noqa: F401
    from mexicano.models.tournament_round import TournamentRound  # noqa: F401

    SQLModel.metadata.create_all(bind if bind is not None else engine)
