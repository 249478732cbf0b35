from typing import Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


class RoundMatch(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    round_id: int = Field(foreign_key="tournamentround.id", index=True)
    sequence: int  # order within the round (0-based)

    team_a: List[str] = Field(sa_column=Column(JSON, nullable=False))
    team_b: List[str] = Field(sa_column=Column(JSON, nullable=False))
    score_a: Optional[int] = Field(default=None)
    score_b: Optional[int] = Field(default=None)
    winner: Optional[str] = Field(default=None)  # "A" | "B" | None (derived, stored for reporting)
    per_player_points: Optional[Dict[str, int]] = Field(default=None, sa_column=Column(JSON, nullable=True))
