from typing import List, Optional

from sqlalchemy import JSON, UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, SQLModel


class TournamentRound(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "number", name="uq_tournament_round_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    number: int  # 1-based
    ranking_snapshot: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    byes: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    submitted: bool = Field(default=False)
