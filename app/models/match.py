from typing import Optional
from sqlalchemy import String, Integer, Enum, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from app.database import Base
from app.engine.ledger import MatchStatus


class Match(Base):
    """
    The Match aggregate, stored as one row.

    Rules and innings (with their ball ledgers) are kept as JSON documents and
    converted to engine types through app.api.schemas on every load.
    """
    __tablename__ = "matches"

    id: Mapped[int] = mapped_column(primary_key=True)
    match_name: Mapped[str] = mapped_column(String(100))
    venue: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    match_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Teams are references only; names are kept for display
    team_a_id: Mapped[str] = mapped_column(String(64))
    team_a_name: Mapped[str] = mapped_column(String(100), default="")
    team_b_id: Mapped[str] = mapped_column(String(64))
    team_b_name: Mapped[str] = mapped_column(String(100), default="")
    playing_xi_a: Mapped[list] = mapped_column(JSON, default=list)
    playing_xi_b: Mapped[list] = mapped_column(JSON, default=list)

    # Toss
    toss_winner_team_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    toss_decision: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)  # "BAT" or "FIELD"

    rules: Mapped[dict] = mapped_column(JSON)
    innings: Mapped[list] = mapped_column(JSON, default=list)

    status: Mapped[MatchStatus] = mapped_column(Enum(MatchStatus), default=MatchStatus.SETUP)
    result_summary: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Optimistic concurrency: a stale write raises StaleDataError
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<Match {self.team_a_name or self.team_a_id} vs {self.team_b_name or self.team_b_id}>"
