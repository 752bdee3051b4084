"""
Match result resolution, including repeated Super Overs.
"""
from dataclasses import dataclass
from typing import Optional

from app.engine.ledger import InningsRecord, RulesConfig
from app.engine.scoring import compute_innings_summary

SUPER_OVER_OVERS = 1
SUPER_OVER_WICKETS = 2


@dataclass(frozen=True)
class SuperOverPlan:
    batting_team_id: str
    bowling_team_id: str


@dataclass(frozen=True)
class MatchResult:
    message: str
    is_tie: bool = False
    is_super_over: bool = False
    is_decided: bool = False
    winner_team_id: Optional[str] = None
    margin: Optional[int] = None
    margin_unit: Optional[str] = None  # "runs" or "wickets"
    next_super_over: Optional[SuperOverPlan] = None

    @property
    def needs_super_over(self) -> bool:
        return self.next_super_over is not None


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def deciding_pair(innings) -> tuple:
    """The two innings that decide the match: the latest Super Over pair, else the first two."""
    if len(innings) < 4 or not innings[-1].is_super_over:
        return innings[0], innings[1]
    return innings[-2], innings[-1]


def plan_super_over(first: InningsRecord) -> SuperOverPlan:
    """The side that bowled first in the tied pair bats first next."""
    return SuperOverPlan(
        batting_team_id=first.bowling_team_id,
        bowling_team_id=first.batting_team_id,
    )


def build_super_over_innings(
    plan: SuperOverPlan,
    batting_order_override=None,
    initial_bowler_id: Optional[str] = None,
    balls_per_over: Optional[int] = None,
) -> InningsRecord:
    return InningsRecord(
        batting_team_id=plan.batting_team_id,
        bowling_team_id=plan.bowling_team_id,
        max_overs=SUPER_OVER_OVERS,
        max_wickets=SUPER_OVER_WICKETS,
        balls_per_over=balls_per_over,
        batting_order_override=tuple(batting_order_override) if batting_order_override else None,
        initial_bowler_id=initial_bowler_id,
    )


def resolve_match_result(
    innings,
    rules: RulesConfig,
    batting_side_size: int = 11,
    team_names: Optional[dict] = None,
) -> MatchResult:
    """Winner, tie or "another Super Over" for the deciding innings pair."""
    if len(innings) < 2:
        return MatchResult(message="Result not available: fewer than two innings")

    names = team_names or {}
    first, second = deciding_pair(innings)
    is_super_over = second.is_super_over and len(innings) >= 4
    suffix = " (Super Over)" if is_super_over else ""

    first_runs = compute_innings_summary(first.events, rules, first.balls_per_over).total_runs
    chase = compute_innings_summary(second.events, rules, second.balls_per_over)

    if chase.total_runs > first_runs:
        # Wicket margin is always against a full side, Super Over included
        margin = (batting_side_size - 1) - chase.wickets
        winner = second.batting_team_id
        return MatchResult(
            message=f"{names.get(winner, winner)} won by {_plural(margin, 'wicket')}{suffix}",
            is_super_over=is_super_over,
            is_decided=True,
            winner_team_id=winner,
            margin=margin,
            margin_unit="wickets",
        )

    if first_runs > chase.total_runs:
        margin = first_runs - chase.total_runs
        winner = first.batting_team_id
        return MatchResult(
            message=f"{names.get(winner, winner)} won by {_plural(margin, 'run')}{suffix}",
            is_super_over=is_super_over,
            is_decided=True,
            winner_team_id=winner,
            margin=margin,
            margin_unit="runs",
        )

    return MatchResult(
        message="Super Over tied" if is_super_over else "Match tied",
        is_tie=True,
        is_super_over=is_super_over,
        next_super_over=plan_super_over(first),
    )
