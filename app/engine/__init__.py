from app.engine.ledger import (
    RulesConfig, DEFAULT_RULES, Extras, ExtrasType, WicketInfo, WicketKind,
    BallEvent, InningsRecord, MatchSnapshot, MatchStatus,
    runs_from_ball, ball_counts, ball_faced,
)
from app.engine.scoring import compute_innings_summary, compute_batting_card, compute_bowling_figures
from app.engine.strike import get_current_batters
from app.engine.innings import should_end_innings
from app.engine.result import resolve_match_result
from app.engine.scorecard import build_scorecard

__all__ = [
    "RulesConfig",
    "DEFAULT_RULES",
    "Extras",
    "ExtrasType",
    "WicketInfo",
    "WicketKind",
    "BallEvent",
    "InningsRecord",
    "MatchSnapshot",
    "MatchStatus",
    "runs_from_ball",
    "ball_counts",
    "ball_faced",
    "compute_innings_summary",
    "compute_batting_card",
    "compute_bowling_figures",
    "get_current_batters",
    "should_end_innings",
    "resolve_match_result",
    "build_scorecard",
]
