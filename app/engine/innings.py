"""
Innings termination.
"""
from dataclasses import dataclass
from typing import Optional
import enum

from app.engine.ledger import RulesConfig
from app.engine.scoring import InningsSummary, compute_innings_summary


class EndReason(enum.Enum):
    OVERS_COMPLETE = "OVERS_COMPLETE"
    ALL_OUT = "ALL_OUT"


@dataclass(frozen=True)
class InningsEndCheck:
    end: bool
    reason: Optional[EndReason] = None
    summary: Optional[InningsSummary] = None


def max_wickets_for(batting_order, rules: RulesConfig, max_wickets: Optional[int] = None) -> int:
    if max_wickets is not None:
        return max_wickets
    if rules.last_man_standing_rule:
        return len(batting_order)
    return len(batting_order) - 1


def should_end_innings(
    events,
    rules: RulesConfig,
    batting_order,
    max_overs: Optional[int] = None,
    balls_per_over: Optional[int] = None,
    max_wickets: Optional[int] = None,
) -> InningsEndCheck:
    """Whether the innings is over.

    Overs are checked before wickets, so a last-ball final wicket reports
    OVERS_COMPLETE.
    """
    bpo = balls_per_over or rules.balls_per_over
    summary = compute_innings_summary(events, rules, bpo)

    overs_limit = max_overs or rules.overs_per_innings
    if summary.legal_balls >= overs_limit * bpo:
        return InningsEndCheck(end=True, reason=EndReason.OVERS_COMPLETE, summary=summary)

    if summary.wickets >= max_wickets_for(batting_order, rules, max_wickets):
        return InningsEndCheck(end=True, reason=EndReason.ALL_OUT, summary=summary)

    return InningsEndCheck(end=False, summary=summary)
