"""
Full match view composed from the engine pieces in one place.
"""
from dataclasses import dataclass
from typing import Optional

from app.engine.innings import InningsEndCheck, should_end_innings
from app.engine.ledger import InningsRecord, MatchSnapshot
from app.engine.result import MatchResult, resolve_match_result
from app.engine.scoring import (
    InningsSummary, ChaseState,
    compute_innings_summary, compute_batting_card, compute_bowling_figures,
    compute_chase, format_overs,
)
from app.engine.strike import CurrentBatters, get_current_batters


@dataclass(frozen=True)
class InningsCard:
    number: int
    batting_team_id: str
    bowling_team_id: str
    is_super_over: bool
    summary: InningsSummary
    overs_display: str
    batting: list
    bowling: list
    end_check: InningsEndCheck
    chase: Optional[ChaseState] = None


@dataclass(frozen=True)
class Scorecard:
    innings: list
    current_batters: Optional[CurrentBatters]
    result: Optional[MatchResult]

    @property
    def current(self) -> Optional[InningsCard]:
        return self.innings[-1] if self.innings else None


def build_innings_card(match: MatchSnapshot, index: int) -> InningsCard:
    innings: InningsRecord = match.innings[index]
    rules = match.rules
    bpo = innings.effective_balls_per_over(rules)
    batting_order = match.batting_order(innings)
    summary = compute_innings_summary(innings.events, rules, bpo)

    chase = None
    if index % 2 == 1:
        previous = match.innings[index - 1]
        target = compute_innings_summary(previous.events, rules, previous.balls_per_over).total_runs + 1
        chase = compute_chase(target, summary, innings.effective_max_overs(rules), bpo)

    return InningsCard(
        number=index + 1,
        batting_team_id=innings.batting_team_id,
        bowling_team_id=innings.bowling_team_id,
        is_super_over=innings.is_super_over,
        summary=summary,
        overs_display=format_overs(summary, bpo),
        batting=compute_batting_card(innings.events, batting_order),
        bowling=compute_bowling_figures(innings.events, rules, match.bowling_order(innings), bpo),
        end_check=should_end_innings(
            innings.events, rules, batting_order,
            max_overs=innings.max_overs,
            balls_per_over=bpo,
            max_wickets=innings.max_wickets,
        ),
        chase=chase,
    )


def build_scorecard(match: MatchSnapshot, batting_side_size: int = 11) -> Scorecard:
    cards = [build_innings_card(match, i) for i in range(len(match.innings))]

    current_batters = None
    live = match.current_innings
    if live is not None:
        current_batters = get_current_batters(
            live.events, match.batting_order(live), match.rules,
            live.effective_balls_per_over(match.rules),
        )

    result = None
    if len(match.innings) >= 2:
        result = resolve_match_result(match.innings, match.rules, batting_side_size, match.team_names)

    return Scorecard(innings=cards, current_batters=current_batters, result=result)
