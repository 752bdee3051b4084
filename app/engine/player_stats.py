"""
Career aggregates across matches.

Built on the same batting card and bowling figures used for a single
scorecard, so a player's totals always agree with the match scorecards.
"""
from dataclasses import dataclass, field
from typing import Optional

from app.engine.ledger import MatchSnapshot
from app.engine.result import resolve_match_result
from app.engine.scoring import (
    compute_batting_card, compute_bowling_figures, legal_balls_bowled, round_half_up,
)


@dataclass
class BattingRecord:
    runs: int = 0
    balls: int = 0
    innings: int = 0
    dismissals: int = 0
    fours: int = 0
    sixes: int = 0
    runs_per_innings: list = field(default_factory=list)

    @property
    def average(self) -> Optional[float]:
        if self.dismissals == 0:
            return None
        return round_half_up(self.runs / self.dismissals)

    @property
    def strike_rate(self) -> Optional[float]:
        if self.balls == 0:
            return None
        return round_half_up(self.runs / self.balls * 100)

    @property
    def fifties(self) -> int:
        return sum(1 for r in self.runs_per_innings if 50 <= r < 100)

    @property
    def hundreds(self) -> int:
        return sum(1 for r in self.runs_per_innings if r >= 100)


@dataclass
class BowlingRecord:
    wickets: int = 0
    runs_conceded: int = 0
    balls: int = 0
    overs_bowled: float = 0.0  # fractional, each innings at its own over length

    @property
    def economy(self) -> Optional[float]:
        if self.overs_bowled <= 0:
            return None
        return round_half_up(self.runs_conceded / self.overs_bowled)

    @property
    def average(self) -> Optional[float]:
        if self.wickets == 0:
            return None
        return round_half_up(self.runs_conceded / self.wickets)


@dataclass
class PlayerStats:
    player_id: str
    matches_played: int = 0
    batting: BattingRecord = field(default_factory=BattingRecord)
    bowling: BowlingRecord = field(default_factory=BowlingRecord)


def compute_player_stats(player_id: str, matches) -> PlayerStats:
    stats = PlayerStats(player_id=player_id)

    for match in matches:
        if player_id not in match.playing_xi_a and player_id not in match.playing_xi_b:
            continue
        stats.matches_played += 1
        _add_match(stats, match)

    return stats


def _add_match(stats: PlayerStats, match: MatchSnapshot):
    rules = match.rules
    for innings in match.innings:
        batting_order = match.batting_order(innings)
        if stats.player_id in batting_order:
            entry = next(
                e for e in compute_batting_card(innings.events, batting_order)
                if e.player_id == stats.player_id
            )
            if entry.balls > 0:
                stats.batting.innings += 1
                stats.batting.runs_per_innings.append(entry.runs)
            stats.batting.runs += entry.runs
            stats.batting.balls += entry.balls
            stats.batting.fours += entry.fours
            stats.batting.sixes += entry.sixes
            if entry.is_out:
                stats.batting.dismissals += 1

        bowling_order = match.bowling_order(innings)
        if stats.player_id in bowling_order:
            bpo = innings.effective_balls_per_over(rules)
            figures = compute_bowling_figures(innings.events, rules, [stats.player_id], bpo)[0]
            balls = legal_balls_bowled(figures, bpo)
            stats.bowling.wickets += figures.wickets
            stats.bowling.runs_conceded += figures.runs_conceded
            stats.bowling.balls += balls
            stats.bowling.overs_bowled += balls / bpo


def count_team_wins(team_id: str, matches, batting_side_size: int = 11) -> dict:
    """Matches involving team_id and how many it won."""
    played = [m for m in matches if team_id in (m.team_a_id, m.team_b_id)]
    wins = sum(
        1 for m in played
        if resolve_match_result(m.innings, m.rules, batting_side_size).winner_team_id == team_id
    )
    return {"match_count": len(played), "win_count": wins}
