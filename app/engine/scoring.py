"""
Innings summary, batting card and bowling figures.

All three are full reductions of a ledger; nothing is carried between calls.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from app.engine.ledger import (
    RulesConfig, WicketKind,
    runs_from_ball, ball_counts, ball_faced,
)


def round_half_up(value: float, places: int = 2) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _per_over(runs: int, balls: int, balls_per_over: int) -> float:
    if balls <= 0:
        return 0.0
    return round_half_up(runs / (balls / balls_per_over))


@dataclass(frozen=True)
class InningsSummary:
    total_runs: int = 0
    wickets: int = 0
    overs: int = 0
    balls: int = 0  # balls into the current over
    legal_balls: int = 0
    run_rate: float = 0.0
    extras_breakdown: dict = field(default_factory=dict)

    @property
    def extras_total(self) -> int:
        return sum(self.extras_breakdown.values())

    @property
    def score_display(self) -> str:
        return f"{self.total_runs}/{self.wickets}"


@dataclass(frozen=True)
class BattingEntry:
    player_id: str
    runs: int = 0
    balls: int = 0
    fours: int = 0
    sixes: int = 0
    strike_rate: float = 0.0
    is_out: bool = False
    dismissal: Optional[str] = None


@dataclass(frozen=True)
class BowlingEntry:
    player_id: str
    overs: int = 0
    balls: int = 0
    runs_conceded: int = 0
    wickets: int = 0
    economy: float = 0.0

    @property
    def overs_display(self) -> str:
        return f"{self.overs}.{self.balls}"


@dataclass(frozen=True)
class ChaseState:
    target: int
    runs_needed: int
    balls_left: int
    required_rate: float


def compute_innings_summary(
    events,
    rules: RulesConfig,
    balls_per_over: Optional[int] = None,
) -> InningsSummary:
    bpo = balls_per_over or rules.balls_per_over
    total_runs = 0
    wickets = 0
    legal_balls = 0
    extras_breakdown = {}

    for event in events:
        total_runs += runs_from_ball(event)
        if event.wicket:
            wickets += 1
        if event.extras_type:
            key = event.extras_type.value
            extras_breakdown[key] = extras_breakdown.get(key, 0) + event.extras.runs
        if ball_counts(event, rules):
            legal_balls += 1

    return InningsSummary(
        total_runs=total_runs,
        wickets=wickets,
        overs=legal_balls // bpo,
        balls=legal_balls % bpo,
        legal_balls=legal_balls,
        run_rate=_per_over(total_runs, legal_balls, bpo),
        extras_breakdown=extras_breakdown,
    )


def format_overs(summary: InningsSummary, balls_per_over: int) -> str:
    """Overs as "O.B", or just "O" on a completed over."""
    overs, balls = divmod(summary.legal_balls, balls_per_over)
    return f"{overs}.{balls}" if balls else f"{overs}"


def compute_chase(
    target: int,
    summary: InningsSummary,
    overs_limit: int,
    balls_per_over: int,
) -> ChaseState:
    balls_left = max(0, overs_limit * balls_per_over - summary.legal_balls)
    runs_needed = max(0, target - summary.total_runs)
    return ChaseState(
        target=target,
        runs_needed=runs_needed,
        balls_left=balls_left,
        required_rate=_per_over(runs_needed, balls_left, balls_per_over),
    )


DISMISSAL_TEXT = {
    WicketKind.BOWLED: ("b", "b"),
    WicketKind.CAUGHT: ("c ? b", "c ? b"),
    WicketKind.LBW: ("lbw b", "lbw b"),
    WicketKind.RUN_OUT: ("run out", "run out (?)"),
    WicketKind.STUMPED: ("st b", "st ? b"),
    WicketKind.HIT_WICKET: ("hit wicket b", "hit wicket b"),
    WicketKind.RETIRED: ("retired", "retired"),
}


def format_dismissal(kind: WicketKind, fielder_id: Optional[str] = None) -> str:
    """Dismissal shorthand; "?" marks where the display layer puts the fielder."""
    without_fielder, with_fielder = DISMISSAL_TEXT[kind]
    return with_fielder if fielder_id else without_fielder


def compute_batting_card(events, batting_order) -> list[BattingEntry]:
    card = {
        player_id: {"runs": 0, "balls": 0, "fours": 0, "sixes": 0, "is_out": False, "dismissal": None}
        for player_id in batting_order
    }

    for event in events:
        batter = card.get(event.striker_id)
        if batter is not None:
            batter["runs"] += event.runs_off_bat
            if ball_faced(event):
                batter["balls"] += 1
            if event.runs_off_bat == 4:
                batter["fours"] += 1
            elif event.runs_off_bat == 6:
                batter["sixes"] += 1

        if event.wicket:
            out = card.get(event.wicket.batter_out_id)
            if out is not None:
                out["is_out"] = True
                out["dismissal"] = format_dismissal(event.wicket.kind, event.wicket.fielder_id)

    entries = []
    for player_id in batting_order:
        stats = card[player_id]
        strike_rate = stats["runs"] / stats["balls"] * 100 if stats["balls"] else 0.0
        entries.append(BattingEntry(
            player_id=player_id,
            strike_rate=round_half_up(strike_rate),
            **stats,
        ))
    return entries


def compute_bowling_figures(
    events,
    rules: RulesConfig,
    bowling_order,
    balls_per_over: Optional[int] = None,
) -> list[BowlingEntry]:
    """Per-bowler figures in bowling_order.

    Runs conceded include byes and leg byes: every run off a delivery is
    charged to its bowler.
    """
    bpo = balls_per_over or rules.balls_per_over
    spells = {player_id: {"balls": 0, "runs": 0, "wickets": 0} for player_id in bowling_order}

    for event in events:
        spell = spells.get(event.bowler_id)
        if spell is None:
            continue
        spell["runs"] += runs_from_ball(event)
        if event.wicket:
            spell["wickets"] += 1
        if ball_counts(event, rules):
            spell["balls"] += 1

    return [
        BowlingEntry(
            player_id=player_id,
            overs=spells[player_id]["balls"] // bpo,
            balls=spells[player_id]["balls"] % bpo,
            runs_conceded=spells[player_id]["runs"],
            wickets=spells[player_id]["wickets"],
            economy=_per_over(spells[player_id]["runs"], spells[player_id]["balls"], bpo),
        )
        for player_id in bowling_order
    ]


def legal_balls_bowled(entry: BowlingEntry, balls_per_over: int) -> int:
    return entry.overs * balls_per_over + entry.balls

