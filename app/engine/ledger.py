"""
Match data model and ball classification.

Everything here is an immutable value. A ledger is the ordered tuple of
BallEvents owned by one innings. Ledgers only ever grow at the end or lose
their last delivery (undo); events are never edited or reordered.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
import enum


class ExtrasType(enum.Enum):
    WIDE = "WD"
    NO_BALL = "NB"
    BYE = "B"
    LEG_BYE = "LB"


class WicketKind(enum.Enum):
    BOWLED = "BOWLED"
    CAUGHT = "CAUGHT"
    LBW = "LBW"
    RUN_OUT = "RUN_OUT"
    STUMPED = "STUMPED"
    HIT_WICKET = "HIT_WICKET"
    RETIRED = "RETIRED"


class MatchStatus(enum.Enum):
    SETUP = "SETUP"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


ALLOWED_BALLS_PER_OVER = (4, 5, 6, 8)


@dataclass(frozen=True)
class RulesConfig:
    """Rules a match is played under. Validated before it reaches the engine."""
    overs_per_innings: int = 20
    balls_per_over: int = 6
    wide_runs: int = 1
    no_ball_runs: int = 1
    wide_counts_as_ball: bool = False
    no_ball_counts_as_ball: bool = False
    last_man_standing_rule: bool = False
    max_overs_per_bowler: Optional[int] = None  # not enforced


DEFAULT_RULES = RulesConfig()


@dataclass(frozen=True)
class Extras:
    type: Optional[ExtrasType] = None
    runs: int = 0


NO_EXTRAS = Extras()


@dataclass(frozen=True)
class WicketInfo:
    kind: WicketKind
    batter_out_id: str
    fielder_id: Optional[str] = None


@dataclass(frozen=True)
class BallEvent:
    """One delivery. over_number/ball_in_over are informational only."""
    striker_id: str
    non_striker_id: str
    bowler_id: str
    runs_off_bat: int = 0
    extras: Extras = NO_EXTRAS
    wicket: Optional[WicketInfo] = None
    notes: Optional[str] = None
    id: str = ""
    created_at: Optional[datetime] = None
    over_number: int = 0
    ball_in_over: int = 0

    @property
    def extras_type(self) -> Optional[ExtrasType]:
        return self.extras.type


@dataclass(frozen=True)
class InningsRecord:
    batting_team_id: str
    bowling_team_id: str
    events: tuple = ()

    # Super Over overrides
    max_overs: Optional[int] = None
    balls_per_over: Optional[int] = None
    max_wickets: Optional[int] = None
    batting_order_override: Optional[tuple] = None
    initial_bowler_id: Optional[str] = None

    @property
    def is_super_over(self) -> bool:
        return self.max_overs == 1

    def effective_balls_per_over(self, rules: RulesConfig) -> int:
        return self.balls_per_over or rules.balls_per_over

    def effective_max_overs(self, rules: RulesConfig) -> int:
        return self.max_overs or rules.overs_per_innings


@dataclass(frozen=True)
class MatchSnapshot:
    """The Match aggregate as handed to the engine, by value."""
    team_a_id: str
    team_b_id: str
    playing_xi_a: tuple = ()
    playing_xi_b: tuple = ()
    rules: RulesConfig = DEFAULT_RULES
    innings: tuple = ()
    status: MatchStatus = MatchStatus.SETUP
    team_names: dict = field(default_factory=dict, compare=False)

    @property
    def current_innings(self) -> Optional[InningsRecord]:
        return self.innings[-1] if self.innings else None

    def playing_xi(self, team_id: str) -> tuple:
        if team_id == self.team_a_id:
            return self.playing_xi_a
        if team_id == self.team_b_id:
            return self.playing_xi_b
        return ()

    def batting_order(self, innings: InningsRecord) -> tuple:
        if innings.batting_order_override:
            return tuple(innings.batting_order_override)
        return self.playing_xi(innings.batting_team_id)

    def bowling_order(self, innings: InningsRecord) -> tuple:
        return self.playing_xi(innings.bowling_team_id)

    def team_name(self, team_id: str) -> str:
        return self.team_names.get(team_id, team_id)


def runs_from_ball(event: BallEvent) -> int:
    """Total runs from a single delivery (bat + extras)."""
    return event.runs_off_bat + event.extras.runs


def ball_counts(event: BallEvent, rules: RulesConfig) -> bool:
    """Whether the delivery counts toward over progression."""
    if event.extras_type == ExtrasType.WIDE:
        return rules.wide_counts_as_ball
    if event.extras_type == ExtrasType.NO_BALL:
        return rules.no_ball_counts_as_ball
    return True


def ball_faced(event: BallEvent) -> bool:
    """Whether the striker is credited with facing the delivery.

    Byes and leg byes are faced; wides and no-balls are not, whatever the
    over-progression rules say.
    """
    return event.extras_type not in (ExtrasType.WIDE, ExtrasType.NO_BALL)


def next_over_and_ball(events, rules: RulesConfig, balls_per_over: Optional[int] = None) -> tuple:
    """1-based (over_number, ball_in_over) for the next delivery."""
    bpo = balls_per_over or rules.balls_per_over
    legal_balls = sum(1 for e in events if ball_counts(e, rules))
    return legal_balls // bpo + 1, legal_balls % bpo + 1

