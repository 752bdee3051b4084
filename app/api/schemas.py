"""
Pydantic schemas for API request/response models.

Stored match documents and request bodies are validated here and converted
into the engine's frozen types; the engine never sees raw dictionaries.
"""
from pydantic import BaseModel, Field, AfterValidator
from typing import Optional, Literal, Annotated
from datetime import datetime

from app.engine.ledger import (
    ALLOWED_BALLS_PER_OVER, RulesConfig, Extras, ExtrasType, WicketInfo, WicketKind,
    BallEvent, InningsRecord, MatchSnapshot, MatchStatus,
)
from app.engine.innings import EndReason
from app.engine.strike import CreaseStatus


def _check_balls_per_over(value: int) -> int:
    if value not in ALLOWED_BALLS_PER_OVER:
        raise ValueError(f"balls_per_over must be one of {ALLOWED_BALLS_PER_OVER}, got {value}")
    return value


BallsPerOver = Annotated[int, AfterValidator(_check_balls_per_over)]


# Rules
class RulesConfigSchema(BaseModel):
    overs_per_innings: int = Field(20, ge=1)
    balls_per_over: BallsPerOver = 6
    wide_runs: int = Field(1, ge=0)
    no_ball_runs: int = Field(1, ge=0)
    wide_counts_as_ball: bool = False
    no_ball_counts_as_ball: bool = False
    last_man_standing_rule: bool = False
    max_overs_per_bowler: Optional[int] = Field(None, ge=1)

    def to_domain(self) -> RulesConfig:
        return RulesConfig(**self.model_dump())


# Ball events
class ExtrasSchema(BaseModel):
    type: Optional[ExtrasType] = None
    runs: Optional[int] = Field(None, ge=0)  # wides/no-balls default to the rules value

    def to_domain(self, rules: Optional[RulesConfig] = None) -> Extras:
        runs = self.runs
        if runs is None:
            runs = 0
            if rules is not None and self.type == ExtrasType.WIDE:
                runs = rules.wide_runs
            elif rules is not None and self.type == ExtrasType.NO_BALL:
                runs = rules.no_ball_runs
        return Extras(type=self.type, runs=runs)


class WicketSchema(BaseModel):
    kind: WicketKind
    batter_out_id: str
    fielder_id: Optional[str] = None

    def to_domain(self) -> WicketInfo:
        return WicketInfo(
            kind=self.kind,
            batter_out_id=self.batter_out_id,
            fielder_id=self.fielder_id,
        )


class BallEventInput(BaseModel):
    """What a scorer sends; position and identity are filled in by the server."""
    striker_id: str
    non_striker_id: str
    bowler_id: str
    runs_off_bat: int = Field(0, ge=0, le=6)
    extras: ExtrasSchema = Field(default_factory=ExtrasSchema)
    wicket: Optional[WicketSchema] = None
    notes: Optional[str] = None


class BallEventSchema(BallEventInput):
    id: str = ""
    created_at: Optional[datetime] = None
    over_number: int = 0
    ball_in_over: int = 0

    def to_domain(self, rules: Optional[RulesConfig] = None) -> BallEvent:
        return BallEvent(
            striker_id=self.striker_id,
            non_striker_id=self.non_striker_id,
            bowler_id=self.bowler_id,
            runs_off_bat=self.runs_off_bat,
            extras=self.extras.to_domain(rules),
            wicket=self.wicket.to_domain() if self.wicket else None,
            notes=self.notes,
            id=self.id,
            created_at=self.created_at,
            over_number=self.over_number,
            ball_in_over=self.ball_in_over,
        )


# Innings and matches
class InningsSchema(BaseModel):
    batting_team_id: str
    bowling_team_id: str
    events: list[BallEventSchema] = []
    max_overs: Optional[int] = Field(None, ge=1)
    balls_per_over: Optional[BallsPerOver] = None
    max_wickets: Optional[int] = Field(None, ge=1)
    batting_order_override: Optional[list[str]] = None
    initial_bowler_id: Optional[str] = None

    def to_domain(self, rules: RulesConfig) -> InningsRecord:
        return InningsRecord(
            batting_team_id=self.batting_team_id,
            bowling_team_id=self.bowling_team_id,
            events=tuple(e.to_domain(rules) for e in self.events),
            max_overs=self.max_overs,
            balls_per_over=self.balls_per_over,
            max_wickets=self.max_wickets,
            batting_order_override=tuple(self.batting_order_override) if self.batting_order_override else None,
            initial_bowler_id=self.initial_bowler_id,
        )


class MatchCreate(BaseModel):
    match_name: str = Field(min_length=1)
    venue: Optional[str] = None
    match_date: Optional[datetime] = None
    team_a_id: str
    team_a_name: str = ""
    team_b_id: str
    team_b_name: str = ""
    playing_xi_a: list[str] = Field(default_factory=list, max_length=11)
    playing_xi_b: list[str] = Field(default_factory=list, max_length=11)
    rules: RulesConfigSchema = Field(default_factory=RulesConfigSchema)


class MatchDocument(MatchCreate):
    """A whole stored match, as loaded from the database or a JSON file"""
    toss_winner_team_id: Optional[str] = None
    toss_decision: Optional[Literal["BAT", "FIELD"]] = None
    status: MatchStatus = MatchStatus.SETUP
    innings: list[InningsSchema] = []

    def to_snapshot(self) -> MatchSnapshot:
        rules = self.rules.to_domain()
        return MatchSnapshot(
            team_a_id=self.team_a_id,
            team_b_id=self.team_b_id,
            playing_xi_a=tuple(self.playing_xi_a),
            playing_xi_b=tuple(self.playing_xi_b),
            rules=rules,
            innings=tuple(i.to_domain(rules) for i in self.innings),
            status=self.status,
            team_names={
                self.team_a_id: self.team_a_name or self.team_a_id,
                self.team_b_id: self.team_b_name or self.team_b_id,
            },
        )


class StartMatchRequest(BaseModel):
    toss_winner_team_id: str
    toss_decision: Literal["BAT", "FIELD"]


class NextInningsRequest(BaseModel):
    """Only used when the next innings is a Super Over"""
    batting_order_override: Optional[list[str]] = Field(None, min_length=2)
    initial_bowler_id: Optional[str] = None
    balls_per_over: Optional[BallsPerOver] = None


class MatchResponse(BaseModel):
    id: int
    match_name: str
    venue: Optional[str] = None
    match_date: datetime
    team_a_id: str
    team_a_name: str
    team_b_id: str
    team_b_name: str
    playing_xi_a: list[str]
    playing_xi_b: list[str]
    toss_winner_team_id: Optional[str] = None
    toss_decision: Optional[str] = None
    rules: RulesConfigSchema
    innings: list[InningsSchema]
    status: MatchStatus
    result_summary: Optional[str] = None
    version: int

    class Config:
        from_attributes = True


# Scorecard Schemas
class InningsSummaryResponse(BaseModel):
    total_runs: int
    wickets: int
    overs: int
    balls: int
    legal_balls: int
    run_rate: float
    extras_breakdown: dict[str, int]
    extras_total: int

    class Config:
        from_attributes = True


class BattingEntryResponse(BaseModel):
    player_id: str
    runs: int
    balls: int
    fours: int
    sixes: int
    strike_rate: float
    is_out: bool
    dismissal: Optional[str] = None

    class Config:
        from_attributes = True


class BowlingEntryResponse(BaseModel):
    player_id: str
    overs: int
    balls: int
    overs_display: str
    runs_conceded: int
    wickets: int
    economy: float

    class Config:
        from_attributes = True


class ChaseResponse(BaseModel):
    target: int
    runs_needed: int
    balls_left: int
    required_rate: float

    class Config:
        from_attributes = True


class EndCheckResponse(BaseModel):
    end: bool
    reason: Optional[EndReason] = None

    class Config:
        from_attributes = True


class CurrentBattersResponse(BaseModel):
    striker_id: Optional[str] = None
    non_striker_id: Optional[str] = None
    status: CreaseStatus
    problems: list[str] = []

    class Config:
        from_attributes = True


class InningsCardResponse(BaseModel):
    number: int
    batting_team_id: str
    bowling_team_id: str
    is_super_over: bool
    summary: InningsSummaryResponse
    overs_display: str
    batting: list[BattingEntryResponse]
    bowling: list[BowlingEntryResponse]
    end_check: EndCheckResponse
    chase: Optional[ChaseResponse] = None

    class Config:
        from_attributes = True


class SuperOverPlanResponse(BaseModel):
    batting_team_id: str
    bowling_team_id: str

    class Config:
        from_attributes = True


class MatchResultResponse(BaseModel):
    message: str
    is_tie: bool
    is_super_over: bool
    is_decided: bool
    winner_team_id: Optional[str] = None
    margin: Optional[int] = None
    margin_unit: Optional[str] = None
    next_super_over: Optional[SuperOverPlanResponse] = None

    class Config:
        from_attributes = True


class ScorecardResponse(BaseModel):
    match_id: Optional[int] = None
    status: MatchStatus
    innings: list[InningsCardResponse]
    current_batters: Optional[CurrentBattersResponse] = None
    result: Optional[MatchResultResponse] = None


class BallResultResponse(BaseModel):
    event: BallEventSchema
    scorecard: ScorecardResponse


# Career stats
class BattingStatsResponse(BaseModel):
    runs: int
    balls: int
    innings: int
    dismissals: int
    average: Optional[float] = None
    strike_rate: Optional[float] = None
    fours: int
    sixes: int
    fifties: int
    hundreds: int
    runs_per_innings: list[int]

    class Config:
        from_attributes = True


class BowlingStatsResponse(BaseModel):
    wickets: int
    runs_conceded: int
    balls: int
    economy: Optional[float] = None
    average: Optional[float] = None

    class Config:
        from_attributes = True


class PlayerStatsResponse(BaseModel):
    player_id: str
    matches_played: int
    batting: BattingStatsResponse
    bowling: BowlingStatsResponse

    class Config:
        from_attributes = True


class TeamStatsResponse(BaseModel):
    team_id: str
    match_count: int
    win_count: int
