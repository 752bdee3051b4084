"""
Match service - loads the Match aggregate, hands it to the engine, saves it back.

Every write is a read-modify-write of one row, so writes for the same match
are serialized: a per-match lock inside the process, and the row's version
column across processes.
"""
import logging
import threading
import weakref
from datetime import datetime
from uuid import uuid4

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from app.config import settings
from app.engine.innings import should_end_innings
from app.engine.ledger import MatchStatus, next_over_and_ball
from app.engine.player_stats import compute_player_stats, count_team_wins
from app.engine.result import MatchResult, resolve_match_result, build_super_over_innings, SuperOverPlan
from app.engine.scorecard import build_scorecard
from app.models.match import Match
from app.validators.playing_xi_validator import PlayingXIValidator
from app.api.schemas import (
    MatchCreate, MatchDocument, StartMatchRequest, NextInningsRequest,
    BallEventInput, BallEventSchema, ExtrasSchema, InningsSchema,
    ScorecardResponse, InningsCardResponse, CurrentBattersResponse, MatchResultResponse,
    PlayerStatsResponse, TeamStatsResponse,
)

logger = logging.getLogger(__name__)


class ScorebookError(Exception):
    pass


class MatchNotFound(ScorebookError):
    pass


class MatchStateError(ScorebookError):
    pass


class ConcurrentUpdateError(MatchStateError):
    pass


# Entries go away once no request holds the lock
_locks = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def match_lock(match_id: int) -> threading.Lock:
    with _locks_guard:
        return _locks.setdefault(match_id, threading.Lock())


def to_document(match: Match) -> MatchDocument:
    return MatchDocument.model_validate(match, from_attributes=True)


class MatchService:
    def __init__(self, db: Session):
        self.db = db

    # Reads

    def get_match(self, match_id: int) -> Match:
        match = self.db.get(Match, match_id)
        if not match:
            raise MatchNotFound(f"Match {match_id} not found")
        return match

    def scorecard(self, match: Match) -> ScorecardResponse:
        snapshot = to_document(match).to_snapshot()
        card = build_scorecard(snapshot, settings.BATTING_SIDE_SIZE)
        return ScorecardResponse(
            match_id=match.id,
            status=snapshot.status,
            innings=[InningsCardResponse.model_validate(c) for c in card.innings],
            current_batters=(
                CurrentBattersResponse.model_validate(card.current_batters)
                if card.current_batters else None
            ),
            result=MatchResultResponse.model_validate(card.result) if card.result else None,
        )

    def result(self, match: Match) -> MatchResult:
        snapshot = to_document(match).to_snapshot()
        return resolve_match_result(
            snapshot.innings, snapshot.rules, settings.BATTING_SIDE_SIZE, snapshot.team_names,
        )

    def _scored_matches(self) -> list:
        rows = self.db.query(Match).filter(
            Match.status.in_([MatchStatus.IN_PROGRESS, MatchStatus.COMPLETED])
        ).all()
        return [to_document(m).to_snapshot() for m in rows]

    def player_stats(self, player_id: str) -> PlayerStatsResponse:
        stats = compute_player_stats(player_id, self._scored_matches())
        return PlayerStatsResponse.model_validate(stats)

    def team_stats(self, team_id: str) -> TeamStatsResponse:
        counts = count_team_wins(team_id, self._scored_matches(), settings.BATTING_SIDE_SIZE)
        return TeamStatsResponse(team_id=team_id, **counts)

    # Writes

    def create_match(self, data: MatchCreate) -> Match:
        check = PlayingXIValidator.validate(data.team_a_id, data.team_b_id, data.playing_xi_a, data.playing_xi_b)
        if not check["valid"]:
            raise MatchStateError("; ".join(check["errors"]))

        match = Match(
            match_name=data.match_name,
            venue=data.venue,
            match_date=data.match_date or datetime.utcnow(),
            team_a_id=data.team_a_id,
            team_a_name=data.team_a_name,
            team_b_id=data.team_b_id,
            team_b_name=data.team_b_name,
            playing_xi_a=list(data.playing_xi_a),
            playing_xi_b=list(data.playing_xi_b),
            rules=data.rules.model_dump(mode="json"),
            innings=[],
            status=MatchStatus.SETUP,
        )
        self.db.add(match)
        self.db.commit()
        self.db.refresh(match)
        logger.info("Created match %s: %s", match.id, match.match_name)
        return match

    def start_match(self, match_id: int, request: StartMatchRequest) -> Match:
        with match_lock(match_id):
            match = self.get_match(match_id)
            if match.status != MatchStatus.SETUP:
                raise MatchStateError("Match already started")
            if request.toss_winner_team_id not in (match.team_a_id, match.team_b_id):
                raise MatchStateError("Toss winner must be one of the two teams")

            check = PlayingXIValidator.validate(
                match.team_a_id, match.team_b_id, match.playing_xi_a, match.playing_xi_b,
                require_openers=True,
            )
            if not check["valid"]:
                raise MatchStateError("; ".join(check["errors"]))

            other = match.team_b_id if request.toss_winner_team_id == match.team_a_id else match.team_a_id
            if request.toss_decision == "BAT":
                batting, bowling = request.toss_winner_team_id, other
            else:
                batting, bowling = other, request.toss_winner_team_id

            match.toss_winner_team_id = request.toss_winner_team_id
            match.toss_decision = request.toss_decision
            match.innings = [InningsSchema(batting_team_id=batting, bowling_team_id=bowling).model_dump(mode="json")]
            match.status = MatchStatus.IN_PROGRESS
            self._save(match)
            logger.info("Match %s started, %s batting first", match_id, batting)
            return match

    def add_ball(self, match_id: int, ball: BallEventInput) -> tuple:
        with match_lock(match_id):
            match = self.get_match(match_id)
            snapshot = self._in_progress(match)
            innings = snapshot.current_innings
            rules = snapshot.rules
            bpo = innings.effective_balls_per_over(rules)

            check = should_end_innings(
                innings.events, rules, snapshot.batting_order(innings),
                innings.max_overs, bpo, innings.max_wickets,
            )
            if check.end:
                logger.warning("Ball rejected for match %s: innings over (%s)", match_id, check.reason.value)
                raise MatchStateError(f"Innings is over ({check.reason.value}); start the next innings")

            over_number, ball_in_over = next_over_and_ball(innings.events, rules, bpo)
            event = BallEventSchema(
                **ball.model_dump(exclude={"extras"}),
                extras=ExtrasSchema(type=ball.extras.type, runs=ball.extras.to_domain(rules).runs),
                id=uuid4().hex,
                created_at=datetime.utcnow(),
                over_number=over_number,
                ball_in_over=ball_in_over,
            )

            stored = list(match.innings)
            current = dict(stored[-1])
            current["events"] = list(current.get("events", [])) + [event.model_dump(mode="json")]
            stored[-1] = current
            match.innings = stored
            self._save(match)
            return match, event

    def undo_last_ball(self, match_id: int) -> Match:
        with match_lock(match_id):
            match = self.get_match(match_id)
            self._in_progress(match)

            stored = list(match.innings)
            current = dict(stored[-1])
            events = list(current.get("events", []))
            if not events:
                raise MatchStateError("No balls to undo")
            current["events"] = events[:-1]
            stored[-1] = current
            match.innings = stored
            self._save(match)
            return match

    def next_innings(self, match_id: int, request: NextInningsRequest) -> Match:
        """
        Close the current innings and move the match on: the second innings,
        the second half of a Super Over, a new Super Over after a tie, or the
        end of the match once a result is decided.
        """
        with match_lock(match_id):
            match = self.get_match(match_id)
            snapshot = self._in_progress(match)
            count = len(snapshot.innings)
            current = snapshot.current_innings

            if count == 1:
                new_innings = InningsSchema(
                    batting_team_id=current.bowling_team_id,
                    bowling_team_id=current.batting_team_id,
                )
            elif count % 2 == 1:
                plan = SuperOverPlan(batting_team_id=current.bowling_team_id, bowling_team_id=current.batting_team_id)
                new_innings = self._super_over(snapshot, plan, request, current.balls_per_over)
            else:
                result = resolve_match_result(
                    snapshot.innings, snapshot.rules, settings.BATTING_SIDE_SIZE, snapshot.team_names,
                )
                if result.is_decided:
                    return self._finish(match, result)
                new_innings = self._super_over(snapshot, result.next_super_over, request, request.balls_per_over)
                logger.info("Match %s tied, Super Over with %s batting first", match_id, result.next_super_over.batting_team_id)

            match.innings = list(match.innings) + [new_innings.model_dump(mode="json")]
            self._save(match)
            logger.info("Match %s: innings %s started", match_id, count + 1)
            return match

    def complete_match(self, match_id: int) -> Match:
        with match_lock(match_id):
            match = self.get_match(match_id)
            snapshot = self._in_progress(match)
            result = None
            if len(snapshot.innings) >= 2:
                result = resolve_match_result(
                    snapshot.innings, snapshot.rules, settings.BATTING_SIDE_SIZE, snapshot.team_names,
                )
            return self._finish(match, result)

    # Helpers

    def _in_progress(self, match: Match):
        if match.status != MatchStatus.IN_PROGRESS:
            raise MatchStateError("Match is not in progress")
        snapshot = to_document(match).to_snapshot()
        if snapshot.current_innings is None:
            raise MatchStateError("No active innings")
        return snapshot

    def _super_over(self, snapshot, plan: SuperOverPlan, request: NextInningsRequest, balls_per_over) -> InningsSchema:
        if request.batting_order_override:
            check = PlayingXIValidator.validate_batting_order(
                request.batting_order_override, snapshot.playing_xi(plan.batting_team_id),
            )
            if not check["valid"]:
                raise MatchStateError("; ".join(check["errors"]))

        record = build_super_over_innings(
            plan,
            batting_order_override=request.batting_order_override,
            initial_bowler_id=request.initial_bowler_id,
            balls_per_over=balls_per_over,
        )
        return InningsSchema(
            batting_team_id=record.batting_team_id,
            bowling_team_id=record.bowling_team_id,
            max_overs=record.max_overs,
            max_wickets=record.max_wickets,
            balls_per_over=record.balls_per_over,
            batting_order_override=list(record.batting_order_override) if record.batting_order_override else None,
            initial_bowler_id=record.initial_bowler_id,
        )

    def _finish(self, match: Match, result) -> Match:
        match.status = MatchStatus.COMPLETED
        match.result_summary = result.message if result else None
        self._save(match)
        logger.info("Match %s completed: %s", match.id, match.result_summary or "no result")
        return match

    def _save(self, match: Match):
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            logger.warning("Concurrent update rejected for match %s", match.id)
            raise ConcurrentUpdateError("Match was updated concurrently; reload and retry")
        self.db.refresh(match)
