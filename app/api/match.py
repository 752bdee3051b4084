"""
Match scoring API endpoints - setup, ball-by-ball scoring, scorecard, result
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.match_service import (
    MatchService, MatchNotFound, MatchStateError, ConcurrentUpdateError,
)
from app.api.schemas import (
    MatchCreate, MatchResponse, StartMatchRequest, NextInningsRequest,
    BallEventInput, BallResultResponse, ScorecardResponse, MatchResultResponse,
    PlayerStatsResponse, TeamStatsResponse,
)

router = APIRouter(prefix="/matches", tags=["Matches"])
stats_router = APIRouter(tags=["Stats"])


def get_service(db: Session = Depends(get_db)) -> MatchService:
    return MatchService(db)


def _call(fn, *args):
    """Run a service call, translating its errors to HTTP responses"""
    try:
        return fn(*args)
    except MatchNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConcurrentUpdateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except MatchStateError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("", response_model=MatchResponse)
def create_match(data: MatchCreate, service: MatchService = Depends(get_service)):
    """Create a match in SETUP status"""
    return _call(service.create_match, data)


@router.get("/{match_id}", response_model=MatchResponse)
def get_match(match_id: int, service: MatchService = Depends(get_service)):
    return _call(service.get_match, match_id)


@router.post("/{match_id}/start", response_model=MatchResponse)
def start_match(match_id: int, request: StartMatchRequest, service: MatchService = Depends(get_service)):
    """Record the toss and open the first innings"""
    return _call(service.start_match, match_id, request)


@router.post("/{match_id}/events", response_model=BallResultResponse)
def add_ball(match_id: int, ball: BallEventInput, service: MatchService = Depends(get_service)):
    """Append one delivery to the current innings"""
    match, event = _call(service.add_ball, match_id, ball)
    return BallResultResponse(event=event, scorecard=service.scorecard(match))


@router.delete("/{match_id}/events/last", response_model=ScorecardResponse)
def undo_last_ball(match_id: int, service: MatchService = Depends(get_service)):
    """Remove the last delivery of the current innings"""
    match = _call(service.undo_last_ball, match_id)
    return service.scorecard(match)


@router.post("/{match_id}/innings/next", response_model=ScorecardResponse)
def next_innings(
    match_id: int,
    request: Optional[NextInningsRequest] = None,
    service: MatchService = Depends(get_service),
):
    """End the current innings; opens the next one or completes the match"""
    match = _call(service.next_innings, match_id, request or NextInningsRequest())
    return service.scorecard(match)


@router.post("/{match_id}/complete", response_model=MatchResponse)
def complete_match(match_id: int, service: MatchService = Depends(get_service)):
    return _call(service.complete_match, match_id)


@router.get("/{match_id}/scorecard", response_model=ScorecardResponse)
def get_scorecard(match_id: int, service: MatchService = Depends(get_service)):
    match = _call(service.get_match, match_id)
    return service.scorecard(match)


@router.get("/{match_id}/result", response_model=MatchResultResponse)
def get_result(match_id: int, service: MatchService = Depends(get_service)):
    match = _call(service.get_match, match_id)
    return MatchResultResponse.model_validate(service.result(match))


@stats_router.get("/players/{player_id}/stats", response_model=PlayerStatsResponse)
def get_player_stats(player_id: str, service: MatchService = Depends(get_service)):
    """Career batting and bowling across all scored matches"""
    return service.player_stats(player_id)


@stats_router.get("/teams/{team_id}/stats", response_model=TeamStatsResponse)
def get_team_stats(team_id: str, service: MatchService = Depends(get_service)):
    return service.team_stats(team_id)
