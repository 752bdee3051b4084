"""
Strike rotation.

No "who is on strike" pointer is ever stored. The current pair is rebuilt by
folding StrikeState over the complete ledger, against the batting order.
StrikeState.advance is also usable incrementally, one new delivery at a time,
provided the caller started from StrikeState.initial() and fed every event in
order; get_current_batters is the reference it must agree with.

Under the last-man-standing rule the final batter carries on alone, reported
with no non-striker, and the order is only exhausted once they are out too.
"""
from dataclasses import dataclass, replace
from typing import Optional
import enum
import logging

from app.engine.ledger import BallEvent, RulesConfig, runs_from_ball, ball_counts

logger = logging.getLogger(__name__)


class CreaseStatus(enum.Enum):
    OK = "OK"
    BATTERS_EXHAUSTED = "BATTERS_EXHAUSTED"
    LEDGER_INCONSISTENT = "LEDGER_INCONSISTENT"
    INSUFFICIENT_BATTERS = "INSUFFICIENT_BATTERS"


@dataclass(frozen=True)
class CurrentBatters:
    striker_id: Optional[str]
    non_striker_id: Optional[str]
    status: CreaseStatus = CreaseStatus.OK
    problems: tuple = ()

    @property
    def is_consistent(self) -> bool:
        return self.status != CreaseStatus.LEDGER_INCONSISTENT


@dataclass(frozen=True)
class StrikeState:
    idx1: int = 0
    idx2: int = 1
    idx1_on_strike: bool = True
    balls_this_over: int = 0
    exhausted: bool = False
    alone: bool = False  # last man standing; idx1 == idx2 is the survivor
    problems: tuple = ()

    @classmethod
    def initial(cls) -> "StrikeState":
        return cls()

    @property
    def striker_index(self) -> int:
        return self.idx1 if self.idx1_on_strike else self.idx2

    @property
    def non_striker_index(self) -> int:
        return self.idx2 if self.idx1_on_strike else self.idx1

    def _flag(self, message: str) -> "StrikeState":
        logger.debug("Inconsistent ledger: %s", message)
        return replace(self, problems=self.problems + (message,))

    def advance(
        self,
        event: BallEvent,
        batting_order,
        rules: RulesConfig,
        balls_per_over: Optional[int] = None,
    ) -> "StrikeState":
        """State after one more delivery."""
        if self.exhausted:
            # Pair is frozen once nobody is left to come in
            return self._flag(f"delivery {event.id or '?'} recorded after the batting order was exhausted")

        state = self
        if event.wicket:
            next_in = max(state.idx1, state.idx2) + 1
            out_id = event.wicket.batter_out_id
            if out_id not in (batting_order[state.idx1], batting_order[state.idx2]):
                state = state._flag(f"wicket names {out_id}, who is not at the crease")
            if state.alone:
                return replace(state, exhausted=True)
            if next_in >= len(batting_order):
                if not rules.last_man_standing_rule:
                    return replace(state, exhausted=True)
                survivor = state.idx2 if out_id == batting_order[state.idx1] else state.idx1
                state = replace(state, idx1=survivor, idx2=survivor, idx1_on_strike=True, alone=True)
            elif out_id == batting_order[state.idx1]:
                state = replace(state, idx1=next_in, idx1_on_strike=True)
            else:
                state = replace(state, idx2=next_in, idx1_on_strike=False)
        elif runs_from_ball(event) % 2 == 1:
            state = replace(state, idx1_on_strike=not state.idx1_on_strike)

        if ball_counts(event, rules):
            balls = state.balls_this_over + 1
            if balls >= (balls_per_over or rules.balls_per_over):
                state = replace(state, balls_this_over=0, idx1_on_strike=not state.idx1_on_strike)
            else:
                state = replace(state, balls_this_over=balls)
        return state

    def batters(self, batting_order) -> CurrentBatters:
        if self.problems:
            status = CreaseStatus.LEDGER_INCONSISTENT
        elif self.exhausted:
            status = CreaseStatus.BATTERS_EXHAUSTED
        else:
            status = CreaseStatus.OK
        return CurrentBatters(
            striker_id=batting_order[self.striker_index],
            non_striker_id=None if self.alone else batting_order[self.non_striker_index],
            status=status,
            problems=self.problems,
        )


def get_current_batters(
    events,
    batting_order,
    rules: RulesConfig,
    balls_per_over: Optional[int] = None,
) -> CurrentBatters:
    """Striker and non-striker for the next delivery, by full replay."""
    order = tuple(batting_order)
    if len(order) < 2:
        return CurrentBatters(
            striker_id=order[0] if order else None,
            non_striker_id=None,
            status=CreaseStatus.INSUFFICIENT_BATTERS,
        )

    state = StrikeState.initial()
    for event in events:
        state = state.advance(event, order, rules, balls_per_over)
    return state.batters(order)
