"""
Tests for ball classification, innings summary, batting card and bowling figures.

Run with: pytest tests/test_scoring.py -v
"""
import pytest
from app.engine.ledger import (
    RulesConfig, BallEvent, Extras, ExtrasType, WicketInfo, WicketKind,
    runs_from_ball, ball_counts, ball_faced, next_over_and_ball,
)
from app.engine.scoring import (
    compute_innings_summary, compute_batting_card, compute_bowling_figures,
    compute_chase, format_overs, format_dismissal, round_half_up,
)

RULES = RulesConfig(
    overs_per_innings=20,
    balls_per_over=6,
    wide_runs=1,
    no_ball_runs=1,
    wide_counts_as_ball=False,
    no_ball_counts_as_ball=False,
)


def ball(runs=0, extras=None, extra_runs=0, wicket=None, striker="s1", non_striker="s2", bowler="b1"):
    """Create a delivery for testing"""
    return BallEvent(
        striker_id=striker,
        non_striker_id=non_striker,
        bowler_id=bowler,
        runs_off_bat=runs,
        extras=Extras(extras, extra_runs) if extras else Extras(),
        wicket=wicket,
    )


def wide(runs=1, **kwargs):
    return ball(extras=ExtrasType.WIDE, extra_runs=runs, **kwargs)


def bowled(batter="s1"):
    return WicketInfo(kind=WicketKind.BOWLED, batter_out_id=batter)


class TestBallClassification:
    """runs_from_ball / ball_counts / ball_faced"""

    def test_runs_include_bat_and_extras(self):
        assert runs_from_ball(ball(2, ExtrasType.NO_BALL, 1)) == 3
        assert runs_from_ball(ball(0)) == 0

    def test_wide_follows_rules(self):
        assert ball_counts(wide(), RULES) is False
        assert ball_counts(wide(), RulesConfig(wide_counts_as_ball=True)) is True

    def test_no_ball_follows_rules(self):
        no_ball = ball(extras=ExtrasType.NO_BALL, extra_runs=1)
        assert ball_counts(no_ball, RULES) is False
        assert ball_counts(no_ball, RulesConfig(no_ball_counts_as_ball=True)) is True

    def test_byes_always_count(self):
        assert ball_counts(ball(extras=ExtrasType.BYE, extra_runs=2), RULES) is True
        assert ball_counts(ball(extras=ExtrasType.LEG_BYE, extra_runs=1), RULES) is True

    def test_faced_differs_from_counts(self):
        """A wide never counts as faced, even when it counts toward the over"""
        rules = RulesConfig(wide_counts_as_ball=True)
        assert ball_counts(wide(), rules) is True
        assert ball_faced(wide()) is False
        assert ball_faced(ball(extras=ExtrasType.LEG_BYE, extra_runs=1)) is True

    def test_next_over_and_ball(self):
        events = [ball(0)] * 6 + [wide(), ball(1)]
        assert next_over_and_ball(events, RULES) == (2, 2)
        assert next_over_and_ball([], RULES) == (1, 1)
        assert next_over_and_ball([ball(0)] * 4, RULES, balls_per_over=4) == (2, 1)


class TestInningsSummary:
    """Summary reduction over a ledger"""

    def test_four_wide_wicket(self):
        events = [ball(4), wide(1), ball(0, wicket=bowled())]
        summary = compute_innings_summary(events, RULES)

        assert summary.total_runs == 5
        assert summary.wickets == 1
        assert summary.legal_balls == 2
        assert summary.overs == 0
        assert summary.balls == 2
        assert format_overs(summary, 6) == "0.2"
        assert summary.run_rate == 15.0

    def test_total_is_bat_plus_extras(self):
        events = [
            ball(1), ball(6), wide(2), ball(0, ExtrasType.BYE, 4),
            ball(2, ExtrasType.NO_BALL, 1), ball(0, ExtrasType.LEG_BYE, 1),
        ]
        summary = compute_innings_summary(events, RULES)

        bat = sum(e.runs_off_bat for e in events)
        extras = sum(e.extras.runs for e in events)
        assert summary.total_runs == bat + extras == 17
        assert summary.extras_breakdown == {"WD": 2, "B": 4, "NB": 1, "LB": 1}
        assert summary.extras_total == 8

    def test_empty_ledger(self):
        summary = compute_innings_summary([], RULES)
        assert summary.total_runs == 0
        assert summary.run_rate == 0.0
        assert format_overs(summary, 6) == "0"

    def test_completed_over_display(self):
        summary = compute_innings_summary([ball(1)] * 12, RULES)
        assert summary.overs == 2
        assert summary.balls == 0
        assert format_overs(summary, 6) == "2"

    def test_balls_per_over_override(self):
        summary = compute_innings_summary([ball(1)] * 5, RULES, balls_per_over=4)
        assert summary.overs == 1
        assert summary.balls == 1
        assert summary.run_rate == 4.0

    def test_run_rate_rounding(self):
        # 7 runs off 1.3 overs
        events = [ball(1)] * 7 + [ball(0)] * 2
        assert compute_innings_summary(events, RULES).run_rate == 4.67

    def test_wickets_never_decrease_as_ledger_grows(self):
        events = [ball(0), ball(0, wicket=bowled()), wide(), ball(4), ball(0, wicket=bowled("s2"))]
        counts = [compute_innings_summary(events[:n], RULES).wickets for n in range(len(events) + 1)]
        assert counts == sorted(counts)

    def test_recomputation_is_identical(self):
        events = [ball(4), wide(), ball(1), ball(0, wicket=bowled())]
        assert compute_innings_summary(events, RULES) == compute_innings_summary(events, RULES)


class TestRounding:
    """Half-up rounding to 2 dp"""

    def test_half_rounds_up(self):
        assert round_half_up(3.125) == 3.13
        assert round_half_up(2.675) == 2.68
        assert round_half_up(1.004) == 1.0


class TestBattingCard:
    """Per-batter aggregation"""

    def test_runs_balls_boundaries(self):
        events = [
            ball(4, striker="p1", non_striker="p2"),
            ball(2, striker="p1", non_striker="p2"),
            ball(1, striker="p1", non_striker="p2"),
            ball(6, striker="p2", non_striker="p1"),
        ]
        card = {e.player_id: e for e in compute_batting_card(events, ["p1", "p2", "p3"])}

        assert card["p1"].runs == 7
        assert card["p1"].balls == 3
        assert card["p1"].fours == 1
        assert card["p1"].strike_rate == 233.33
        assert card["p2"].sixes == 1
        assert card["p3"].balls == 0
        assert card["p3"].strike_rate == 0.0

    def test_order_is_batting_order(self):
        card = compute_batting_card([], ["x", "a", "m"])
        assert [e.player_id for e in card] == ["x", "a", "m"]

    def test_wide_not_faced_but_byes_are(self):
        events = [
            wide(1, striker="p1"),
            ball(0, ExtrasType.BYE, 2, striker="p1"),
            ball(3, ExtrasType.NO_BALL, 1, striker="p1"),
        ]
        entry = compute_batting_card(events, ["p1"])[0]
        assert entry.balls == 1
        assert entry.runs == 3  # bat runs off the no-ball only

    def test_strike_rate_rounds_half_up(self):
        events = [ball(1, striker="p1")] + [ball(0, striker="p1")] * 31
        assert compute_batting_card(events, ["p1"])[0].strike_rate == 3.13

    def test_dismissal_marks_batter_out(self):
        events = [
            ball(0, striker="p1", wicket=WicketInfo(WicketKind.CAUGHT, "p1", fielder_id="f1")),
            ball(0, striker="p3", non_striker="p2",
                 wicket=WicketInfo(WicketKind.RUN_OUT, "p2", fielder_id="f2")),
        ]
        card = {e.player_id: e for e in compute_batting_card(events, ["p1", "p2", "p3"])}

        assert card["p1"].is_out and card["p1"].dismissal == "c ? b"
        assert card["p2"].is_out and card["p2"].dismissal == "run out (?)"
        assert not card["p3"].is_out and card["p3"].dismissal is None

    def test_unknown_players_ignored(self):
        events = [ball(4, striker="ghost", wicket=bowled("ghost"))]
        entry = compute_batting_card(events, ["p1"])[0]
        assert entry.runs == 0 and not entry.is_out


class TestDismissalText:
    """Dismissal shorthand"""

    @pytest.mark.parametrize("kind, fielder, expected", [
        (WicketKind.BOWLED, None, "b"),
        (WicketKind.CAUGHT, None, "c ? b"),
        (WicketKind.CAUGHT, "f", "c ? b"),
        (WicketKind.LBW, None, "lbw b"),
        (WicketKind.RUN_OUT, None, "run out"),
        (WicketKind.RUN_OUT, "f", "run out (?)"),
        (WicketKind.STUMPED, None, "st b"),
        (WicketKind.STUMPED, "f", "st ? b"),
        (WicketKind.HIT_WICKET, None, "hit wicket b"),
        (WicketKind.RETIRED, None, "retired"),
    ])
    def test_format(self, kind, fielder, expected):
        assert format_dismissal(kind, fielder) == expected


class TestBowlingFigures:
    """Per-bowler aggregation"""

    def test_dot_wide_wicket(self):
        events = [ball(0), wide(1), ball(0, wicket=bowled())]
        figures = compute_bowling_figures(events, RULES, ["b1"])[0]

        assert figures.overs == 0
        assert figures.balls == 2
        assert figures.runs_conceded == 1
        assert figures.wickets == 1
        assert figures.economy == 3.0

    def test_byes_charged_to_bowler(self):
        events = [ball(0, ExtrasType.BYE, 4), ball(0, ExtrasType.LEG_BYE, 1)]
        figures = compute_bowling_figures(events, RULES, ["b1"])[0]
        assert figures.runs_conceded == 5

    def test_split_between_bowlers(self):
        events = [ball(1, bowler="b1")] * 6 + [ball(4, bowler="b2")] * 3
        figures = {f.player_id: f for f in compute_bowling_figures(events, RULES, ["b1", "b2", "b3"])}

        assert figures["b1"].overs == 1 and figures["b1"].balls == 0
        assert figures["b1"].overs_display == "1.0"
        assert figures["b1"].economy == 6.0
        assert figures["b2"].runs_conceded == 12
        assert figures["b2"].economy == 24.0
        assert figures["b3"].economy == 0.0

    def test_bowlers_outside_order_left_out(self):
        figures = compute_bowling_figures([ball(4, bowler="sub")], RULES, ["b1"])
        assert [f.player_id for f in figures] == ["b1"]
        assert figures[0].runs_conceded == 0

    def test_balls_per_over_override(self):
        figures = compute_bowling_figures([ball(1)] * 5, RULES, ["b1"], balls_per_over=5)[0]
        assert figures.overs == 1 and figures.balls == 0
        assert figures.economy == 5.0


class TestChase:
    """Target and required rate"""

    def test_required_rate(self):
        summary = compute_innings_summary([ball(1)] * 6, RULES)
        chase = compute_chase(target=31, summary=summary, overs_limit=5, balls_per_over=6)

        assert chase.runs_needed == 25
        assert chase.balls_left == 24
        assert chase.required_rate == 6.25

    def test_no_balls_left(self):
        summary = compute_innings_summary([ball(0)] * 6, RULES)
        chase = compute_chase(target=10, summary=summary, overs_limit=1, balls_per_over=6)
        assert chase.balls_left == 0
        assert chase.required_rate == 0.0

    def test_target_passed(self):
        summary = compute_innings_summary([ball(6)] * 2, RULES)
        assert compute_chase(10, summary, 20, 6).runs_needed == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
