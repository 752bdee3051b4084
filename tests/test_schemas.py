"""
Tests for converting stored documents into engine types, and for XI validation.

Run with: pytest tests/test_schemas.py -v
"""
import pytest
from pydantic import ValidationError

from app.api.schemas import (
    RulesConfigSchema, ExtrasSchema, BallEventInput, MatchDocument, NextInningsRequest,
)
from app.engine.ledger import ExtrasType, MatchStatus, RulesConfig, WicketKind
from app.validators.playing_xi_validator import PlayingXIValidator

DOCUMENT = {
    "match_name": "Opener",
    "team_a_id": "A",
    "team_a_name": "Alpha",
    "team_b_id": "B",
    "playing_xi_a": ["a1", "a2"],
    "playing_xi_b": ["b1", "b2"],
    "rules": {"overs_per_innings": 5, "wide_runs": 2},
    "status": "IN_PROGRESS",
    "innings": [
        {
            "batting_team_id": "A",
            "bowling_team_id": "B",
            "events": [
                {"striker_id": "a1", "non_striker_id": "a2", "bowler_id": "b1", "runs_off_bat": 4},
                {"striker_id": "a1", "non_striker_id": "a2", "bowler_id": "b1", "extras": {"type": "WD"}},
                {
                    "striker_id": "a1", "non_striker_id": "a2", "bowler_id": "b1",
                    "wicket": {"kind": "CAUGHT", "batter_out_id": "a1", "fielder_id": "b2"},
                },
            ],
        },
    ],
}


class TestRulesValidation:
    """Rules are checked before they reach the engine"""

    @pytest.mark.parametrize("bpo", [4, 5, 6, 8])
    def test_allowed_balls_per_over(self, bpo):
        assert RulesConfigSchema(balls_per_over=bpo).to_domain().balls_per_over == bpo

    @pytest.mark.parametrize("bpo", [0, 3, 7, 10])
    def test_rejected_balls_per_over(self, bpo):
        with pytest.raises(ValidationError):
            RulesConfigSchema(balls_per_over=bpo)

    def test_overs_must_be_positive(self):
        with pytest.raises(ValidationError):
            RulesConfigSchema(overs_per_innings=0)

    def test_defaults(self):
        assert RulesConfigSchema().to_domain() == RulesConfig()

    def test_next_innings_balls_per_over(self):
        with pytest.raises(ValidationError):
            NextInningsRequest(balls_per_over=7)
        with pytest.raises(ValidationError):
            NextInningsRequest(batting_order_override=["only"])


class TestBallInput:

    def test_bat_runs_capped(self):
        with pytest.raises(ValidationError):
            BallEventInput(striker_id="a", non_striker_id="b", bowler_id="c", runs_off_bat=7)

    def test_extras_default_from_rules(self):
        rules = RulesConfig(wide_runs=2, no_ball_runs=1)
        assert ExtrasSchema(type=ExtrasType.WIDE).to_domain(rules).runs == 2
        assert ExtrasSchema(type=ExtrasType.NO_BALL).to_domain(rules).runs == 1
        assert ExtrasSchema(type=ExtrasType.BYE).to_domain(rules).runs == 0
        assert ExtrasSchema(type=ExtrasType.WIDE, runs=5).to_domain(rules).runs == 5

    def test_unknown_extras_type(self):
        with pytest.raises(ValidationError):
            ExtrasSchema(type="XX")


class TestMatchDocument:
    """Stored match to snapshot"""

    def test_to_snapshot(self):
        snapshot = MatchDocument.model_validate(DOCUMENT).to_snapshot()

        assert snapshot.status == MatchStatus.IN_PROGRESS
        assert snapshot.rules.overs_per_innings == 5
        assert snapshot.playing_xi_a == ("a1", "a2")
        assert snapshot.team_name("A") == "Alpha"
        assert snapshot.team_name("B") == "B"

        events = snapshot.innings[0].events
        assert len(events) == 3
        assert events[0].runs_off_bat == 4
        assert events[1].extras.type == ExtrasType.WIDE
        assert events[1].extras.runs == 2
        assert events[2].wicket.kind == WicketKind.CAUGHT
        assert events[2].wicket.fielder_id == "b2"

    def test_bad_wicket_kind(self):
        document = {**DOCUMENT, "innings": [{
            "batting_team_id": "A",
            "bowling_team_id": "B",
            "events": [{
                "striker_id": "a1", "non_striker_id": "a2", "bowler_id": "b1",
                "wicket": {"kind": "TIMED_OUT", "batter_out_id": "a1"},
            }],
        }]}
        with pytest.raises(ValidationError):
            MatchDocument.model_validate(document)

    def test_super_over_innings(self):
        document = {**DOCUMENT, "innings": DOCUMENT["innings"] + [{
            "batting_team_id": "B",
            "bowling_team_id": "A",
            "max_overs": 1,
            "max_wickets": 2,
            "batting_order_override": ["b2", "b1"],
        }]}
        snapshot = MatchDocument.model_validate(document).to_snapshot()
        super_over = snapshot.innings[1]

        assert super_over.is_super_over
        assert snapshot.batting_order(super_over) == ("b2", "b1")
        assert snapshot.batting_order(snapshot.innings[0]) == ("a1", "a2")


class TestPlayingXIValidator:

    def test_valid(self):
        check = PlayingXIValidator.validate("A", "B", ["a1", "a2"], ["b1", "b2"], require_openers=True)
        assert check["valid"]
        assert check["breakdown"] == {"team_a_players": 2, "team_b_players": 2}

    def test_errors(self):
        check = PlayingXIValidator.validate("A", "A", ["a1", "a1"], ["a1"] + [f"b{i}" for i in range(11)])
        assert not check["valid"]
        assert len(check["errors"]) == 4

    def test_openers_required_at_start(self):
        assert PlayingXIValidator.validate("A", "B", ["a1"], ["b1", "b2"])["valid"]
        assert not PlayingXIValidator.validate("A", "B", ["a1"], ["b1", "b2"], require_openers=True)["valid"]

    def test_batting_order(self):
        assert PlayingXIValidator.validate_batting_order(["b2", "b1"], ["b1", "b2", "b3"])["valid"]
        check = PlayingXIValidator.validate_batting_order(["b1", "b1", "x"], ["b1", "b2"])
        assert len(check["errors"]) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
