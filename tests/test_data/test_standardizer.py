"""Tests for the play standardizer."""

import pytest
from types import SimpleNamespace

from filmroom.data.standardizer import (
    PlayStandardizer, standardize_play, raw_from_external_play, as_record, to_int, to_bool
)
from filmroom.models.standardized import PlayType, StandardizedPlay


class TestStandardize:
    """Test standardizing individual plays."""
    
    @pytest.fixture
    def standardizer(self):
        return PlayStandardizer(default_source="test")
    
    def test_run_up_the_middle(self, standardizer):
        """Test a midfield first down run."""
        play = standardizer.standardize({
            "description": "1st and 10, run up the middle for 4 yards",
            "down": 1,
            "distance": 10,
            "yardLine": 55,
        })
        
        assert play.play_type == "RUSH"
        assert play.is_red_zone is False
        assert play.is_goal_to_go is False
        assert play.is_third_down is False
        assert play.is_fourth_down is False
    
    def test_qb_sneak_at_the_two(self, standardizer):
        """Test a third and goal sneak with no explicit type."""
        play = standardizer.standardize({"down": 3, "distance": 2, "yardLine": 2, "description": "QB sneak"})
        
        assert play.play_type == "RUSH"
        assert play.is_red_zone is True
        assert play.is_goal_to_go is True
        assert play.is_third_down is True
        assert play.is_fourth_down is False
    
    @pytest.mark.parametrize("raw", [{}, None, "not a play", [1, 2, 3], 42])
    def test_never_raises_on_bad_input(self, standardizer, raw):
        """Test that any input yields a play with defaults."""
        play = standardizer.standardize(raw)
        
        assert isinstance(play, StandardizedPlay)
        assert play.id == ''
        assert play.game_id == ''
        assert play.quarter == 1
        assert play.time == ''
        assert play.description == ''
        assert play.play_type == "RUSH"
        assert play.down is None
        assert play.yard_line is None
        assert play.formation is None
        assert play.blitz is False
        assert play.pressure is False
        assert play.result.yards is None
        assert not any([play.is_red_zone, play.is_goal_to_go, play.is_third_down, play.is_fourth_down])
    
    def test_malformed_numbers_become_none(self, standardizer):
        play = standardizer.standardize({"down": "third", "distance": None, "yardLine": "abc", "quarter": "x"})
        
        assert play.down is None
        assert play.distance is None
        assert play.yard_line is None
        assert play.quarter == 1
    
    def test_string_numbers_are_coerced(self, standardizer):
        play = standardizer.standardize({"down": "4", "distance": "1.0", "yardLine": " 15 "})
        
        assert play.down == 4
        assert play.distance == 1
        assert play.yard_line == 15
        assert play.is_fourth_down is True
        assert play.is_red_zone is True
    
    def test_zero_yard_line_is_kept(self, standardizer):
        play = standardizer.standardize({"down": 1, "distance": 10, "yardLine": 0})
        
        assert play.yard_line == 0
        assert play.is_red_zone is True
        assert play.is_goal_to_go is True
    
    def test_supplied_flags_are_ignored(self, standardizer):
        play = standardizer.standardize({
            "down": 1, "distance": 10, "yardLine": 80,
            "isThirdDown": True, "is_third_down": True, "is_red_zone": True,
        })
        
        assert play.is_third_down is False
        assert play.is_red_zone is False
    
    def test_field_aliases(self, standardizer):
        """Test alternative key names used by different providers."""
        play = standardizer.standardize({
            "externalId": "x1",
            "externalGameId": "g9",
            "yard_line": "15",
            "play_type": "pass",
        })
        
        assert play.id == "x1"
        assert play.game_id == "g9"
        assert play.yard_line == 15
        assert play.play_type == "PASS"
        assert play.is_red_zone is True
    
    def test_explicit_quarter_wins_over_parsed(self, standardizer):
        play = standardizer.standardize({"quarter": 3, "time": "Q2 7:45"})
        
        assert play.quarter == 3
        assert play.time == "7:45"
    
    def test_quarter_from_combined_clock(self, standardizer):
        play = standardizer.standardize({"time": "Q2 7:45"})
        
        assert play.quarter == 2
        assert play.time == "7:45"
    
    def test_source_tag(self, standardizer):
        assert standardizer.standardize({}).source == "test"
        assert standardizer.standardize({}, source="espn").source == "espn"
        assert standardizer.standardize({"source": "kaggle_ncaa"}).source == "kaggle_ncaa"
    
    def test_result_is_built(self, standardizer):
        play = standardizer.standardize({"result": {"yards": "12", "success": "true", "points": 0, "fumble": "no"}})
        
        assert play.result.yards == 12
        assert play.result.success is True
        assert play.result.points == 0
        assert play.result.fumble is False
        assert play.result.sack is None
    
    def test_scheme_inference(self, standardizer):
        play = standardizer.standardize({
            "description": "Shotgun formation, 11 personnel, Cover 2 with a blitz"
        })
        
        assert play.formation == "SHOTGUN"
        assert play.personnel == "11"
        assert play.coverage == "COVER 2"
        assert play.blitz is True
        assert play.pressure is False
    
    def test_explicit_scheme_values_are_kept(self, standardizer):
        play = standardizer.standardize({
            "description": "Shotgun blitz, hurry on the QB",
            "formation": "EMPTY",
            "blitz": False,
            "coverage": "MAN",
        })
        
        assert play.formation == "EMPTY"
        assert play.blitz is False
        assert play.coverage == "MAN"
        assert play.pressure is True
    
    def test_pydantic_input(self, standardizer):
        source_play = standardizer.standardize({"id": "p1", "down": 3, "distance": 5, "yardLine": 30})
        
        again = standardizer.standardize(source_play)
        
        assert again.id == "p1"
        assert again.is_third_down is True
    
    def test_standardize_many_preserves_order(self, standardizer):
        plays = standardizer.standardize_many([{"id": "a"}, {"id": "b"}, None], source="espn")
        
        assert [p.id for p in plays] == ["a", "b", ""]
        assert all(p.source == "espn" for p in plays)
    
    def test_deterministic(self, standardizer):
        raw = {"id": "p1", "description": "Pass complete, cover 3", "down": 2, "distance": 7, "yardLine": 40}
        
        assert standardizer.standardize(raw).model_dump() == standardizer.standardize(raw).model_dump()
    
    def test_module_level_function(self):
        play = standardize_play({"description": "Punt 45 yards"}, source="espn")
        
        assert play.play_type == "PUNT"
        assert play.source == "espn"


class TestSituationFlags:
    """Property-style checks of the derived flags."""
    
    @pytest.mark.parametrize("down", [None, -1, 0, 1, 2, 3, 4, 5])
    def test_down_flags(self, down):
        play = standardize_play({"down": down})
        
        assert play.is_third_down == (down == 3)
        assert play.is_fourth_down == (down == 4)
    
    @pytest.mark.parametrize("yard_line,expected", [(None, False), (0, True), (20, True), (21, False), (99, False)])
    def test_red_zone(self, yard_line, expected):
        assert standardize_play({"yardLine": yard_line}).is_red_zone is expected
    
    @pytest.mark.parametrize("down,distance,yard_line,expected", [
        (1, 10, 10, True),
        (1, 10, 11, False),
        (None, 10, 5, False),
        (1, None, 5, False),
        (1, 10, None, False),
    ])
    def test_goal_to_go(self, down, distance, yard_line, expected):
        play = standardize_play({"down": down, "distance": distance, "yardLine": yard_line})
        
        assert play.is_goal_to_go is expected


class TestParseTime:
    """Test clock parsing."""
    
    @pytest.mark.parametrize("value,expected", [
        ("Q2 7:45", (2, "7:45", True)),
        ("q4 0:12", (4, "0:12", True)),
        ("3Q 12:01", (3, "12:01", True)),
        ("garbage", (1, "garbage", False)),
        ("7:45", (1, "7:45", False)),
        (None, (1, "", False)),
    ])
    def test_parse_time(self, value, expected):
        assert PlayStandardizer.parse_time(value) == expected


class TestClassifyPlayType:
    """Test play type classification."""
    
    @pytest.mark.parametrize("play_type,expected", [
        ("pass", "PASS"),
        ("Field Goal", "FIELD_GOAL"),
        ("extra-point", "EXTRA_POINT"),
        ("run", "RUSH"),
        ("KICKOFF", "KICKOFF"),
    ])
    def test_explicit_type(self, play_type, expected):
        assert PlayStandardizer.classify_play_type("", play_type) == expected
    
    def test_explicit_type_beats_description(self):
        assert PlayStandardizer.classify_play_type("Punt 45 yards", "PASS") == "PASS"
    
    def test_keyword_priority(self):
        """Test that earlier keyword families win."""
        assert PlayStandardizer.classify_play_type("Fake punt, pass complete for 12") == "PASS"
        assert PlayStandardizer.classify_play_type("Pass rush forces a throwaway") == "RUSH"
    
    @pytest.mark.parametrize("description,expected", [
        ("42 yard FG is good", "FIELD_GOAL"),
        ("Field goal attempt blocked", "FIELD_GOAL"),
        ("Kickoff 65 yards, touchback", "KICKOFF"),
        ("PAT good", "EXTRA_POINT"),
        ("Holding penalty on the offense", "PENALTY"),
        ("Timeout #2 by Michigan", "TIMEOUT"),
        ("Coach's challenge, ruling stands", "CHALLENGE"),
        ("Safety, tackled in the end zone", "SAFETY"),
    ])
    def test_description_keywords(self, description, expected):
        assert PlayStandardizer.classify_play_type(description) == expected
    
    def test_substring_match(self):
        """Test that keywords match anywhere in the description."""
        assert PlayStandardizer.classify_play_type("Incompletion intended for Smith") == "PASS"
        assert PlayStandardizer.classify_play_type("Overthrown deep left") == "PASS"
        assert PlayStandardizer.classify_play_type("PATTERSON KICK IS GOOD") == "EXTRA_POINT"

    def test_inference_substring_match(self):
        assert PlayStandardizer.detect_blitz("Edge pass-rusher off the snap") is True
        assert PlayStandardizer.detect_pressure("QB hit as he throws") is True
        assert PlayStandardizer.extract_coverage("Cover 3 look, Cover-2 shell") == "COVER 3"
        assert PlayStandardizer.extract_coverage("Zone drop") == "ZONE"
    
    def test_unrecognized_token_is_scanned(self):
        assert PlayStandardizer.classify_play_type("", "Pass Reception") == "PASS"
        assert PlayStandardizer.classify_play_type("", "Kickoff Return (Offense)") == "KICKOFF"
    
    def test_fallback_is_rush(self):
        assert PlayStandardizer.classify_play_type("QB kneel", "Weird Thing") == "RUSH"
    
    def test_result_always_in_enumeration(self):
        values = {t.value for t in PlayType}
        for description, token in [("", None), ("?!", "??"), ("Two point try", "2pt")]:
            assert PlayStandardizer.classify_play_type(description, token) in values


class TestHelpers:
    """Test coercion helpers."""
    
    @pytest.mark.parametrize("value,expected", [
        (0, 0), ("0", 0), ("12", 12), (3.7, 3), (True, None), ("", None),
        ("nan", None), (float("inf"), None), ("abc", None), (None, None),
    ])
    def test_to_int(self, value, expected):
        assert to_int(value) == expected
    
    @pytest.mark.parametrize("value,expected", [
        (True, True), ("yes", True), ("0", False), (0, False), ("maybe", None), (None, None),
    ])
    def test_to_bool(self, value, expected):
        assert to_bool(value) is expected
    
    def test_as_record_orm_row(self, test_session, external_game):
        row = external_game.external_plays[0]
        
        record = as_record(row)
        
        assert record["external_id"] == row.external_id
        assert record["external_game_id"] == external_game.id
    
    def test_raw_from_external_play(self):
        external_play = SimpleNamespace(
            external_id="p3", external_game_id=7, quarter=2, time="7:45", down=3, distance=2,
            yard_line=2, play_type=None, description="QB sneak", offense="Michigan", defense="Ohio State",
            raw_data={"result": {"points": 6}, "formation": "I-FORMATION", "junk": 1},
        )
        
        raw = raw_from_external_play(external_play)
        
        assert raw["id"] == "p3"
        assert raw["gameId"] == "7"
        assert raw["yardLine"] == 2
        assert raw["result"] == {"points": 6}
        assert raw["formation"] == "I-FORMATION"
        assert "junk" not in raw
