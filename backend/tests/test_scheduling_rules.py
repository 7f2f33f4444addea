"""
Tests for scheduling rules: format mapping, capacity preview, validation.
"""

import pytest

from app.models.player import Player
from app.models.schedule import AllocationMethod, GameFormat
from app.services.scheduling_rules import (
    ALLOCATION_DESCRIPTIONS,
    ALLOCATION_LABELS,
    InvalidInputError,
    courts_in_play,
    list_allocation_methods,
    max_courts_for_roster,
    players_per_court_for_format,
    preview_capacity,
    validate_schedule_request,
)


class TestGameFormat:
    def test_singles_is_two(self):
        assert players_per_court_for_format(GameFormat.singles) == 2

    @pytest.mark.parametrize("fmt", ["doubles", "mixed_doubles", "round_robin", "open_play"])
    def test_everything_else_is_four(self, fmt):
        assert players_per_court_for_format(fmt) == 4

    def test_unknown_format(self):
        with pytest.raises(InvalidInputError):
            players_per_court_for_format("triples")


class TestMethodCatalogue:
    def test_every_method_has_label_and_description(self):
        for method in AllocationMethod:
            assert ALLOCATION_LABELS[method]
            assert ALLOCATION_DESCRIPTIONS[method]

    def test_listing(self):
        methods = list_allocation_methods()
        assert [m["method"] for m in methods] == [m.value for m in AllocationMethod]
        king = next(m for m in methods if m["method"] == "king_of_the_court")
        assert king["interactive"] is True
        assert king["label"] == "King of the Court"


class TestCapacity:
    def test_courts_in_play_clamps(self):
        assert courts_in_play(10, 2, 4) == 2
        assert courts_in_play(7, 2, 4) == 1
        assert courts_in_play(3, 2, 4) == 0

    def test_max_courts_never_below_one(self):
        assert max_courts_for_roster(3, 4) == 1
        assert max_courts_for_roster(13, 4) == 3

    def test_preview_with_sit_outs(self):
        preview = preview_capacity(10, 2, 4)
        assert preview.capacity == 8
        assert preview.sit_outs_per_round == 2
        assert preview.clamped is False

    def test_preview_clamped(self):
        preview = preview_capacity(6, 3, 4)
        assert preview.courts_in_play == 1
        assert preview.sit_outs_per_round == 2
        assert preview.max_courts == 1
        assert preview.clamped is True

    def test_preview_rejects_negative_count(self):
        with pytest.raises(InvalidInputError):
            preview_capacity(-1, 2, 4)


class TestValidateScheduleRequest:
    def _players(self, n):
        return [Player(id=str(i), name=str(i)) for i in range(n)]

    def test_valid(self):
        validate_schedule_request(self._players(4), 1, 4, 1)

    def test_rejects_zero_players_per_court(self):
        with pytest.raises(InvalidInputError):
            validate_schedule_request(self._players(4), 1, 0, 1)

    def test_rejects_six_players_per_court(self):
        with pytest.raises(InvalidInputError, match="2 \\(singles\\) or 4 \\(doubles\\)"):
            validate_schedule_request(self._players(12), 2, 6, 1)

    def test_rounds_optional(self):
        validate_schedule_request(self._players(2), 1, 2)
