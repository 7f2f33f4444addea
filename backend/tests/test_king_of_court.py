"""
Tests for King of the Court: round 1 setup and ladder advancement.
"""

import random
from dataclasses import replace

import pytest

from app.models.player import Player
from app.models.round import Round
from app.services.king_of_court import advance_king_round, start_king_round_1
from app.services.scheduling_rules import InvalidInputError
from app.utils.sit_out import SitOutLedger


def _make_players(n: int) -> list[Player]:
    return [Player(id=f"p{i}", name=f"Player {i}") for i in range(1, n + 1)]


def _ids(players) -> list[str]:
    return [p.id for p in players]


@pytest.fixture
def ten_player_round_1():
    players = _make_players(10)
    round_1, ledger = start_king_round_1(players, num_courts=2, players_per_court=4, rng=random.Random(11))
    return players, round_1, ledger


class TestStartRound1:
    def test_fills_capacity_and_subs_the_rest(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1

        assert round_1.round_number == 1
        assert len(round_1.courts) == 2
        assert len(round_1.active_players) == 8
        assert len(round_1.sitting_out) == 2
        assert sorted(_ids(round_1.all_players)) == sorted(_ids(players))

    def test_subs_start_with_one_sit_out(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        sub_ids = set(_ids(round_1.sitting_out))
        for p in players:
            assert ledger.count(p.id) == (1 if p.id in sub_ids else 0)

    def test_exact_capacity_has_no_subs(self):
        players = _make_players(8)
        round_1, ledger = start_king_round_1(players, 2, 4, rng=random.Random(0))
        assert round_1.sitting_out == ()
        assert ledger.to_dict() == {p.id: 0 for p in players}

    def test_rejects_short_roster(self):
        with pytest.raises(InvalidInputError):
            start_king_round_1(_make_players(3), 1, 4)

    def test_rejects_zero_courts(self):
        with pytest.raises(InvalidInputError):
            start_king_round_1(_make_players(8), 0, 4)

    def test_clamps_courts_to_roster(self):
        round_1, _ = start_king_round_1(_make_players(6), 3, 4, rng=random.Random(0))
        assert len(round_1.courts) == 1
        assert len(round_1.sitting_out) == 2


class TestLadderTransitions:
    def test_two_court_ladder(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        court1, court2 = round_1.courts
        subs = list(round_1.sitting_out)

        next_round, new_ledger = advance_king_round(round_1, {1: 1, 2: 2}, players, 2, 4, 2, ledger)

        new1, new2 = next_round.courts
        assert next_round.round_number == 2
        # Court 1 winners stay, court 2 winners move up
        assert new1.team1 == court1.team1
        assert new1.team2 == court2.team2
        # Court 1 losers move down, longest-waiting subs fill the rest
        assert new2.team1 == court1.team2
        assert _ids(new2.team2) == _ids(subs)
        # Last-court losers leave the ladder
        assert _ids(next_round.sitting_out) == _ids(court2.team1)
        for p in court2.team1:
            assert new_ledger.count(p.id) == 1
        for p in subs:
            assert new_ledger.count(p.id) == 1

    def test_three_court_ladder_middle_court(self):
        players = _make_players(12)
        round_1, ledger = start_king_round_1(players, 3, 4, rng=random.Random(5))
        c1, c2, c3 = round_1.courts

        next_round, _ = advance_king_round(round_1, {1: 2, 2: 1, 3: 1}, players, 3, 4, 2, ledger)
        n1, n2, n3 = next_round.courts

        assert n1.team1 == c1.team2
        assert n1.team2 == c2.team1
        assert n2.team1 == c3.team1
        assert n2.team2 == c1.team1
        # Middle-court losers drop to court 3, last-court losers refill it (no subs)
        assert n3.team1 == c2.team2
        assert n3.team2 == c3.team2
        assert next_round.sitting_out == ()

    def test_single_court_losers_go_to_sub_pool(self):
        players = _make_players(6)
        round_1, ledger = start_king_round_1(players, 1, 4, rng=random.Random(2))
        (court,) = round_1.courts
        subs = list(round_1.sitting_out)

        next_round, new_ledger = advance_king_round(round_1, {1: 1}, players, 1, 4, 2, ledger)

        (new_court,) = next_round.courts
        assert new_court.team1 == court.team1
        assert _ids(new_court.team2) == _ids(subs)
        assert _ids(next_round.sitting_out) == _ids(court.team2)
        for p in court.team2:
            assert new_ledger.count(p.id) == 1

    def test_singles_ladder(self):
        players = _make_players(5)
        round_1, ledger = start_king_round_1(players, 2, 2, rng=random.Random(3))
        c1, c2 = round_1.courts

        next_round, _ = advance_king_round(round_1, {1: 2, 2: 1}, players, 2, 2, 2, ledger)

        assert next_round.courts[0].team1 == c1.team2
        assert next_round.courts[0].team2 == c2.team1
        assert next_round.courts[1].team1 == c1.team1
        assert next_round.courts[1].team2 == round_1.sitting_out
        assert next_round.sitting_out == c2.team2


class TestConservation:
    def test_player_count_is_conserved_over_many_rounds(self):
        players = _make_players(14)
        rng = random.Random(21)
        current, ledger = start_king_round_1(players, 3, 4, rng=rng)

        for round_number in range(2, 12):
            winners = {c.court_number: rng.choice((1, 2)) for c in current.courts}
            court1_winners = current.courts[0].team(winners[1])
            last = current.courts[-1]
            last_losers = last.team(2 if winners[last.court_number] == 1 else 1)

            current, ledger = advance_king_round(current, winners, players, 3, 4, round_number, ledger)

            ids = _ids(current.all_players)
            assert len(ids) == len(set(ids)) == 14
            assert set(ids) == set(_ids(players))
            assert all(len(c.players) == 4 for c in current.courts)
            assert set(_ids(court1_winners)) <= set(_ids(current.courts[0].players))
            for p in last_losers:
                assert p in current.sitting_out or p in current.active_players

    def test_input_ledger_is_not_mutated(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        before = ledger.to_dict()
        advance_king_round(round_1, {1: 1, 2: 1}, players, 2, 4, 2, ledger)
        assert ledger.to_dict() == before


class TestRosterChanges:
    def test_late_arrival_waits_in_pool(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        late = Player(id="late", name="Late Arrival")

        next_round, new_ledger = advance_king_round(round_1, {1: 1, 2: 1}, players + [late], 2, 4, 2, ledger)

        assert late in next_round.sitting_out
        assert new_ledger.count("late") == 1
        assert len(next_round.all_players) == 11

    def test_departed_player_is_replaced_from_pool(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        gone = round_1.courts[0].team1[0]
        roster = [p for p in players if p.id != gone.id]

        next_round, _ = advance_king_round(round_1, {1: 1, 2: 1}, roster, 2, 4, 2, ledger)

        assert gone not in next_round.all_players
        assert all(len(c.players) == 4 for c in next_round.courts)
        assert len(next_round.all_players) == 9

    def test_roster_edits_carry_into_next_round(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        champion = round_1.courts[0].team1[0]
        roster = [
            replace(p, name="Renamed", rating=5.0) if p.id == champion.id else p
            for p in players
        ]

        next_round, _ = advance_king_round(round_1, {1: 1, 2: 1}, roster, 2, 4, 2, ledger)

        updated = next(p for p in next_round.court(1).players if p.id == champion.id)
        assert updated.name == "Renamed"
        assert updated.rating == 5.0


class TestValidation:
    def test_missing_winner_is_rejected(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        with pytest.raises(InvalidInputError, match="missing courts: \\[2\\]"):
            advance_king_round(round_1, {1: 1}, players, 2, 4, 2, ledger)

    def test_invalid_selector_is_rejected(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        with pytest.raises(InvalidInputError):
            advance_king_round(round_1, {1: 1, 2: 3}, players, 2, 4, 2, ledger)

    def test_court_count_mismatch_is_rejected(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        with pytest.raises(InvalidInputError):
            advance_king_round(round_1, {1: 1, 2: 1}, players, 1, 4, 2, ledger)

    def test_bad_round_number_is_rejected(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        with pytest.raises(InvalidInputError):
            advance_king_round(round_1, {1: 1, 2: 1}, players, 2, 4, 0, ledger)

    def test_team_size_mismatch_is_rejected(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        with pytest.raises(InvalidInputError, match="Teams must have 1 player"):
            advance_king_round(round_1, {1: 1, 2: 1}, players, 2, 2, 2, ledger)

    def test_player_listed_twice_is_rejected(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        doubled = round_1.courts[0].team1[0]
        tampered = Round(
            round_number=round_1.round_number,
            courts=round_1.courts,
            sitting_out=round_1.sitting_out + (doubled,),
        )
        with pytest.raises(InvalidInputError, match=doubled.id):
            advance_king_round(tampered, {1: 1, 2: 1}, players, 2, 4, 2, ledger)

    def test_duplicate_roster_ids_are_rejected(self, ten_player_round_1):
        players, round_1, ledger = ten_player_round_1
        with pytest.raises(InvalidInputError, match="Duplicate player ids"):
            advance_king_round(round_1, {1: 1, 2: 1}, players + [players[0]], 2, 4, 2, ledger)

    def test_empty_ledger_defaults_to_zero(self, ten_player_round_1):
        players, round_1, _ = ten_player_round_1
        next_round, new_ledger = advance_king_round(round_1, {1: 1, 2: 1}, players, 2, 4, 2, SitOutLedger())
        assert set(new_ledger.to_dict()) == {p.id for p in players}
        assert len(next_round.sitting_out) == 2
