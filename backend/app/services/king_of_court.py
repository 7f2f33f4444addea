"""
King of the Court: interactive ladder, one round at a time.

Round 1 is a shuffle. Every later round is computed from the previous round
plus the winning team (1 or 2) reported for each court:

- Court 1 winners stay on court 1
- Winners of court c (c > 1) move up to court c-1
- Court 1 losers move down to court 2
- Losers of middle court c move down to court c+1
- Losers of the last court leave the ladder and join the sub pool
- With a single court, all losers go to the sub pool

Open spots are refilled from the sub pool, longest-waiting first.
The sit-out ledger is returned with every round and must be passed back in.
"""

import logging
import random
from typing import List, Mapping, Optional, Sequence, Tuple

from app.models.player import Player
from app.models.round import Round
from app.services.scheduling_rules import (
    InvalidInputError,
    court_capacity,
    courts_in_play,
    validate_counts,
    validate_roster,
    validate_schedule_request,
)
from app.utils.courts import assign_to_courts, court_from_bucket
from app.utils.sit_out import SitOutLedger

logger = logging.getLogger(__name__)

VALID_WINNER_SELECTORS = (1, 2)


def start_king_round_1(
    players: Sequence[Player],
    num_courts: int,
    players_per_court: int,
    rng: Optional[random.Random] = None,
) -> Tuple[Round, SitOutLedger]:
    """
    Shuffle the roster onto the courts; whoever does not fit starts in the sub pool.

    Sub pool members start the ledger at 1 (they have sat out once), everyone else at 0.
    """
    validate_schedule_request(players, num_courts, players_per_court)
    rng = rng or random.Random()

    in_play = courts_in_play(len(players), num_courts, players_per_court)
    capacity = court_capacity(in_play, players_per_court)

    shuffled = list(players)
    rng.shuffle(shuffled)
    active = shuffled[:capacity]
    subs = shuffled[capacity:]

    ledger = SitOutLedger.for_players(players).with_sat_out(subs)
    round_1 = Round(
        round_number=1,
        courts=tuple(assign_to_courts(active, in_play, players_per_court)),
        sitting_out=tuple(subs),
    )
    logger.info(
        "King round 1: %s courts, %s players, %s sitting out",
        in_play,
        len(players),
        len(subs),
    )
    return round_1, ledger


def _validate_winners(previous_round: Round, winners_by_court: Mapping[int, int]) -> None:
    missing = [c.court_number for c in previous_round.courts if c.court_number not in winners_by_court]
    if missing:
        raise InvalidInputError(f"Select a winner for every court (missing courts: {missing})")

    invalid = {
        court: winner
        for court, winner in winners_by_court.items()
        if previous_round.court(court) is not None and winner not in VALID_WINNER_SELECTORS
    }
    if invalid:
        raise InvalidInputError(f"Winner must be team 1 or team 2 (got {invalid})")


def _validate_previous_round(previous_round: Round, players_per_court: int) -> None:
    """Every team must be full size and no player may appear twice in the round."""
    team_size = players_per_court // 2
    bad_courts = [
        c.court_number
        for c in previous_round.courts
        if len(c.team1) != team_size or len(c.team2) != team_size
    ]
    if bad_courts:
        raise InvalidInputError(
            f"Teams must have {team_size} player(s) each (courts: {bad_courts})"
        )

    seen = set()
    duplicates = set()
    for p in previous_round.all_players:
        if p.id in seen:
            duplicates.add(p.id)
        seen.add(p.id)
    if duplicates:
        raise InvalidInputError(f"Players listed more than once in previous round: {sorted(duplicates)}")


def advance_king_round(
    previous_round: Round,
    winners_by_court: Mapping[int, int],
    full_roster: Sequence[Player],
    num_courts: int,
    players_per_court: int,
    next_round_number: int,
    ledger: SitOutLedger,
) -> Tuple[Round, SitOutLedger]:
    """
    Compute the next ladder round from the previous round's winners.

    Args:
        previous_round: Round just played
        winners_by_court: court_number -> winning team (1 or 2), one per court
        full_roster: Current session roster; late arrivals join the sub pool,
            players no longer listed are dropped
        num_courts: Requested courts (clamped the same way as round 1)
        players_per_court: 2 (singles) or 4 (doubles)
        next_round_number: Number to give the new round
        ledger: Sit-out ledger returned with the previous round

    Returns:
        (next round, updated ledger). The input ledger is not modified.

    Raises:
        InvalidInputError: missing/invalid winner selections, bad counts,
            wrong team sizes or repeated players in previous_round, or a
            short/duplicated roster. Raised before anything is computed.
    """
    validate_counts(num_courts, players_per_court)
    if next_round_number < 1:
        raise InvalidInputError(f"next_round_number must be >= 1, got {next_round_number}")
    _validate_winners(previous_round, winners_by_court)
    _validate_previous_round(previous_round, players_per_court)
    validate_roster(full_roster, players_per_court)

    # Roster entries are authoritative (a renamed or re-rated player updates on court too)
    roster_by_id = {p.id: p for p in full_roster}
    in_play = courts_in_play(len(full_roster), num_courts, players_per_court)
    if len(previous_round.courts) != in_play:
        raise InvalidInputError(
            f"Previous round has {len(previous_round.courts)} courts, expected {in_play}"
        )

    courts = sorted(previous_round.courts, key=lambda c: c.court_number)
    winners: List[List[Player]] = []
    losers: List[List[Player]] = []
    for court in courts:
        win_team = winners_by_court[court.court_number]
        winners.append(list(court.team(win_team)))
        losers.append(list(court.team(2 if win_team == 1 else 1)))

    buckets: List[List[Player]] = [[] for _ in range(in_play)]
    buckets[0].extend(winners[0])
    for c in range(1, in_play):
        buckets[c - 1].extend(winners[c])
    if in_play > 1:
        buckets[1].extend(losers[0])
    for c in range(1, in_play - 1):
        buckets[c + 1].extend(losers[c])

    outgoing = losers[-1]
    sub_pool = outgoing + list(previous_round.sitting_out)

    # Departed players leave the ladder; late arrivals wait in the pool
    buckets = [[roster_by_id[p.id] for p in bucket if p.id in roster_by_id] for bucket in buckets]
    sub_pool = [roster_by_id[p.id] for p in sub_pool if p.id in roster_by_id]
    seen_ids = {p.id for p in previous_round.all_players}
    late_arrivals = [p for p in full_roster if p.id not in seen_ids]
    sub_pool.extend(late_arrivals)

    ledger = ledger.with_players(full_roster)

    capacity = court_capacity(in_play, players_per_court)
    filled = sum(len(b) for b in buckets)
    open_spots = max(0, capacity - filled)

    # Longest-waiting first; stable so ties keep pool order
    ranked_pool = sorted(sub_pool, key=lambda p: ledger.count(p.id), reverse=True)
    coming_in = ranked_pool[:open_spots]
    sitting_out = ranked_pool[open_spots:]
    ledger = ledger.with_sat_out(sitting_out)

    in_idx = 0
    for bucket in buckets:
        while len(bucket) < players_per_court and in_idx < len(coming_in):
            bucket.append(coming_in[in_idx])
            in_idx += 1

    next_round = Round(
        round_number=next_round_number,
        courts=tuple(court_from_bucket(i + 1, bucket, players_per_court) for i, bucket in enumerate(buckets)),
        sitting_out=tuple(sitting_out),
    )
    logger.info(
        "King round %s: %s coming in, %s sitting out, %s late arrivals",
        next_round_number,
        len(coming_in),
        len(sitting_out),
        len(late_arrivals),
    )
    return next_round, ledger
