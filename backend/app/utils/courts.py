"""
Court assignment primitive.

Splits an already-ordered list of active players into courts and teams.
Ordering carries the policy (skill, partners); this module applies none.
"""
from typing import List, Sequence, Tuple

from app.models.player import Player
from app.models.round import CourtAssignment


def split_teams(bucket: Sequence[Player], players_per_court: int) -> Tuple[Tuple[Player, ...], Tuple[Player, ...]]:
    """
    Positional split: first half of the bucket is team 1, the rest team 2.
    """
    team_size = players_per_court // 2
    return tuple(bucket[:team_size]), tuple(bucket[team_size:players_per_court])


def court_from_bucket(court_number: int, bucket: Sequence[Player], players_per_court: int) -> CourtAssignment:
    team1, team2 = split_teams(bucket, players_per_court)
    return CourtAssignment(court_number=court_number, team1=team1, team2=team2)


def assign_to_courts(
    active_players: Sequence[Player],
    num_courts: int,
    players_per_court: int,
) -> List[CourtAssignment]:
    """
    Take contiguous chunks of `players_per_court` in input order, one per court.

    Court numbers are 1-based. Caller guarantees
    len(active_players) >= num_courts * players_per_court.
    """
    courts: List[CourtAssignment] = []
    for c in range(num_courts):
        start = c * players_per_court
        chunk = active_players[start:start + players_per_court]
        courts.append(court_from_bucket(c + 1, chunk, players_per_court))
    return courts
