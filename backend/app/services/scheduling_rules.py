"""
Scheduling Rules: Single Source of Truth

Input validation, capacity math and the allocation method catalogue.
All other scheduling modules import from here. Do NOT duplicate these rules elsewhere.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from app.models.player import Player
from app.models.schedule import AllocationMethod, GameFormat


class SchedulingError(Exception):
    """Base exception for scheduling errors"""

    pass


class InvalidInputError(SchedulingError, ValueError):
    """Arguments were malformed or insufficient; nothing was generated"""

    pass


# =============================================================================
# Method Catalogue
# =============================================================================

ALLOCATION_LABELS: Dict[AllocationMethod, str] = {
    AllocationMethod.random: "Random",
    AllocationMethod.dupr_balanced: "DUPR Balanced",
    AllocationMethod.dupr_competitive: "DUPR Competitive",
    AllocationMethod.king_of_the_court: "King of the Court",
    AllocationMethod.round_robin: "Round Robin",
}

ALLOCATION_DESCRIPTIONS: Dict[AllocationMethod, str] = {
    AllocationMethod.random: "Shuffle and assign randomly each round",
    AllocationMethod.dupr_balanced: "Mix skill levels per court, high paired with low",
    AllocationMethod.dupr_competitive: "Group similar skill levels on each court",
    AllocationMethod.king_of_the_court: "Winners stay on court 1, losers rotate down",
    AllocationMethod.round_robin: "Rotate partners so everyone plays with everyone",
}

# Methods whose later rounds are driven by submitted results, not generated up front
INTERACTIVE_METHODS = frozenset({AllocationMethod.king_of_the_court})

SINGLES_PLAYERS_PER_COURT = 2
DOUBLES_PLAYERS_PER_COURT = 4

# Note codes attached to generated schedules
NOTE_COURTS_CLAMPED = "COURTS_CLAMPED"


def list_allocation_methods() -> List[Dict[str, object]]:
    """Return the method catalogue in declaration order."""
    return [
        {
            "method": m.value,
            "label": ALLOCATION_LABELS[m],
            "description": ALLOCATION_DESCRIPTIONS[m],
            "interactive": m in INTERACTIVE_METHODS,
        }
        for m in AllocationMethod
    ]


def players_per_court_for_format(game_format: Union[GameFormat, str]) -> int:
    """Singles puts 2 players on a court; every other format plays doubles (4)."""
    try:
        fmt = GameFormat(game_format)
    except ValueError:
        raise InvalidInputError(f"Unknown game format: {game_format!r}")
    return SINGLES_PLAYERS_PER_COURT if fmt == GameFormat.singles else DOUBLES_PLAYERS_PER_COURT


def parse_method(method: Union[AllocationMethod, str]) -> AllocationMethod:
    try:
        return AllocationMethod(method)
    except ValueError:
        raise InvalidInputError(f"Unknown allocation method: {method!r}")


# =============================================================================
# Capacity Rules
# =============================================================================


def court_capacity(num_courts: int, players_per_court: int) -> int:
    return num_courts * players_per_court


def courts_in_play(player_count: int, num_courts: int, players_per_court: int) -> int:
    """
    Number of courts that can actually be filled.

    Under-capacity policy is CLAMP: only full courts are produced, so a request
    for more courts than the roster supports plays fewer courts and the surplus
    players rotate through the sit-out list.
    """
    return max(0, min(num_courts, player_count // players_per_court))


def sit_out_deficit(player_count: int, capacity: int) -> int:
    """Players in excess of what the courts hold in a single round."""
    return max(0, player_count - capacity)


def max_courts_for_roster(player_count: int, players_per_court: int) -> int:
    """Largest court count worth offering an organiser (never below 1)."""
    return (player_count // players_per_court) or 1


@dataclass
class CapacityPreview:
    player_count: int
    requested_courts: int
    courts_in_play: int
    players_per_court: int
    capacity: int
    sit_outs_per_round: int
    max_courts: int
    clamped: bool


def preview_capacity(player_count: int, num_courts: int, players_per_court: int) -> CapacityPreview:
    """
    Capacity summary shown to an organiser before generating.

    Does not require a full roster, so it only validates the counts.
    """
    validate_counts(num_courts, players_per_court)
    if player_count < 0:
        raise InvalidInputError(f"player_count must be >= 0, got {player_count}")

    in_play = courts_in_play(player_count, num_courts, players_per_court)
    capacity = court_capacity(in_play, players_per_court)
    return CapacityPreview(
        player_count=player_count,
        requested_courts=num_courts,
        courts_in_play=in_play,
        players_per_court=players_per_court,
        capacity=capacity,
        sit_outs_per_round=sit_out_deficit(player_count, capacity),
        max_courts=max_courts_for_roster(player_count, players_per_court),
        clamped=in_play < num_courts,
    )


# =============================================================================
# Validation
# =============================================================================


def validate_counts(num_courts: int, players_per_court: int, num_rounds: Optional[int] = None) -> None:
    if num_courts < 1:
        raise InvalidInputError(f"num_courts must be >= 1, got {num_courts}")
    if players_per_court not in (SINGLES_PLAYERS_PER_COURT, DOUBLES_PLAYERS_PER_COURT):
        raise InvalidInputError(
            f"players_per_court must be {SINGLES_PLAYERS_PER_COURT} (singles) or "
            f"{DOUBLES_PLAYERS_PER_COURT} (doubles), got {players_per_court}"
        )
    if num_rounds is not None and num_rounds < 1:
        raise InvalidInputError(f"num_rounds must be >= 1, got {num_rounds}")


def validate_roster(players: Sequence[Player], players_per_court: int) -> None:
    """
    Roster must fill at least one court and carry unique player ids.

    Raises InvalidInputError before any schedule state is built.
    """
    if len(players) < players_per_court:
        raise InvalidInputError(
            f"Need at least {players_per_court} players, got {len(players)}"
        )

    seen = set()
    duplicates = []
    for p in players:
        if p.id in seen:
            duplicates.append(p.id)
        seen.add(p.id)
    if duplicates:
        raise InvalidInputError(f"Duplicate player ids in roster: {sorted(set(duplicates))}")


def validate_schedule_request(
    players: Sequence[Player],
    num_courts: int,
    players_per_court: int,
    num_rounds: Optional[int] = None,
) -> None:
    validate_counts(num_courts, players_per_court, num_rounds)
    validate_roster(players, players_per_court)
