"""
Schedule Orchestrator: one call, one complete schedule.

Pipeline:
1. Validate roster and counts
2. Clamp courts so every court in play is full
3. Dispatch to the allocation strategy for the method
4. Assemble the Schedule

King of the Court only gets Round 1 here; later rounds are driven by
submitted winners through king_of_court.advance_king_round().

No side effects. Calling again with the same inputs regenerates an
independent schedule (identical only when the rng is seeded identically).
"""

import logging
import random
from typing import List, Optional, Sequence, Union

from app.models.player import Player
from app.models.round import Round
from app.models.schedule import AllocationMethod, Schedule, ScheduleNote
from app.services.allocation_strategies import STRATEGIES, build_rounds
from app.services.king_of_court import start_king_round_1
from app.services.scheduling_rules import (
    NOTE_COURTS_CLAMPED,
    courts_in_play,
    parse_method,
    validate_schedule_request,
)

logger = logging.getLogger(__name__)


def generate_schedule(
    players: Sequence[Player],
    num_courts: int,
    num_rounds: int,
    method: Union[AllocationMethod, str],
    players_per_court: int,
    rng: Optional[random.Random] = None,
) -> Schedule:
    """
    Generate a full multi-round schedule.

    Args:
        players: Confirmed roster (unique ids, at least one court's worth)
        num_courts: Courts requested
        num_rounds: Rounds to generate (ignored for King of the Court)
        method: Allocation method
        players_per_court: 2 (singles) or 4 (doubles)
        rng: Randomness source; a fresh unseeded Random when omitted

    Returns:
        Schedule with rounds numbered from 1

    Raises:
        InvalidInputError: If validation fails (nothing is generated)
    """
    method = parse_method(method)
    validate_schedule_request(players, num_courts, players_per_court, num_rounds)
    rng = rng or random.Random()

    in_play = courts_in_play(len(players), num_courts, players_per_court)
    notes: List[ScheduleNote] = []
    if in_play < num_courts:
        message = (
            f"{len(players)} players fill {in_play} of {num_courts} requested courts "
            f"at {players_per_court} per court; extra courts left empty"
        )
        notes.append(ScheduleNote(code=NOTE_COURTS_CLAMPED, message=message))
        logger.warning("Courts clamped: %s", message)

    if method == AllocationMethod.king_of_the_court:
        round_1, _ = start_king_round_1(players, num_courts, players_per_court, rng=rng)
        rounds: List[Round] = [round_1]
    else:
        rounds = build_rounds(players, in_play, players_per_court, num_rounds, STRATEGIES[method], rng)

    logger.info(
        "Generated %s schedule: %s rounds, %s players, %s/%s courts",
        method.value,
        len(rounds),
        len(players),
        in_play,
        num_courts,
    )

    return Schedule(
        method=method,
        players_per_court=players_per_court,
        total_players=len(players),
        total_courts=num_courts,
        courts_in_play=in_play,
        rounds=tuple(rounds),
        notes=tuple(notes),
    )
