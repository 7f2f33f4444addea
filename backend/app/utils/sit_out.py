"""
Fair Sit-Out Rotation

When a roster exceeds court capacity, the surplus sits out each round.
Guarantees: no one sits out twice before everyone has sat out once, and
after any number of rounds no two sit-out counts differ by more than 1.

The ledger is the only state that survives between rounds. It is always
passed in and handed back explicitly; nothing here keeps module state.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Sequence

from app.models.player import Player

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SitOutLedger:
    """Player id -> number of rounds sat out so far. Updates return a new ledger."""

    counts: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def for_players(cls, players: Iterable[Player], initial: int = 0) -> "SitOutLedger":
        return cls({p.id: initial for p in players})

    @classmethod
    def from_dict(cls, counts: Mapping[str, int]) -> "SitOutLedger":
        return cls(dict(counts))

    def count(self, player_id: str) -> int:
        return self.counts.get(player_id, 0)

    def with_sat_out(self, players: Iterable[Player]) -> "SitOutLedger":
        """Return a copy with each given player's count incremented by one."""
        updated = dict(self.counts)
        for p in players:
            updated[p.id] = updated.get(p.id, 0) + 1
        return SitOutLedger(updated)

    def with_players(self, players: Iterable[Player]) -> "SitOutLedger":
        """Return a copy that carries an entry (default 0) for every given player."""
        updated = dict(self.counts)
        for p in players:
            updated.setdefault(p.id, 0)
        return SitOutLedger(updated)

    def to_dict(self) -> Dict[str, int]:
        return dict(self.counts)


def pick_sit_outs(
    players: Sequence[Player],
    deficit: int,
    ledger: SitOutLedger,
    rng: random.Random,
) -> List[Player]:
    """
    Pick the `deficit` players with the LOWEST sit-out count.

    Ties are broken by a shuffle, not by id, so no player is systematically
    favoured. Result is in selection order.
    """
    if deficit <= 0:
        return []
    candidates = list(players)
    rng.shuffle(candidates)
    candidates.sort(key=lambda p: ledger.count(p.id))  # stable: shuffle order breaks ties
    return candidates[:deficit]


def compute_sit_out_schedule(
    players: Sequence[Player],
    capacity: int,
    num_rounds: int,
    rng: random.Random,
) -> List[List[Player]]:
    """
    Sit-out list for each of `num_rounds` rounds.

    Args:
        players: Full roster
        capacity: Players the courts hold in one round (courts * players_per_court)
        num_rounds: Rounds to plan
        rng: Randomness source for tie-breaking

    Returns:
        One list per round (empty lists when nobody needs to sit)
    """
    deficit = max(0, len(players) - capacity)
    if deficit == 0:
        return [[] for _ in range(num_rounds)]

    ledger = SitOutLedger.for_players(players)
    schedule: List[List[Player]] = []

    for round_index in range(num_rounds):
        subs = pick_sit_outs(players, deficit, ledger, rng)
        ledger = ledger.with_sat_out(subs)
        schedule.append(subs)
        logger.debug("Round %s sit-outs: %s", round_index + 1, [p.id for p in subs])

    return schedule
