"""
Allocation Strategies

Each strategy is a plain function (active players, round context) -> courts.
build_rounds() drives any of them across a session:

1. Ask the sit-out rotation who sits this round
2. Hand the remaining active players to the strategy
3. Record the round

Strategies:
- Random: full shuffle every round
- Skill-Balanced: snake draft by rating so every court gets a spread
- Skill-Clustered: top-rated chunk on court 1, next chunk on court 2, ...
- Partner-Rotating: doubles pairs chosen to minimise repeat partners
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Sequence, Tuple

from app.models.player import Player
from app.models.round import CourtAssignment, Round
from app.models.schedule import AllocationMethod
from app.services.scheduling_rules import DOUBLES_PLAYERS_PER_COURT
from app.utils.courts import assign_to_courts, court_from_bucket
from app.utils.sit_out import compute_sit_out_schedule

logger = logging.getLogger(__name__)

Pair = Tuple[Player, Player]


# ============================================================================
# Round Context
# ============================================================================


@dataclass
class PartnerHistory:
    """Symmetric count of rounds each unordered pair has partnered. Call-local."""

    counts: Dict[FrozenSet[str], int] = field(default_factory=dict)

    def count(self, a: Player, b: Player) -> int:
        return self.counts.get(frozenset((a.id, b.id)), 0)

    def pair_cost(self, pair: Pair) -> int:
        return self.count(pair[0], pair[1])

    def record(self, a: Player, b: Player) -> None:
        key = frozenset((a.id, b.id))
        self.counts[key] = self.counts.get(key, 0) + 1


@dataclass
class RoundContext:
    num_courts: int  # courts in play
    players_per_court: int
    rng: random.Random
    partner_history: PartnerHistory = field(default_factory=PartnerHistory)


Strategy = Callable[[List[Player], RoundContext], List[CourtAssignment]]


# ============================================================================
# Grouping Helpers
# ============================================================================


def sort_by_rating(players: Sequence[Player]) -> List[Player]:
    """Highest rating first; unrated counts as 0. Stable for equal ratings."""
    return sorted(players, key=lambda p: p.sort_rating, reverse=True)


def snake_order(item_count: int, bucket_count: int) -> List[int]:
    """
    Bucket index for each ranked item in snake order.

    3 buckets -> 0,1,2,2,1,0,0,1,2,...
    """
    order: List[int] = []
    idx = 0
    forward = True
    for _ in range(item_count):
        order.append(idx)
        if forward:
            if idx >= bucket_count - 1:
                forward = False
            else:
                idx += 1
        else:
            if idx <= 0:
                forward = True
            else:
                idx -= 1
    return order


def snake_draft_buckets(ranked: Sequence[Player], num_courts: int) -> List[List[Player]]:
    buckets: List[List[Player]] = [[] for _ in range(num_courts)]
    for player, bucket_idx in zip(ranked, snake_order(len(ranked), num_courts)):
        buckets[bucket_idx].append(player)
    return buckets


def cluster_buckets(ranked: Sequence[Player], num_courts: int, players_per_court: int) -> List[List[Player]]:
    return [
        list(ranked[c * players_per_court:(c + 1) * players_per_court])
        for c in range(num_courts)
    ]


def _shuffled(players: Sequence[Player], rng: random.Random) -> List[Player]:
    result = list(players)
    rng.shuffle(result)
    return result


# ============================================================================
# Strategies
# ============================================================================


def assign_random(active: List[Player], ctx: RoundContext) -> List[CourtAssignment]:
    return assign_to_courts(_shuffled(active, ctx.rng), ctx.num_courts, ctx.players_per_court)


def assign_skill_balanced(active: List[Player], ctx: RoundContext) -> List[CourtAssignment]:
    """Snake draft by rating, then shuffle inside each court before splitting teams."""
    buckets = snake_draft_buckets(sort_by_rating(active), ctx.num_courts)
    return [
        court_from_bucket(i + 1, _shuffled(bucket, ctx.rng), ctx.players_per_court)
        for i, bucket in enumerate(buckets)
    ]


def assign_skill_clustered(active: List[Player], ctx: RoundContext) -> List[CourtAssignment]:
    """Similar-caliber players share a court; court 1 is the strongest."""
    buckets = cluster_buckets(sort_by_rating(active), ctx.num_courts, ctx.players_per_court)
    return [
        court_from_bucket(i + 1, _shuffled(bucket, ctx.rng), ctx.players_per_court)
        for i, bucket in enumerate(buckets)
    ]


def _repair_repeat_partners(pairs: List[Pair], history: PartnerHistory) -> List[Pair]:
    """
    Swap partners between two chosen pairs while that lowers the total repeat count.

    Each accepted swap strictly lowers the total, so the loop terminates.
    """
    pairs = list(pairs)
    improved = True
    while improved:
        improved = False
        for i in range(len(pairs)):
            for j in range(i + 1, len(pairs)):
                (a, b), (c, d) = pairs[i], pairs[j]
                current = history.pair_cost(pairs[i]) + history.pair_cost(pairs[j])
                if current == 0:
                    continue
                for p1, p2 in (((a, c), (b, d)), ((a, d), (b, c))):
                    if history.pair_cost(p1) + history.pair_cost(p2) < current:
                        pairs[i], pairs[j] = p1, p2
                        improved = True
                        break
                if improved:
                    break
            if improved:
                break
    return pairs


def select_partner_pairs(
    active: Sequence[Player],
    num_pairs: int,
    history: PartnerHistory,
    rng: random.Random,
) -> List[Pair]:
    """
    Choose `num_pairs` disjoint partner pairs, fewest prior partnerships first.

    Candidates are all unordered pairs sorted by prior count (random tiebreak),
    taken greedily with no player reused, then repaired by pairwise swaps.
    """
    candidates = []
    for i in range(len(active)):
        for j in range(i + 1, len(active)):
            a, b = active[i], active[j]
            candidates.append((history.count(a, b), rng.random(), a, b))
    candidates.sort(key=lambda c: (c[0], c[1]))

    used = set()
    pairs: List[Pair] = []
    for _, _, a, b in candidates:
        if len(pairs) == num_pairs:
            break
        if a.id in used or b.id in used:
            continue
        pairs.append((a, b))
        used.add(a.id)
        used.add(b.id)

    return _repair_repeat_partners(pairs, history)


def assign_partner_rotating(active: List[Player], ctx: RoundContext) -> List[CourtAssignment]:
    """
    Doubles: two low-repeat pairs per court, history updated for each pair.
    Singles: shuffle and pair sequentially (no opponent tracking).
    """
    if ctx.players_per_court != DOUBLES_PLAYERS_PER_COURT:
        return assign_to_courts(_shuffled(active, ctx.rng), ctx.num_courts, ctx.players_per_court)

    pairs = select_partner_pairs(active, ctx.num_courts * 2, ctx.partner_history, ctx.rng)
    courts: List[CourtAssignment] = []
    for c in range(ctx.num_courts):
        p1, p2 = pairs[c * 2], pairs[c * 2 + 1]
        courts.append(CourtAssignment(court_number=c + 1, team1=tuple(p1), team2=tuple(p2)))
        ctx.partner_history.record(*p1)
        ctx.partner_history.record(*p2)
    return courts


STRATEGIES: Dict[AllocationMethod, Strategy] = {
    AllocationMethod.random: assign_random,
    AllocationMethod.dupr_balanced: assign_skill_balanced,
    AllocationMethod.dupr_competitive: assign_skill_clustered,
    AllocationMethod.round_robin: assign_partner_rotating,
}


# ============================================================================
# Round Builder
# ============================================================================


def build_rounds(
    players: Sequence[Player],
    num_courts: int,
    players_per_court: int,
    num_rounds: int,
    strategy: Strategy,
    rng: random.Random,
) -> List[Round]:
    """
    Generate `num_rounds` rounds with `strategy`.

    Args:
        players: Full roster (validated by caller)
        num_courts: Courts in play, already clamped so every court is full
        players_per_court: 2 (singles) or 4 (doubles)
        num_rounds: Rounds to generate
        strategy: One of STRATEGIES
        rng: Randomness source shared by sit-outs and the strategy

    Returns:
        Rounds numbered from 1
    """
    capacity = num_courts * players_per_court
    sit_out_schedule = compute_sit_out_schedule(players, capacity, num_rounds, rng)
    ctx = RoundContext(num_courts=num_courts, players_per_court=players_per_court, rng=rng)

    rounds: List[Round] = []
    for r in range(num_rounds):
        sub_ids = {p.id for p in sit_out_schedule[r]}
        active = [p for p in players if p.id not in sub_ids]
        courts = strategy(active, ctx)
        rounds.append(Round(round_number=r + 1, courts=tuple(courts), sitting_out=tuple(sit_out_schedule[r])))

    return rounds
