"""
API Routes for Session Scheduling

Stateless: every request carries the roster and any King of the Court state
(previous round + ledger); nothing is stored between requests.
"""

import logging
import random
from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, field_validator, model_validator

from app.config import MAX_COURTS, MAX_ROUNDS, SCHEDULE_SEED
from app.models.player import Player
from app.models.round import CourtAssignment, Round
from app.models.schedule import AllocationMethod, GameFormat
from app.services.king_of_court import advance_king_round, start_king_round_1
from app.services.schedule_orchestrator import generate_schedule
from app.services.scheduling_rules import (
    InvalidInputError,
    list_allocation_methods,
    players_per_court_for_format,
    preview_capacity,
)
from app.utils.sit_out import SitOutLedger

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request Models
# ============================================================================


class PlayerIn(BaseModel):
    id: str
    name: str
    rating: Optional[float] = None
    avatar_url: Optional[str] = None

    @field_validator("id")
    @classmethod
    def validate_id(cls, v):
        if not v or not v.strip():
            raise ValueError("player id cannot be empty")
        return v

    def to_player(self) -> Player:
        return Player(id=self.id, name=self.name, rating=self.rating, avatar_url=self.avatar_url)


class CourtIn(BaseModel):
    court_number: int
    team1: List[PlayerIn]
    team2: List[PlayerIn]

    def to_court(self) -> CourtAssignment:
        return CourtAssignment(
            court_number=self.court_number,
            team1=tuple(p.to_player() for p in self.team1),
            team2=tuple(p.to_player() for p in self.team2),
        )


class RoundIn(BaseModel):
    round_number: int
    courts: List[CourtIn]
    sitting_out: List[PlayerIn] = []

    def to_round(self) -> Round:
        return Round(
            round_number=self.round_number,
            courts=tuple(c.to_court() for c in sorted(self.courts, key=lambda c: c.court_number)),
            sitting_out=tuple(p.to_player() for p in self.sitting_out),
        )


class CourtFormatRequest(BaseModel):
    """Either players_per_court or game_format; explicit players_per_court wins."""

    num_courts: int
    players_per_court: Optional[int] = None
    game_format: Optional[GameFormat] = None

    @field_validator("num_courts")
    @classmethod
    def validate_num_courts(cls, v):
        if v > MAX_COURTS:
            raise ValueError(f"num_courts must be <= {MAX_COURTS}")
        return v

    @model_validator(mode="after")
    def validate_format(self):
        if self.players_per_court is None and self.game_format is None:
            raise ValueError("players_per_court or game_format is required")
        return self

    def resolved_players_per_court(self) -> int:
        if self.players_per_court is not None:
            return self.players_per_court
        return players_per_court_for_format(self.game_format)


class PreviewRequest(CourtFormatRequest):
    player_count: int


class RosterRequest(CourtFormatRequest):
    players: List[PlayerIn]
    seed: Optional[int] = None

    def roster(self) -> List[Player]:
        return [p.to_player() for p in self.players]

    def rng(self) -> random.Random:
        seed = self.seed if self.seed is not None else SCHEDULE_SEED
        return random.Random(seed) if seed is not None else random.Random()


class GenerateRequest(RosterRequest):
    method: AllocationMethod
    num_rounds: int = 1

    @field_validator("num_rounds")
    @classmethod
    def validate_num_rounds(cls, v):
        if v > MAX_ROUNDS:
            raise ValueError(f"num_rounds must be <= {MAX_ROUNDS}")
        return v


class KingAdvanceRequest(CourtFormatRequest):
    previous_round: RoundIn
    winners_by_court: Dict[int, int]
    players: List[PlayerIn]
    next_round_number: int
    ledger: Dict[str, int] = {}


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/schedule/methods")
def get_allocation_methods():
    """Allocation methods with display labels and descriptions."""
    return {"methods": list_allocation_methods()}


@router.post("/schedule/preview")
def post_capacity_preview(request: PreviewRequest):
    """How many courts will be filled and how many players sit out each round."""
    try:
        preview = preview_capacity(request.player_count, request.num_courts, request.resolved_players_per_court())
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return asdict(preview)


@router.post("/schedule/generate")
def post_generate_schedule(request: GenerateRequest):
    """
    Generate a complete schedule.

    Calling again with the same body regenerates; pass `seed` for a
    reproducible result. King of the Court returns Round 1 only.
    """
    try:
        schedule = generate_schedule(
            request.roster(),
            request.num_courts,
            request.num_rounds,
            request.method,
            request.resolved_players_per_court(),
            rng=request.rng(),
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return schedule.to_dict()


@router.post("/schedule/king/start")
def post_king_start(request: RosterRequest):
    """King of the Court round 1 plus the initial sit-out ledger."""
    try:
        round_1, ledger = start_king_round_1(
            request.roster(),
            request.num_courts,
            request.resolved_players_per_court(),
            rng=request.rng(),
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"round": round_1.to_dict(), "ledger": ledger.to_dict()}


@router.post("/schedule/king/advance")
def post_king_advance(request: KingAdvanceRequest):
    """
    Next King of the Court round from the previous round's winners.

    The returned ledger must be sent back with the following advance request.
    """
    try:
        next_round, ledger = advance_king_round(
            request.previous_round.to_round(),
            request.winners_by_court,
            [p.to_player() for p in request.players],
            request.num_courts,
            request.resolved_players_per_court(),
            request.next_round_number,
            SitOutLedger.from_dict(request.ledger),
        )
    except InvalidInputError as e:
        logger.info("King advance rejected: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return {"round": next_round.to_dict(), "ledger": ledger.to_dict()}
