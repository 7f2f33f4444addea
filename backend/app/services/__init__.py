"""
Services Layer

Pure scheduling logic that:
- Accepts rosters, counts and explicit state (ledgers, previous rounds)
- Returns new domain objects; inputs are never mutated
- Does NOT depend on HTTP request/response objects
- Uses an injected random.Random for every shuffle and tiebreak
"""

from app.services.king_of_court import advance_king_round, start_king_round_1
from app.services.schedule_orchestrator import generate_schedule
from app.services.scheduling_rules import (
    InvalidInputError,
    SchedulingError,
    list_allocation_methods,
    players_per_court_for_format,
    preview_capacity,
)

__all__ = [
    "advance_king_round",
    "generate_schedule",
    "start_king_round_1",
    "InvalidInputError",
    "SchedulingError",
    "list_allocation_methods",
    "players_per_court_for_format",
    "preview_capacity",
]
