from app.models.player import Player
from app.models.round import CourtAssignment, Round
from app.models.schedule import AllocationMethod, GameFormat, Schedule, ScheduleNote

__all__ = [
    "Player",
    "CourtAssignment",
    "Round",
    "AllocationMethod",
    "GameFormat",
    "Schedule",
    "ScheduleNote",
]
