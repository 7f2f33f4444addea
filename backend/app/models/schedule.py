from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

from app.models.round import Round


class AllocationMethod(str, Enum):
    random = "random"
    dupr_balanced = "dupr_balanced"
    dupr_competitive = "dupr_competitive"
    king_of_the_court = "king_of_the_court"
    round_robin = "round_robin"


class GameFormat(str, Enum):
    singles = "singles"
    doubles = "doubles"
    mixed_doubles = "mixed_doubles"
    round_robin = "round_robin"
    open_play = "open_play"


@dataclass(frozen=True)
class ScheduleNote:
    """Non-fatal remark attached to a generated schedule (e.g. COURTS_CLAMPED)."""

    code: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}


@dataclass(frozen=True)
class Schedule:
    method: AllocationMethod
    players_per_court: int
    total_players: int
    total_courts: int  # as requested
    courts_in_play: int  # actually filled each round (<= total_courts)
    rounds: Tuple[Round, ...]
    notes: Tuple[ScheduleNote, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method.value,
            "players_per_court": self.players_per_court,
            "total_players": self.total_players,
            "total_courts": self.total_courts,
            "courts_in_play": self.courts_in_play,
            "rounds": [r.to_dict() for r in self.rounds],
            "notes": [n.to_dict() for n in self.notes],
        }
