from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from app.models.player import Player


@dataclass(frozen=True)
class CourtAssignment:
    court_number: int  # 1-based, contiguous within a round
    team1: Tuple[Player, ...]
    team2: Tuple[Player, ...]

    @property
    def players(self) -> Tuple[Player, ...]:
        return self.team1 + self.team2

    def team(self, selector: int) -> Tuple[Player, ...]:
        """Return team 1 or team 2."""
        return self.team1 if selector == 1 else self.team2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "court_number": self.court_number,
            "team1": [p.to_dict() for p in self.team1],
            "team2": [p.to_dict() for p in self.team2],
        }


@dataclass(frozen=True)
class Round:
    round_number: int
    courts: Tuple[CourtAssignment, ...]
    sitting_out: Tuple[Player, ...] = ()

    @property
    def active_players(self) -> List[Player]:
        return [p for court in self.courts for p in court.players]

    @property
    def all_players(self) -> List[Player]:
        """Every player in the round: courts in order, then the sitting-out list."""
        return self.active_players + list(self.sitting_out)

    def court(self, court_number: int) -> Optional[CourtAssignment]:
        for c in self.courts:
            if c.court_number == court_number:
                return c
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_number": self.round_number,
            "courts": [c.to_dict() for c in self.courts],
            "sitting_out": [p.to_dict() for p in self.sitting_out],
        }
