from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Player:
    """A confirmed participant in a session. Supplied by the caller, never mutated."""

    id: str
    name: str
    rating: Optional[float] = None  # DUPR rating; None when the player has no rating
    avatar_url: Optional[str] = None

    @property
    def sort_rating(self) -> float:
        """Rating used for skill ordering (unrated players sort as 0)."""
        return self.rating if self.rating is not None else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "rating": self.rating,
            "avatar_url": self.avatar_url,
        }
