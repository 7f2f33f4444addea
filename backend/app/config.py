import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


def cors_origins() -> List[str]:
    """Localhost defaults plus any comma-separated CORS_ORIGINS."""
    origins = list(DEFAULT_CORS_ORIGINS)
    extra = os.getenv("CORS_ORIGINS", "")
    if extra:
        origins.extend(o.strip() for o in extra.split(",") if o.strip())
    return origins


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Seed used by the HTTP surface when a request does not carry one (unset = unseeded)
SCHEDULE_SEED = _optional_int("SCHEDULE_SEED")

MAX_ROUNDS = int(os.getenv("MAX_ROUNDS", "50"))
MAX_COURTS = int(os.getenv("MAX_COURTS", "32"))
