from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


@dataclass(frozen=True)
class ResolutionConfig:
    environment: str = os.getenv("RECENGINE_ENV", "development")
    # History/exclude lookup sets keep only this many keys each
    lookup_cap: int = int(os.getenv("RECENGINE_LOOKUP_CAP", "80"))
    fallback_max_count: int = int(os.getenv("RECENGINE_FALLBACK_MAX_COUNT", "10"))
    cache_ttl_seconds: float = float(os.getenv("RECENGINE_CACHE_TTL", "300"))
    feedback_trigger_probability: float = float(os.getenv("RECENGINE_FEEDBACK_PROBABILITY", "0.6"))
    feedback_min_seconds_away: int = int(os.getenv("RECENGINE_FEEDBACK_MIN_SECONDS", "30"))

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


DEFAULT_RESOLUTION_CONFIG = ResolutionConfig()
