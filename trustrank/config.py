from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

CONNECTION_RESOLUTIONS = ("first", "max_weight")
CLASSIFICATION_MODES = ("flat", "tiered")


@dataclass(frozen=True)
class EngineConfig:
    # Social weighting
    default_connection_weight: float = 0.75
    second_hop_weight: float = 0.25
    connection_resolution: str = os.getenv("TRUSTRANK_CONNECTION_RESOLUTION", "max_weight")

    # Engagement boost
    upvote_weight: float = 0.1
    save_weight: float = 0.05
    max_engagement_boost: float = 0.2

    # Tiered classification thresholds (percent)
    tier1_min_match: int = 70
    tier2_min_match: int = 80

    top_recommenders_limit: int = 3
    specialties_limit: int = 3
    min_trust_threshold: float = 0.25

    read_timeout: float = float(os.getenv("TRUSTRANK_READ_TIMEOUT", "2.0"))
    default_mode: str = os.getenv("TRUSTRANK_DEFAULT_MODE", "flat")

    def __post_init__(self) -> None:
        if self.connection_resolution not in CONNECTION_RESOLUTIONS:
            raise ValueError(
                f"connection_resolution must be one of {CONNECTION_RESOLUTIONS}, "
                f"got {self.connection_resolution!r}"
            )
        if self.default_mode not in CLASSIFICATION_MODES:
            raise ValueError(
                f"default_mode must be one of {CLASSIFICATION_MODES}, got {self.default_mode!r}"
            )


DEFAULT_ENGINE_CONFIG = EngineConfig()
