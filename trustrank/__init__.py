"""
Trust-and-ranking engine for crowd-sourced restaurant recommendations.

Responsibilities:
- Score each recommendation for a viewer (social distance + engagement).
- Classify other people's recommendations for a restaurant (flat or tiered).
- Aggregate dish ratings across recommendations, filtered by taste alignment.
- Build credibility snapshots for recommendation authors.
"""
from __future__ import annotations

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .engine import TrustRankEngine
from .errors import DataUnavailableError, InvalidInputError, TrustRankError
from .ranking.classifier import ClassificationMode

__all__ = [
    "ClassificationMode",
    "DEFAULT_ENGINE_CONFIG",
    "DataUnavailableError",
    "EngineConfig",
    "InvalidInputError",
    "TrustRankEngine",
    "TrustRankError",
]
