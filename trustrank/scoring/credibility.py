from __future__ import annotations

import logging
from collections import Counter

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models import AuthoredRecommendation, CredibilityProfile
from ..numeric import round_half_up
from ..recommendations.reader import RecommendationReader

logger = logging.getLogger(__name__)


def summarize_credibility(
    authored: list[AuthoredRecommendation],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> CredibilityProfile:
    """Reduce an author's history to counts, mean trust and top categories."""
    if not authored:
        return CredibilityProfile()

    avg = sum(r.trust_score for r in authored) / len(authored)

    # most_common keeps first-seen order for equal counts
    category_counter: Counter[str] = Counter()
    for r in authored:
        if r.category:
            category_counter[r.category] += 1
    specialties = [name for name, _ in category_counter.most_common(config.specialties_limit)]

    return CredibilityProfile(
        total_recommendations=len(authored),
        avg_trust_score=round_half_up(avg, 1),
        specialties=specialties,
    )


class CredibilityProfileBuilder:
    def __init__(self, reader: RecommendationReader, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.reader = reader
        self.config = config

    async def build(self, user_id: str) -> CredibilityProfile:
        authored = await self.reader.authored_by(user_id)
        profile = summarize_credibility(authored, self.config)
        logger.debug(
            "Credibility for %s: %d recommendations, avg %.1f",
            user_id, profile.total_recommendations, profile.avg_trust_score,
        )
        return profile
