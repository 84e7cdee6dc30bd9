"""
Classification of other people's recommendations for a restaurant.

Two policies share one interface so the caller can pick either per request:

* **Flat** (``ClassificationMode.FLAT``)
  Every recommendation is kept and flagged with the viewer's relationship to
  the author (following / followed-by / mutual friend) plus the raw taste
  alignment. Ordering is in-network first, then alignment, then recency.

* **Tiered** (``ClassificationMode.TIERED``)
  "Friend" means the viewer follows the author. Recommendations are bucketed:

  ========  ===========================  =====================
  Tier      Rule                         Author shown as
  ========  ===========================  =====================
  1         friend, match >= 70%         themselves
  2         not friend, match >= 80%     anonymous label
  3         friend, match < 70%          themselves
  (none)    anything else                excluded
  ========  ===========================  =====================

Strategies are pure functions of a ClassificationContext; reads and
credibility enrichment happen in the engine.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..errors import InvalidInputError
from ..models import ANONYMOUS_ID, ClassifiedRecommendation, Recommendation, Recommender
from ..numeric import percent

logger = logging.getLogger(__name__)


class ClassificationMode(str, Enum):
    FLAT = "flat"
    TIERED = "tiered"


@dataclass(slots=True)
class ClassificationContext:
    """Materialized inputs for one viewer and one restaurant."""

    viewer_id: str
    recommendations: list[Recommendation]
    following: set[str] = field(default_factory=set)
    followers: set[str] = field(default_factory=set)
    alignments: dict[str, float] = field(default_factory=dict)

    @property
    def mutuals(self) -> set[str]:
        return self.following & self.followers

    def others(self) -> list[Recommendation]:
        return [r for r in self.recommendations if r.author_id != self.viewer_id]


class ClassificationStrategy(Protocol):
    mode: ClassificationMode

    def classify(self, context: ClassificationContext) -> list[ClassifiedRecommendation]:
        """Return the ordered view for the context's viewer."""


def _base_fields(rec: Recommendation) -> dict:
    return {
        "id": rec.id,
        "restaurant_id": rec.restaurant_id,
        "created_at": rec.created_at,
        "category": rec.category,
        "base_trust_score": rec.base_trust_score,
        "upvotes": rec.upvotes,
        "saves": rec.saves,
        "dishes": list(rec.dishes),
    }


class FlatStrategy:
    mode = ClassificationMode.FLAT

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.config = config

    def classify(self, context: ClassificationContext) -> list[ClassifiedRecommendation]:
        mutuals = context.mutuals
        results: list[ClassifiedRecommendation] = []
        for rec in context.others():
            alignment = context.alignments.get(rec.author_id, 0.0)
            results.append(ClassifiedRecommendation(
                **_base_fields(rec),
                recommender=Recommender(
                    id=rec.author_id,
                    display_name=rec.display_name,
                    taste_match=percent(alignment),
                ),
                is_following=rec.author_id in context.following,
                is_followed_by=rec.author_id in context.followers,
                is_friend=rec.author_id in mutuals,
                taste_alignment=alignment,
            ))

        results.sort(
            key=lambda r: (r.in_network, r.taste_alignment, r.created_at),
            reverse=True,
        )
        return results


class TieredStrategy:
    mode = ClassificationMode.TIERED

    def __init__(self, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.config = config

    def _tier_for(self, is_friend: bool, match: int) -> int | None:
        if is_friend and match >= self.config.tier1_min_match:
            return 1
        if not is_friend and match >= self.config.tier2_min_match:
            return 2
        if is_friend:
            return 3
        return None

    def classify(self, context: ClassificationContext) -> list[ClassifiedRecommendation]:
        tiers: dict[int, list[ClassifiedRecommendation]] = {1: [], 2: [], 3: []}
        skipped = 0

        for rec in context.others():
            is_friend = rec.author_id in context.following
            alignment = context.alignments.get(rec.author_id)
            match = percent(alignment) if alignment is not None else 0

            tier = self._tier_for(is_friend, match)
            if tier is None:
                skipped += 1
                continue

            if tier == 2:
                recommender = Recommender(
                    id=ANONYMOUS_ID,
                    display_name=f"Anonymous user with {match}% taste match",
                    is_anonymized=True,
                    taste_match=match,
                )
            else:
                recommender = Recommender(
                    id=rec.author_id,
                    display_name=rec.display_name,
                    taste_match=match,
                    social_distance=1,
                )

            tiers[tier].append(ClassifiedRecommendation(
                **_base_fields(rec),
                recommender=recommender,
                is_following=is_friend,
                is_friend=is_friend,
                taste_match_percent=match,
                tier=tier,
            ))

        logger.debug(
            "Tiered view for %s: tier1=%d tier2=%d tier3=%d skipped=%d",
            context.viewer_id, len(tiers[1]), len(tiers[2]), len(tiers[3]), skipped,
        )

        ordered: list[ClassifiedRecommendation] = []
        for tier in (1, 2, 3):
            # stable sort: equal matches keep newest-first input order
            ordered.extend(sorted(tiers[tier], key=lambda r: r.taste_match_percent, reverse=True))
        return ordered


def group_by_tier(results: list[ClassifiedRecommendation]) -> dict[int, list[ClassifiedRecommendation]]:
    """Split a tiered result back into its three buckets."""
    grouped: dict[int, list[ClassifiedRecommendation]] = {1: [], 2: [], 3: []}
    for item in results:
        if item.tier in grouped:
            grouped[item.tier].append(item)
    return grouped


STRATEGIES: dict[ClassificationMode, type] = {
    ClassificationMode.FLAT: FlatStrategy,
    ClassificationMode.TIERED: TieredStrategy,
}


def get_strategy(
    mode: ClassificationMode | str, config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> ClassificationStrategy:
    try:
        resolved = ClassificationMode(mode)
    except ValueError:
        raise InvalidInputError(
            f"Unknown classification mode {mode!r}; expected one of "
            f"{[m.value for m in ClassificationMode]}"
        ) from None
    return STRATEGIES[resolved](config)
