"""
Engine service exposed to the API layer.

Build one ``TrustRankEngine`` at process start with its stores and pass it to
request handlers. Every public operation:

1. validates its identifiers (``InvalidInputError`` on failure),
2. fans the independent store reads out concurrently and waits for all of them,
3. runs the pure scoring / ranking step on the materialized inputs.

Failed or slow reads fall back to empty defaults inside the facades, so apart
from input validation no operation raises to its caller.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Mapping

from pydantic import ValidationError

from .config import DEFAULT_ENGINE_CONFIG, EngineConfig
from .errors import InvalidInputError
from .models import (
    ClassifiedRecommendation,
    CredibilityProfile,
    DishSummary,
    NetworkStats,
    OwnReviews,
    Recommendation,
    ReviewStub,
    TrustScoreResult,
)
from .numeric import round_half_up
from .ranking.classifier import ClassificationContext, ClassificationMode, get_strategy
from .ranking.dishes import aggregate_dishes
from .recommendations.reader import RecommendationReader
from .scoring.credibility import CredibilityProfileBuilder
from .scoring.trust import TrustScoreCalculator
from .social.graph import SocialGraphFacade
from .stores.protocols import (
    CredibilityStore,
    RecommendationStore,
    SocialGraphStore,
    TasteAlignmentStore,
)
from .taste.alignment import TasteAlignmentFacade

logger = logging.getLogger(__name__)


def _require_id(value: Any, name: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{name} is required")
    return str(value).strip()


def _optional_id(value: Any) -> str | None:
    if value is None or not str(value).strip():
        return None
    return str(value).strip()


def _elapsed_ms(start: float) -> float:
    return round((time.time() - start) * 1000, 1)


class TrustRankEngine:
    def __init__(
        self,
        social_store: SocialGraphStore,
        taste_store: TasteAlignmentStore,
        recommendation_store: RecommendationStore,
        credibility_store: CredibilityStore,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ):
        self.config = config
        self.graph = SocialGraphFacade(social_store, config)
        self.taste = TasteAlignmentFacade(taste_store, config)
        self.reader = RecommendationReader(recommendation_store, credibility_store, config)
        self.trust = TrustScoreCalculator(self.graph, config)
        self.credibility = CredibilityProfileBuilder(self.reader, config)

    # ── Trust scores ─────────────────────────────────────────────────────

    async def _resolve_recommendation(
        self, recommendation: Recommendation | Mapping[str, Any] | str | None,
    ) -> Recommendation | None:
        if recommendation is None or isinstance(recommendation, Recommendation):
            return recommendation
        if isinstance(recommendation, str):
            return await self.reader.get(_require_id(recommendation, "recommendation_id"))
        try:
            return Recommendation.model_validate(recommendation)
        except ValidationError as exc:
            raise InvalidInputError(f"Malformed recommendation: {exc.errors()}") from exc

    async def explain_trust_score(
        self,
        recommendation: Recommendation | Mapping[str, Any] | str | None,
        viewer_id: str | None = None,
    ) -> TrustScoreResult:
        rec = await self._resolve_recommendation(recommendation)
        return await self.trust.explain(rec, _optional_id(viewer_id))

    async def compute_trust_score(
        self,
        recommendation: Recommendation | Mapping[str, Any] | str | None,
        viewer_id: str | None = None,
    ) -> float:
        """
        Personalized trust score in [0, 1], rounded to 3 decimals.

        *recommendation* may be a record, a raw mapping, or an id to look up;
        an id that cannot be found scores 0.
        """
        result = await self.explain_trust_score(recommendation, viewer_id)
        return result.score

    # ── Classification ───────────────────────────────────────────────────

    async def classify(
        self,
        restaurant_id: str,
        viewer_id: str,
        mode: ClassificationMode | str | None = None,
        include_trust: bool = True,
    ) -> list[ClassifiedRecommendation]:
        """Other people's recommendations for a restaurant, ordered for *viewer_id*."""
        start = time.time()
        restaurant_id = _require_id(restaurant_id, "restaurant_id")
        viewer_id = _require_id(viewer_id, "viewer_id")
        strategy = get_strategy(mode or self.config.default_mode, self.config)

        recommendations, following, followers, alignments = await asyncio.gather(
            self.reader.for_restaurant(restaurant_id, exclude_author_id=viewer_id),
            self.graph.following(viewer_id),
            self.graph.followers(viewer_id),
            self.taste.alignments(viewer_id),
        )

        context = ClassificationContext(
            viewer_id=viewer_id,
            recommendations=recommendations,
            following=following,
            followers=followers,
            alignments=alignments,
        )
        results = strategy.classify(context)

        by_id = {rec.id: rec for rec in recommendations}
        await self._attach_credibility(results, by_id)
        if include_trust:
            await self._attach_trust(results, by_id, viewer_id, following)

        logger.debug(
            "Classified %d/%d recommendations for restaurant %s (%s mode) in %.1f ms",
            len(results), len(recommendations), restaurant_id,
            strategy.mode.value, _elapsed_ms(start),
        )
        return results

    async def _attach_credibility(
        self,
        results: list[ClassifiedRecommendation],
        by_id: dict[str, Recommendation],
    ) -> None:
        anonymized = [r for r in results if r.recommender.is_anonymized]
        if not anonymized:
            return
        author_ids = list(dict.fromkeys(by_id[r.id].author_id for r in anonymized))
        profiles = await asyncio.gather(*(self.credibility.build(a) for a in author_ids))
        by_author = dict(zip(author_ids, profiles))
        for item in anonymized:
            item.recommender.credibility = by_author[by_id[item.id].author_id]

    async def _attach_trust(
        self,
        results: list[ClassifiedRecommendation],
        by_id: dict[str, Recommendation],
        viewer_id: str,
        following: set[str],
    ) -> None:
        scores = await asyncio.gather(*(
            self.trust.score(by_id[item.id], viewer_id, following) for item in results
        ))
        for item, score in zip(results, scores):
            item.trust_score = score

    # ── Dishes ───────────────────────────────────────────────────────────

    async def aggregate_dishes(
        self, restaurant_id: str, viewer_id: str | None = None,
    ) -> list[DishSummary]:
        """Ranked dish summary; with a viewer, only taste-aligned authors count."""
        start = time.time()
        restaurant_id = _require_id(restaurant_id, "restaurant_id")
        viewer_id = _optional_id(viewer_id)

        if viewer_id:
            recommendations, alignments = await asyncio.gather(
                self.reader.for_restaurant(restaurant_id, exclude_author_id=viewer_id),
                self.taste.alignments(viewer_id),
            )
        else:
            recommendations = await self.reader.for_restaurant(restaurant_id)
            alignments = {}

        dishes = aggregate_dishes(recommendations, viewer_id, alignments, self.config)
        logger.debug(
            "Aggregated %d dishes for restaurant %s in %.1f ms",
            len(dishes), restaurant_id, _elapsed_ms(start),
        )
        return dishes

    # ── Authors ──────────────────────────────────────────────────────────

    async def build_credibility_profile(self, user_id: str) -> CredibilityProfile:
        return await self.credibility.build(_require_id(user_id, "user_id"))

    async def own_reviews(self, restaurant_id: str, viewer_id: str) -> OwnReviews | None:
        """The viewer's own recommendations for a restaurant, newest first."""
        restaurant_id = _require_id(restaurant_id, "restaurant_id")
        viewer_id = _require_id(viewer_id, "viewer_id")

        recommendations = await self.reader.for_restaurant(restaurant_id)
        own = sorted(
            (r for r in recommendations if r.author_id == viewer_id),
            key=lambda r: r.created_at,
            reverse=True,
        )
        if not own:
            return None
        return OwnReviews(
            most_recent=own[0],
            total_reviews=len(own),
            older_reviews=[ReviewStub(id=r.id, created_at=r.created_at) for r in own[1:]],
        )

    async def network_stats(self, user_id: str) -> NetworkStats:
        user_id = _require_id(user_id, "user_id")
        following, followers = await asyncio.gather(
            self.graph.following(user_id), self.graph.followers(user_id),
        )

        ordered = sorted(following)
        second_hop = await asyncio.gather(*(self.graph.following(f) for f in ordered))
        second_degree: set[str] = set()
        for ids in second_hop:
            second_degree |= ids
        second_degree -= following | {user_id}

        total_users = len(followers) + len(following)
        density = len(following) / total_users if total_users > 1 else 0.0

        return NetworkStats(
            user_id=user_id,
            direct_connections=len(following),
            follower_count=len(followers),
            mutual_count=len(following & followers),
            second_degree_connections=len(second_degree),
            total_network_size=len(following) + len(second_degree),
            network_density=round_half_up(density, 3),
        )
