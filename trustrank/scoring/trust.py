"""
Personalized trust score for a single recommendation.

The stored base score is first discounted by how close the viewer is to the
author in the social graph, then an engagement boost is added:

* direct follow (viewer -> author):   ``base × connection weight`` (0.75 if unset)
* friend of friend (viewer and author both follow m): ``base × 0.25``
* own recommendation / no viewer:     no social factor
* always:                             ``+ min(0.2, upvotes × 0.1 + saves × 0.05)``

The result is capped at 1.0 and rounded to 3 decimals.
"""
from __future__ import annotations

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models import Recommendation, SocialConnection, TrustScoreResult
from ..numeric import round_half_up
from ..social.graph import SocialGraphFacade

TRUST_CATEGORIES: list[tuple[float, str]] = [
    (0.8, "Highly Trusted"),
    (0.6, "Trusted"),
    (0.4, "Moderately Trusted"),
    (0.2, "Low Trust"),
]


def trust_category(score: float) -> str:
    """Human-readable bucket for a [0, 1] trust score."""
    for floor, label in TRUST_CATEGORIES:
        if score >= floor:
            return label
    return "Untrusted"


def meets_trust_threshold(score: float, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> bool:
    return score >= config.min_trust_threshold


def engagement_boost(recommendation: Recommendation, config: EngineConfig = DEFAULT_ENGINE_CONFIG) -> float:
    raw = recommendation.upvotes * config.upvote_weight + recommendation.saves * config.save_weight
    return min(config.max_engagement_boost, raw)


def resolve_connection_weight(
    edges: list[SocialConnection], config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> float:
    """Pick the multiplier to use when one or more direct edges exist."""
    default = config.default_connection_weight

    def _weight(edge: SocialConnection) -> float:
        return default if edge.weight is None else edge.weight

    if config.connection_resolution == "first":
        return _weight(edges[0])
    return max(_weight(e) for e in edges)


class TrustScoreCalculator:
    def __init__(self, graph: SocialGraphFacade, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.graph = graph
        self.config = config

    async def explain(
        self,
        recommendation: Recommendation | None,
        viewer_id: str | None = None,
        viewer_following: set[str] | None = None,
    ) -> TrustScoreResult:
        """
        Score *recommendation* for *viewer_id* and describe how.

        *viewer_following* lets a caller scoring many recommendations for the
        same viewer reuse one following-set read for the 2-hop check.
        """
        if recommendation is None:
            return TrustScoreResult(
                score=0.0, explanation="Recommendation not found", category=trust_category(0.0),
            )

        score = recommendation.base_trust_score
        multiplier: float | None = None
        distance: int | None = None

        if not viewer_id:
            explanation = "Anonymous viewer"
        elif viewer_id == recommendation.author_id:
            explanation = "Own recommendation"
        else:
            edges = await self.graph.connections(viewer_id, recommendation.author_id)
            if edges:
                multiplier = resolve_connection_weight(edges, self.config)
                distance = 1
                explanation = "Direct connection"
            elif await self.graph.has_two_hop_path(
                viewer_id, recommendation.author_id, viewer_following,
            ):
                multiplier = self.config.second_hop_weight
                distance = 2
                explanation = "Friend of friend"
            else:
                explanation = "No social connection"

        if multiplier is not None:
            score *= multiplier

        boost = engagement_boost(recommendation, self.config)
        final = round_half_up(min(1.0, score + boost), 3)

        return TrustScoreResult(
            score=final,
            base_score=recommendation.base_trust_score,
            social_multiplier=multiplier,
            engagement_boost=round_half_up(boost, 3),
            social_distance=distance,
            explanation=explanation,
            category=trust_category(final),
            meets_threshold=meets_trust_threshold(final, self.config),
        )

    async def score(
        self,
        recommendation: Recommendation | None,
        viewer_id: str | None = None,
        viewer_following: set[str] | None = None,
    ) -> float:
        result = await self.explain(recommendation, viewer_id, viewer_following)
        return result.score
