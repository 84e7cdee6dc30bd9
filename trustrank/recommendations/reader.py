from __future__ import annotations

import logging
from typing import Any, Iterable

from pydantic import BaseModel, ValidationError

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models import AuthoredRecommendation, Recommendation
from ..stores.protocols import CredibilityStore, RecommendationStore
from ..stores.reads import guarded_read

logger = logging.getLogger(__name__)


def _validate_rows(model: type[BaseModel], rows: Iterable[Any], what: str) -> list[Any]:
    try:
        rows = list(rows or [])
    except (TypeError, ValueError):
        logger.warning("%s read returned %r, falling back to no rows", what, type(rows).__name__)
        return []

    valid = []
    for row in rows:
        try:
            valid.append(model.model_validate(row))
        except ValidationError as exc:
            logger.debug("Dropping malformed %s row: %s", what, exc.errors())
    return valid


class RecommendationReader:
    def __init__(
        self,
        recommendations: RecommendationStore,
        credibility: CredibilityStore,
        config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    ):
        self.recommendations = recommendations
        self.credibility = credibility
        self.config = config

    async def for_restaurant(
        self, restaurant_id: str, exclude_author_id: str | None = None,
    ) -> list[Recommendation]:
        rows = await guarded_read(
            f"Recommendation read for restaurant {restaurant_id}",
            self.recommendations.list_for_restaurant, restaurant_id, exclude_author_id,
            default=[], timeout=self.config.read_timeout,
        )
        recs = _validate_rows(Recommendation, rows, "recommendation")
        if exclude_author_id:
            recs = [r for r in recs if r.author_id != exclude_author_id]
        return recs

    async def get(self, recommendation_id: str) -> Recommendation | None:
        row = await guarded_read(
            f"Recommendation read for {recommendation_id}",
            self.recommendations.get, recommendation_id,
            default=None, timeout=self.config.read_timeout,
        )
        if row is None:
            return None
        found = _validate_rows(Recommendation, [row], "recommendation")
        return found[0] if found else None

    async def authored_by(self, user_id: str) -> list[AuthoredRecommendation]:
        rows = await guarded_read(
            f"Credibility read for {user_id}",
            self.credibility.list_authored, user_id,
            default=[], timeout=self.config.read_timeout,
        )
        return _validate_rows(AuthoredRecommendation, rows, "authored recommendation")
