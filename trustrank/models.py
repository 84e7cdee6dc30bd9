from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

ANONYMOUS_ID = "anonymous"


def _normalize_rating(rating: object) -> float | None:
    if rating is None:
        return None
    raw = str(rating).strip()
    # Handle "X/10" format (e.g. "8.5/10")
    if "/" in raw:
        raw = raw.split("/")[0].strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return value


# ── Store-facing records ─────────────────────────────────────────────────


class _Record(BaseModel):
    # numeric ids from tabular stores become strings
    model_config = ConfigDict(coerce_numbers_to_str=True)


class User(_Record):
    id: str = Field(..., min_length=1)
    display_name: str | None = None
    username: str | None = None
    reputation_score: float | None = None


class SocialConnection(_Record):
    follower_id: str = Field(..., min_length=1)
    following_id: str = Field(..., min_length=1)
    active: bool = True
    weight: float | None = Field(default=None, ge=0.0, le=1.0, allow_inf_nan=False)
    kind: str | None = "follow"


class TasteAlignment(_Record):
    other_user_id: str = Field(..., min_length=1)
    similarity: float = Field(..., ge=0.0, le=1.0, allow_inf_nan=False)


class Dish(_Record):
    name: str | None = None
    rating: float | None = None
    notes: str | None = None

    @field_validator("rating", mode="before")
    @classmethod
    def _parse_rating(cls, value: object) -> float | None:
        return _normalize_rating(value)


class Recommendation(_Record):
    id: str = Field(..., min_length=1)
    author_id: str = Field(..., min_length=1)
    restaurant_id: str = Field(..., min_length=1)
    base_trust_score: float = Field(default=0.0, ge=0.0, le=1.0)
    upvotes: int = Field(default=0, ge=0)
    saves: int = Field(default=0, ge=0)
    created_at: datetime
    category: str | None = None
    author_display_name: str | None = None
    author_username: str | None = None
    dishes: list[Dish] = Field(default_factory=list)

    @field_validator("base_trust_score", "upvotes", "saves", mode="before")
    @classmethod
    def _missing_is_zero(cls, value: object) -> object:
        if value is None:
            return 0
        return value

    @field_validator("dishes", mode="before")
    @classmethod
    def _drop_malformed_dishes(cls, value: object) -> list[Dish]:
        if value is None:
            return []
        try:
            entries = list(value)
        except TypeError:
            logger.debug("Ignoring non-list dishes value %r", value)
            return []

        dishes: list[Dish] = []
        for entry in entries:
            try:
                dishes.append(Dish.model_validate(entry))
            except ValidationError:
                logger.debug("Dropping malformed dish entry %r", entry)
        return dishes

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # mixed naive/aware timestamps cannot be compared when sorting
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def display_name(self) -> str:
        return self.author_display_name or self.author_username or "User"


class AuthoredRecommendation(_Record):
    trust_score: float = Field(default=0.0, ge=0.0, le=1.0)
    category: str | None = None

    @field_validator("trust_score", mode="before")
    @classmethod
    def _missing_is_zero(cls, value: object) -> object:
        return 0.0 if value is None else value


# ── Derived, request-scoped views ────────────────────────────────────────


class CredibilityProfile(BaseModel):
    total_recommendations: int = Field(default=0, ge=0)
    avg_trust_score: float = Field(default=0.0, ge=0.0, le=1.0)
    specialties: list[str] = Field(default_factory=list)


class Recommender(BaseModel):
    id: str
    display_name: str
    is_anonymized: bool = False
    taste_match: int | None = None
    social_distance: int | None = None
    credibility: CredibilityProfile | None = None


class ClassifiedRecommendation(BaseModel):
    id: str
    restaurant_id: str
    created_at: datetime
    category: str | None = None
    base_trust_score: float
    upvotes: int = 0
    saves: int = 0
    dishes: list[Dish] = Field(default_factory=list)
    recommender: Recommender

    # Flat mode flags
    is_following: bool = False
    is_followed_by: bool = False
    is_friend: bool = False
    taste_alignment: float | None = None

    # Tiered mode
    taste_match_percent: int | None = None
    tier: int | None = Field(default=None, ge=1, le=3)

    trust_score: float | None = Field(default=None, ge=0.0, le=1.0)

    @property
    def in_network(self) -> bool:
        return self.is_friend or self.is_following or self.is_followed_by


class DishSummary(BaseModel):
    dish_name: str
    avg_rating: float
    recommendation_count: int = Field(..., ge=1)
    top_recommenders: list[str] = Field(default_factory=list)


class TrustScoreResult(BaseModel):
    score: float = Field(..., ge=0.0, le=1.0)
    base_score: float = 0.0
    social_multiplier: float | None = None
    engagement_boost: float = 0.0
    social_distance: int | None = None
    explanation: str
    category: str
    meets_threshold: bool = False


class ReviewStub(BaseModel):
    id: str
    created_at: datetime


class OwnReviews(BaseModel):
    most_recent: Recommendation
    total_reviews: int
    older_reviews: list[ReviewStub] = Field(default_factory=list)


class NetworkStats(BaseModel):
    user_id: str
    direct_connections: int = 0
    follower_count: int = 0
    mutual_count: int = 0
    second_degree_connections: int = 0
    total_network_size: int = 0
    network_density: float = 0.0
