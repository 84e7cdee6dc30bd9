"""
Async read contracts consumed by the engine.

Rows may be plain mappings or model instances; the facades validate them
before they reach any scoring or ranking code. A store signals a failed read
by raising (ideally ``DataUnavailableError``); the facades take care of the
fallback.
"""
from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol

Row = Mapping[str, Any]


class SocialGraphStore(Protocol):
    async def following(self, user_id: str) -> Iterable[str]:
        """Ids of users that *user_id* actively follows."""

    async def followers(self, user_id: str) -> Iterable[str]:
        """Ids of users that actively follow *user_id*."""

    async def connections(self, follower_id: str, following_id: str) -> list[Row]:
        """Edge rows from *follower_id* to *following_id*, in storage order."""


class TasteAlignmentStore(Protocol):
    async def alignments(self, viewer_id: str) -> Mapping[str, float]:
        """Precomputed similarity from *viewer_id* to other users."""


class RecommendationStore(Protocol):
    async def list_for_restaurant(
        self, restaurant_id: str, exclude_author_id: str | None = None,
    ) -> list[Row]:
        """Recommendations for a restaurant, newest first, with nested dishes."""

    async def get(self, recommendation_id: str) -> Row | None:
        """A single recommendation, or ``None`` if it does not exist."""


class CredibilityStore(Protocol):
    async def list_authored(self, user_id: str) -> list[Row]:
        """``{trust_score, category}`` rows for everything *user_id* wrote."""
