from __future__ import annotations

import asyncio
import logging

from pydantic import ValidationError

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models import SocialConnection
from ..stores.protocols import SocialGraphStore
from ..stores.reads import guarded_read

logger = logging.getLogger(__name__)


def _id_set(ids: object, what: str) -> set[str]:
    try:
        return {str(i) for i in ids or () if i}
    except (TypeError, ValueError):
        logger.warning("%s returned %r, falling back to empty set", what, type(ids).__name__)
        return set()


class SocialGraphFacade:
    """Read-only view over a SocialGraphStore. Never raises, never writes."""

    def __init__(self, store: SocialGraphStore, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.store = store
        self.config = config

    async def following(self, user_id: str) -> set[str]:
        ids = await guarded_read(
            f"Social graph read (following of {user_id})",
            self.store.following, user_id,
            default=(), timeout=self.config.read_timeout,
        )
        return _id_set(ids, f"Following of {user_id}")

    async def followers(self, user_id: str) -> set[str]:
        ids = await guarded_read(
            f"Social graph read (followers of {user_id})",
            self.store.followers, user_id,
            default=(), timeout=self.config.read_timeout,
        )
        return _id_set(ids, f"Followers of {user_id}")

    async def mutuals(self, user_id: str) -> set[str]:
        following, followers = await asyncio.gather(
            self.following(user_id), self.followers(user_id),
        )
        return following & followers

    async def connections(self, follower_id: str, following_id: str) -> list[SocialConnection]:
        """Active direct edges from *follower_id* to *following_id*, storage order kept."""
        rows = await guarded_read(
            f"Social graph read (connections {follower_id} -> {following_id})",
            self.store.connections, follower_id, following_id,
            default=[], timeout=self.config.read_timeout,
        )
        try:
            rows = list(rows or [])
        except (TypeError, ValueError):
            logger.warning(
                "Connections %s -> %s returned %r, falling back to no edges",
                follower_id, following_id, type(rows).__name__,
            )
            return []

        edges: list[SocialConnection] = []
        for row in rows:
            try:
                edge = SocialConnection.model_validate(row)
            except ValidationError:
                logger.debug("Dropping malformed connection row %r", row)
                continue
            if edge.active:
                edges.append(edge)
        return edges

    async def has_two_hop_path(
        self,
        viewer_id: str,
        author_id: str,
        viewer_following: set[str] | None = None,
    ) -> bool:
        """True if the viewer follows someone the author also follows."""
        if viewer_following is None:
            viewer_following, author_following = await asyncio.gather(
                self.following(viewer_id), self.following(author_id),
            )
        else:
            author_following = await self.following(author_id)
        bridges = (viewer_following & author_following) - {viewer_id, author_id}
        return bool(bridges)
