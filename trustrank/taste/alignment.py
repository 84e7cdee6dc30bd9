from __future__ import annotations

import logging

from pydantic import ValidationError

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models import TasteAlignment
from ..stores.protocols import TasteAlignmentStore
from ..stores.reads import guarded_read

logger = logging.getLogger(__name__)


class TasteAlignmentFacade:
    def __init__(self, store: TasteAlignmentStore, config: EngineConfig = DEFAULT_ENGINE_CONFIG):
        self.store = store
        self.config = config

    async def alignments(self, viewer_id: str) -> dict[str, float]:
        """
        Similarity from *viewer_id* to every user with a computed signal.

        An author missing from the result has no signal and must not pass
        any taste threshold. Values outside [0, 1] are dropped as unknown.
        """
        raw = await guarded_read(
            f"Taste alignment read for {viewer_id}",
            self.store.alignments, viewer_id,
            default={}, timeout=self.config.read_timeout,
        )
        try:
            pairs = dict(raw or {})
        except (TypeError, ValueError):
            logger.warning("Taste alignment read for %s returned %r, ignoring", viewer_id, type(raw))
            return {}

        result: dict[str, float] = {}
        for other_id, similarity in pairs.items():
            try:
                entry = TasteAlignment(other_user_id=str(other_id), similarity=similarity)
            except ValidationError:
                logger.debug("Dropping invalid alignment %r -> %r", other_id, similarity)
                continue
            result[entry.other_user_id] = entry.similarity
        return result
