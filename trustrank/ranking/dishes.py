from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..models import DishSummary, Recommendation
from ..numeric import round_half_up

logger = logging.getLogger(__name__)


@dataclass
class _DishGroup:
    ratings: list[float] = field(default_factory=list)
    total_rating: float = 0.0
    count: int = 0
    # dict keys as an insertion-ordered set
    recommenders: dict[str, None] = field(default_factory=dict)


def _format_recommenders(names: list[str], limit: int) -> list[str]:
    top = names[:limit]
    remaining = len(names) - limit
    if remaining > 0:
        top.append(f"{remaining} other{'s' if remaining > 1 else ''}")
    return top


def aggregate_dishes(
    recommendations: list[Recommendation],
    viewer_id: str | None = None,
    alignments: dict[str, float] | None = None,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> list[DishSummary]:
    """
    Group dish entries by exact name and rank them by average rating.

    With a viewer, the viewer's own recommendations are dropped and only
    authors with a computed taste alignment contribute. Entries with no
    name or no usable rating are skipped.
    """
    alignments = alignments or {}
    groups: dict[str, _DishGroup] = {}
    skipped = 0

    for rec in recommendations:
        if viewer_id and rec.author_id == viewer_id:
            continue
        if viewer_id and rec.author_id not in alignments:
            continue

        for dish in rec.dishes:
            if not dish.name or dish.rating is None:
                skipped += 1
                continue
            group = groups.setdefault(dish.name, _DishGroup())
            group.ratings.append(dish.rating)
            group.total_rating += dish.rating
            group.count += 1
            group.recommenders[rec.display_name] = None

    if skipped:
        logger.debug("Skipped %d malformed dish entries", skipped)

    summaries = [
        DishSummary(
            dish_name=name,
            avg_rating=round_half_up(group.total_rating / group.count, 1),
            recommendation_count=group.count,
            top_recommenders=_format_recommenders(
                list(group.recommenders), config.top_recommenders_limit,
            ),
        )
        for name, group in groups.items()
    ]
    summaries.sort(key=lambda s: s.avg_rating, reverse=True)
    return summaries
