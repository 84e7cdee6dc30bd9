from __future__ import annotations

from datetime import datetime, timezone

import numpy as np
import pandas as pd
import pytest

from trustrank.config import EngineConfig
from trustrank.engine import TrustRankEngine
from trustrank.models import Dish, Recommendation
from trustrank.stores.frames import (
    FrameCredibilityStore,
    FrameRecommendationStore,
    FrameSocialGraphStore,
    FrameTasteAlignmentStore,
)

# Viewer is u-ana.
#   u-bruno  mutual friend          alignment 0.82
#   u-carla  stranger               alignment 0.95
#   u-davi   ana follows davi       alignment 0.55
#   u-elis   elis follows ana       alignment 0.40
#   u-fabio  inactive follow only   no alignment
#   u-gabi   mutual with davi       alignment 0.85

USER_ROWS = [
    {"id": "u-ana", "display_name": "Ana", "username": "ana"},
    {"id": "u-bruno", "display_name": "Bruno", "username": "bruno"},
    {"id": "u-carla", "display_name": "Carla", "username": "carla"},
    {"id": "u-davi", "display_name": "Davi", "username": "davi"},
    {"id": "u-elis", "display_name": "Elis", "username": "elis"},
    {"id": "u-fabio", "display_name": None, "username": "fabio"},
    {"id": "u-gabi", "display_name": "Gabi", "username": "gabi"},
]

CONNECTION_ROWS = [
    {"follower_id": "u-ana", "following_id": "u-bruno", "is_active": True, "trust_weight": 0.9, "connection_type": "follow"},
    {"follower_id": "u-bruno", "following_id": "u-ana", "is_active": True, "trust_weight": np.nan, "connection_type": "follow"},
    {"follower_id": "u-ana", "following_id": "u-davi", "is_active": True, "trust_weight": np.nan, "connection_type": "follow"},
    {"follower_id": "u-elis", "following_id": "u-ana", "is_active": True, "trust_weight": np.nan, "connection_type": "follow"},
    {"follower_id": "u-ana", "following_id": "u-fabio", "is_active": False, "trust_weight": 0.5, "connection_type": "follow"},
    {"follower_id": "u-davi", "following_id": "u-gabi", "is_active": True, "trust_weight": np.nan, "connection_type": "follow"},
    {"follower_id": "u-gabi", "following_id": "u-davi", "is_active": True, "trust_weight": np.nan, "connection_type": "follow"},
]

ALIGNMENT_ROWS = [
    {"user_id": "u-ana", "compared_user_id": "u-bruno", "similarity_score": 0.82},
    {"user_id": "u-ana", "compared_user_id": "u-carla", "similarity_score": 0.95},
    {"user_id": "u-ana", "compared_user_id": "u-davi", "similarity_score": 0.55},
    {"user_id": "u-ana", "compared_user_id": "u-elis", "similarity_score": 0.40},
    {"user_id": "u-ana", "compared_user_id": "u-gabi", "similarity_score": 0.85},
    {"user_id": "u-bruno", "compared_user_id": "u-carla", "similarity_score": 0.90},
]

RECOMMENDATION_ROWS = [
    {"id": "rec-1", "restaurant_id": "rest-1", "author_id": "u-bruno", "trust_score": 0.6, "upvotes_count": 1, "saves_count": 0, "created_at": "2024-05-06T12:00:00Z", "category": "Brazilian"},
    {"id": "rec-2", "restaurant_id": "rest-1", "author_id": "u-carla", "trust_score": 0.5, "upvotes_count": 0, "saves_count": 2, "created_at": "2024-05-05T12:00:00Z", "category": "Brazilian"},
    {"id": "rec-3", "restaurant_id": "rest-1", "author_id": "u-davi", "trust_score": 0.4, "upvotes_count": 0, "saves_count": 0, "created_at": "2024-05-04T12:00:00Z", "category": "Italian"},
    {"id": "rec-4", "restaurant_id": "rest-1", "author_id": "u-elis", "trust_score": 0.3, "upvotes_count": 0, "saves_count": 0, "created_at": "2024-05-03T12:00:00Z", "category": "Brazilian"},
    {"id": "rec-5", "restaurant_id": "rest-1", "author_id": "u-fabio", "trust_score": 0.7, "upvotes_count": 0, "saves_count": 0, "created_at": "2024-05-02T12:00:00Z", "category": "Japanese"},
    {"id": "rec-6", "restaurant_id": "rest-1", "author_id": "u-ana", "trust_score": 0.8, "upvotes_count": 0, "saves_count": 0, "created_at": "2024-05-01T12:00:00Z", "category": "Brazilian"},
    {"id": "rec-7", "restaurant_id": "rest-1", "author_id": "u-gabi", "trust_score": 0.9, "upvotes_count": 3, "saves_count": 0, "created_at": "2024-04-30T12:00:00Z", "category": "Italian"},
    {"id": "rec-8", "restaurant_id": "rest-2", "author_id": "u-carla", "trust_score": 0.9, "upvotes_count": 0, "saves_count": 0, "created_at": "2024-03-01T12:00:00Z", "category": "Italian"},
    {"id": "rec-9", "restaurant_id": "rest-1", "author_id": "u-ana", "trust_score": 0.5, "upvotes_count": 0, "saves_count": 0, "created_at": "2024-04-01T12:00:00Z", "category": None},
]

DISH_ROWS = [
    {"recommendation_id": "rec-1", "name": "Feijoada", "rating": 8},
    {"recommendation_id": "rec-1", "name": "Pão de queijo", "rating": 9},
    {"recommendation_id": "rec-2", "name": "Feijoada", "rating": 9},
    {"recommendation_id": "rec-3", "name": "Feijoada", "rating": 7},
    {"recommendation_id": "rec-3", "name": "feijoada", "rating": 6},
    {"recommendation_id": "rec-4", "name": "Feijoada", "rating": 10},
    {"recommendation_id": "rec-4", "name": "Caipirinha", "rating": np.nan},
    {"recommendation_id": "rec-5", "name": "Pão de queijo", "rating": 7},
    {"recommendation_id": "rec-6", "name": "Feijoada", "rating": 2},
    {"recommendation_id": "rec-7", "name": "Feijoada", "rating": 9},
    {"recommendation_id": "rec-7", "name": np.nan, "rating": 8},
]


@pytest.fixture
def frames() -> dict[str, pd.DataFrame]:
    return {
        "users": pd.DataFrame(USER_ROWS),
        "connections": pd.DataFrame(CONNECTION_ROWS),
        "alignments": pd.DataFrame(ALIGNMENT_ROWS),
        "recommendations": pd.DataFrame(RECOMMENDATION_ROWS),
        "dishes": pd.DataFrame(DISH_ROWS),
    }


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig(read_timeout=1.0, connection_resolution="max_weight", default_mode="flat")


@pytest.fixture
def engine(frames, engine_config) -> TrustRankEngine:
    return TrustRankEngine(
        social_store=FrameSocialGraphStore(frames["connections"]),
        taste_store=FrameTasteAlignmentStore(frames["alignments"]),
        recommendation_store=FrameRecommendationStore(
            frames["recommendations"], frames["dishes"], frames["users"],
        ),
        credibility_store=FrameCredibilityStore(frames["recommendations"]),
        config=engine_config,
    )


@pytest.fixture
def make_recommendation():
    """Factory for Recommendation records with sensible defaults."""
    counter = {"n": 0}

    def _make(author_id: str = "u-author", **overrides) -> Recommendation:
        counter["n"] += 1
        dishes = overrides.pop("dishes", [])
        fields = {
            "id": f"r-{counter['n']}",
            "author_id": author_id,
            "restaurant_id": "rest-1",
            "base_trust_score": 0.5,
            "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
            "author_display_name": author_id.removeprefix("u-").title(),
            **overrides,
        }
        return Recommendation(
            **fields,
            dishes=[d if isinstance(d, Dish) else Dish(**d) for d in dishes],
        )

    return _make
