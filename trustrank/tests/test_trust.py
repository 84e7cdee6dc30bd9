from __future__ import annotations

import asyncio

import pandas as pd
import pytest

from trustrank.config import EngineConfig
from trustrank.models import SocialConnection
from trustrank.scoring.trust import (
    TrustScoreCalculator,
    engagement_boost,
    meets_trust_threshold,
    resolve_connection_weight,
    trust_category,
)
from trustrank.social.graph import SocialGraphFacade
from trustrank.stores.frames import FrameSocialGraphStore


def _calculator(edges: list[dict], config: EngineConfig | None = None) -> TrustScoreCalculator:
    config = config or EngineConfig()
    columns = ["follower_id", "following_id", "is_active", "trust_weight"]
    graph = SocialGraphFacade(FrameSocialGraphStore(pd.DataFrame(edges, columns=columns)), config)
    return TrustScoreCalculator(graph, config)


def _edge(follower: str, following: str, weight: float | None = None, active: bool = True) -> dict:
    return {"follower_id": follower, "following_id": following, "is_active": active, "trust_weight": weight}


def test_scenario_a_direct_connection_discounts_base_score(make_recommendation):
    calc = _calculator([_edge("u-viewer", "u-author", 0.75)])
    rec = make_recommendation("u-author", base_trust_score=0.20)

    assert asyncio.run(calc.score(rec, "u-viewer")) == 0.15


def test_unset_connection_weight_defaults_to_075(make_recommendation):
    calc = _calculator([_edge("u-viewer", "u-author", None)])
    rec = make_recommendation("u-author", base_trust_score=0.8)

    result = asyncio.run(calc.explain(rec, "u-viewer"))
    assert result.social_multiplier == 0.75
    assert result.score == 0.6
    assert result.social_distance == 1
    assert result.explanation == "Direct connection"


def test_no_viewer_applies_only_engagement(make_recommendation):
    calc = _calculator([_edge("u-viewer", "u-author", 0.1)])
    rec = make_recommendation("u-author", base_trust_score=0.5, upvotes=1, saves=1)

    result = asyncio.run(calc.explain(rec, None))
    assert result.score == 0.65
    assert result.social_multiplier is None


def test_own_recommendation_has_no_social_multiplier(make_recommendation):
    calc = _calculator([_edge("u-author", "u-author", 0.1)])
    rec = make_recommendation("u-author", base_trust_score=0.42)

    result = asyncio.run(calc.explain(rec, "u-author"))
    assert result.score == 0.42
    assert result.explanation == "Own recommendation"


def test_friend_of_friend_uses_second_hop_weight(make_recommendation):
    # viewer and author both follow the bridge
    calc = _calculator([
        _edge("u-viewer", "u-bridge"),
        _edge("u-author", "u-bridge"),
    ])
    rec = make_recommendation("u-author", base_trust_score=0.8)

    result = asyncio.run(calc.explain(rec, "u-viewer"))
    assert result.score == 0.2
    assert result.social_distance == 2
    assert result.explanation == "Friend of friend"


def test_bridge_following_author_is_not_a_path(make_recommendation):
    # the bridge follows the author, but the author does not follow the bridge
    calc = _calculator([
        _edge("u-viewer", "u-bridge"),
        _edge("u-bridge", "u-author"),
    ])
    rec = make_recommendation("u-author", base_trust_score=0.8)

    assert asyncio.run(calc.score(rec, "u-viewer")) == 0.8


def test_inactive_bridge_edge_is_not_a_path(make_recommendation):
    calc = _calculator([
        _edge("u-viewer", "u-bridge"),
        _edge("u-author", "u-bridge", active=False),
    ])
    rec = make_recommendation("u-author", base_trust_score=0.8)

    assert asyncio.run(calc.score(rec, "u-viewer")) == 0.8



def test_stranger_keeps_base_score(make_recommendation):
    calc = _calculator([])
    rec = make_recommendation("u-author", base_trust_score=0.33, saves=1)

    result = asyncio.run(calc.explain(rec, "u-viewer"))
    assert result.score == 0.38
    assert result.explanation == "No social connection"


def test_inactive_connection_is_ignored(make_recommendation):
    calc = _calculator([_edge("u-viewer", "u-author", 0.1, active=False)])
    rec = make_recommendation("u-author", base_trust_score=0.6)

    assert asyncio.run(calc.score(rec, "u-viewer")) == 0.6


def test_engagement_boost_is_capped(make_recommendation):
    rec = make_recommendation(upvotes=5, saves=10)
    assert engagement_boost(rec) == 0.2


def test_engagement_is_added_after_social_discount(make_recommendation):
    calc = _calculator([_edge("u-viewer", "u-author", 0.5)])
    rec = make_recommendation("u-author", base_trust_score=0.6, upvotes=1)

    # 0.6 * 0.5 + 0.1, not (0.6 + 0.1) * 0.5
    assert asyncio.run(calc.score(rec, "u-viewer")) == 0.4


def test_score_is_clamped_to_one(make_recommendation):
    calc = _calculator([])
    rec = make_recommendation(base_trust_score=0.95, upvotes=4)

    assert asyncio.run(calc.score(rec)) == 1.0


def test_score_is_rounded_to_three_decimals(make_recommendation):
    calc = _calculator([_edge("u-viewer", "u-author", 0.333)])
    rec = make_recommendation("u-author", base_trust_score=0.777)

    score = asyncio.run(calc.score(rec, "u-viewer"))
    assert score == 0.259
    assert 0.0 <= score <= 1.0


def test_missing_recommendation_scores_zero():
    calc = _calculator([])
    result = asyncio.run(calc.explain(None, "u-viewer"))
    assert result.score == 0.0


def test_duplicate_connections_first_row_resolution(make_recommendation):
    # Storage order decides under "first"; this is the historical behaviour
    # and differs from the max_weight default below.
    edges = [_edge("u-viewer", "u-author", 0.2), _edge("u-viewer", "u-author", 0.9)]
    rec = make_recommendation("u-author", base_trust_score=1.0)

    first = _calculator(edges, EngineConfig(connection_resolution="first"))
    assert asyncio.run(first.score(rec, "u-viewer")) == 0.2


def test_duplicate_connections_max_weight_resolution(make_recommendation):
    edges = [_edge("u-viewer", "u-author", 0.2), _edge("u-viewer", "u-author", 0.9)]
    rec = make_recommendation("u-author", base_trust_score=1.0)

    strongest = _calculator(edges, EngineConfig(connection_resolution="max_weight"))
    assert asyncio.run(strongest.score(rec, "u-viewer")) == 0.9


def test_resolve_connection_weight_defaults_missing_weights():
    edges = [
        SocialConnection(follower_id="a", following_id="b", weight=None),
        SocialConnection(follower_id="a", following_id="b", weight=0.5),
    ]
    assert resolve_connection_weight(edges, EngineConfig(connection_resolution="first")) == 0.75
    assert resolve_connection_weight(edges, EngineConfig(connection_resolution="max_weight")) == 0.75


def test_unknown_connection_resolution_is_rejected():
    with pytest.raises(ValueError):
        EngineConfig(connection_resolution="newest")


def test_trust_categories_and_threshold():
    assert trust_category(0.85) == "Highly Trusted"
    assert trust_category(0.6) == "Trusted"
    assert trust_category(0.45) == "Moderately Trusted"
    assert trust_category(0.2) == "Low Trust"
    assert trust_category(0.05) == "Untrusted"
    assert meets_trust_threshold(0.25)
    assert not meets_trust_threshold(0.249)


def test_explain_reports_threshold(make_recommendation):
    calc = _calculator([_edge("u-viewer", "u-author", 0.5)])

    low = asyncio.run(calc.explain(make_recommendation("u-author", base_trust_score=0.4), "u-viewer"))
    assert low.score == 0.2
    assert not low.meets_threshold

    high = asyncio.run(calc.explain(make_recommendation("u-author", base_trust_score=0.6), "u-viewer"))
    assert high.score == 0.3
    assert high.meets_threshold

    assert not asyncio.run(calc.explain(None, "u-viewer")).meets_threshold


def test_unknown_default_mode_is_rejected():
    with pytest.raises(ValueError):
        EngineConfig(default_mode="ranked")
    assert EngineConfig(default_mode="tiered").default_mode == "tiered"
