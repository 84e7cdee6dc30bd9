"""
pandas-backed reference stores.

Each store wraps an in-memory DataFrame using the production column names
(``follower_id``/``following_id``/``is_active``/``trust_weight``,
``user_id``/``compared_user_id``/``similarity_score``, ...) and hands the
facades plain dict rows. ``build_engine_from_csv`` loads the processed CSV
exports once and wires a ready engine.
"""
from __future__ import annotations

from typing import Any

import pandas as pd
from pydantic import ValidationError

from ..config import DEFAULT_ENGINE_CONFIG, EngineConfig
from ..engine import TrustRankEngine
from ..models import User
from .config import DEFAULT_STORE_CONFIG, StoreConfig

CONNECTION_COLUMNS = {
    "is_active": "active",
    "trust_weight": "weight",
    "connection_type": "kind",
}

RECOMMENDATION_COLUMNS = {
    "trust_score": "base_trust_score",
    "upvotes_count": "upvotes",
    "saves_count": "saves",
}


def _records(frame: pd.DataFrame) -> list[dict[str, Any]]:
    """DataFrame rows as dicts, with NaN/NaT turned into None."""
    if frame.empty:
        return []
    return frame.astype(object).where(frame.notna(), None).to_dict("records")


def _as_str_ids(frame: pd.DataFrame, *columns: str) -> pd.DataFrame:
    frame = frame.copy()
    for col in columns:
        if col in frame.columns:
            frame[col] = frame[col].where(frame[col].isna(), frame[col].astype(str))
    return frame


class FrameSocialGraphStore:
    def __init__(self, connections: pd.DataFrame):
        df = _as_str_ids(connections, "follower_id", "following_id")
        if "is_active" not in df.columns:
            df["is_active"] = True
        df["is_active"] = df["is_active"].fillna(True).astype(bool)
        self._df = df

    async def following(self, user_id: str) -> list[str]:
        df = self._df
        mask = (df["follower_id"] == user_id) & df["is_active"]
        return df.loc[mask, "following_id"].dropna().tolist()

    async def followers(self, user_id: str) -> list[str]:
        df = self._df
        mask = (df["following_id"] == user_id) & df["is_active"]
        return df.loc[mask, "follower_id"].dropna().tolist()

    async def connections(self, follower_id: str, following_id: str) -> list[dict[str, Any]]:
        df = self._df
        mask = (df["follower_id"] == follower_id) & (df["following_id"] == following_id)
        return _records(df.loc[mask].rename(columns=CONNECTION_COLUMNS))


class FrameTasteAlignmentStore:
    def __init__(self, alignments: pd.DataFrame):
        self._df = _as_str_ids(alignments, "user_id", "compared_user_id")

    async def alignments(self, viewer_id: str) -> dict[str, float]:
        rows = self._df.loc[self._df["user_id"] == viewer_id]
        return dict(zip(rows["compared_user_id"], rows["similarity_score"]))


class FrameRecommendationStore:
    def __init__(
        self,
        recommendations: pd.DataFrame,
        dishes: pd.DataFrame | None = None,
        users: pd.DataFrame | None = None,
    ):
        df = _as_str_ids(recommendations, "id", "restaurant_id", "author_id")
        df["created_at"] = pd.to_datetime(df["created_at"], utc=True, errors="coerce")
        df = df.rename(columns=RECOMMENDATION_COLUMNS)

        names = self._user_names(users)
        df["author_display_name"] = df["author_id"].map(lambda a: names.get(a, (None, None))[0])
        df["author_username"] = df["author_id"].map(lambda a: names.get(a, (None, None))[1])
        self._df = df

        self._dishes: dict[str, list[dict[str, Any]]] = {}
        if dishes is not None and not dishes.empty:
            dish_df = _as_str_ids(dishes, "recommendation_id")
            for row in _records(dish_df):
                rec_id = row.pop("recommendation_id")
                self._dishes.setdefault(rec_id, []).append(row)

    @staticmethod
    def _user_names(users: pd.DataFrame | None) -> dict[str, tuple[str | None, str | None]]:
        if users is None or users.empty:
            return {}
        names: dict[str, tuple[str | None, str | None]] = {}
        for row in _records(users):
            try:
                user = User.model_validate(row)
            except ValidationError:
                continue
            names[user.id] = (user.display_name, user.username)
        return names

    def _with_dishes(self, frame: pd.DataFrame) -> list[dict[str, Any]]:
        rows = _records(frame)
        for row in rows:
            row["dishes"] = list(self._dishes.get(row["id"], []))
        return rows

    async def list_for_restaurant(
        self, restaurant_id: str, exclude_author_id: str | None = None,
    ) -> list[dict[str, Any]]:
        df = self._df
        mask = df["restaurant_id"] == str(restaurant_id)
        if exclude_author_id:
            mask &= df["author_id"] != exclude_author_id
        subset = df.loc[mask].sort_values("created_at", ascending=False, kind="mergesort")
        return self._with_dishes(subset)

    async def get(self, recommendation_id: str) -> dict[str, Any] | None:
        rows = self._with_dishes(self._df.loc[self._df["id"] == str(recommendation_id)])
        return rows[0] if rows else None


class FrameCredibilityStore:
    def __init__(self, recommendations: pd.DataFrame, category_column: str = "category"):
        self._df = _as_str_ids(recommendations, "author_id")
        self.category_column = category_column

    async def list_authored(self, user_id: str) -> list[dict[str, Any]]:
        rows = self._df.loc[self._df["author_id"] == user_id]
        category = (
            rows[self.category_column]
            if self.category_column in rows.columns
            else pd.Series(None, index=rows.index, dtype=object)
        )
        frame = pd.DataFrame({"trust_score": rows.get("trust_score"), "category": category})
        return _records(frame)


def _read_optional(path) -> pd.DataFrame | None:
    return pd.read_csv(path) if path.exists() else None


def build_engine_from_csv(
    store_config: StoreConfig = DEFAULT_STORE_CONFIG,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> TrustRankEngine:
    """Load the processed CSV exports and wire an engine over them."""
    connections = pd.read_csv(store_config.connections_path)
    alignments = pd.read_csv(store_config.alignments_path)
    recommendations = pd.read_csv(store_config.recommendations_path)
    dishes = _read_optional(store_config.dishes_path)
    users = _read_optional(store_config.users_path)

    return TrustRankEngine(
        social_store=FrameSocialGraphStore(connections),
        taste_store=FrameTasteAlignmentStore(alignments),
        recommendation_store=FrameRecommendationStore(recommendations, dishes, users),
        credibility_store=FrameCredibilityStore(recommendations),
        config=config,
    )
