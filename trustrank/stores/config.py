from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class StoreConfig:
    """
    Location of the processed CSV exports the reference stores load.
    """

    data_dir: Path = Path(os.getenv("TRUSTRANK_DATA_DIR", "data/processed"))
    connections_filename: str = "social_connections.csv"
    alignments_filename: str = "taste_alignments.csv"
    recommendations_filename: str = "recommendations.csv"
    dishes_filename: str = "dishes.csv"
    users_filename: str = "users.csv"

    @property
    def connections_path(self) -> Path:
        return self.data_dir / self.connections_filename

    @property
    def alignments_path(self) -> Path:
        return self.data_dir / self.alignments_filename

    @property
    def recommendations_path(self) -> Path:
        return self.data_dir / self.recommendations_filename

    @property
    def dishes_path(self) -> Path:
        return self.data_dir / self.dishes_filename

    @property
    def users_path(self) -> Path:
        return self.data_dir / self.users_filename


DEFAULT_STORE_CONFIG = StoreConfig()
