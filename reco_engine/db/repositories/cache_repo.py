"""
Repository for ``cached_recommendations``.
"""

from __future__ import annotations

import logging
from typing import Optional

from reco_engine.db.repositories.base import BaseRepository
from reco_engine.models.cache import CachedRanking

logger = logging.getLogger(__name__)


class CachedRecommendationRepository(BaseRepository):
    """Read/write access to ``cached_recommendations`` (one row per subject)."""

    def upsert(self, ranking: CachedRanking, max_recommendations: Optional[int] = None) -> None:
        """Insert or replace the ranking stored for ``ranking.subject_key``."""
        self.execute(
            """
            INSERT INTO cached_recommendations (
                subject_key, payload_json, item_count, max_recommendations, computed_at
            ) VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (subject_key) DO UPDATE SET
                payload_json        = excluded.payload_json,
                item_count          = excluded.item_count,
                max_recommendations = excluded.max_recommendations,
                computed_at         = excluded.computed_at;
            """,
            (
                ranking.subject_key,
                ranking.model_dump_json(),
                len(ranking.entries),
                max_recommendations,
                ranking.computed_at.isoformat(),
            ),
        )

    def get(self, subject_key: str) -> Optional[CachedRanking]:
        """Return the stored ranking for ``subject_key``, or ``None``.

        Raises:
            pydantic.ValidationError: If the stored payload is corrupt.
        """
        row = self.fetchone(
            "SELECT payload_json FROM cached_recommendations WHERE subject_key = ?;",
            (subject_key,),
        )
        if row is None:
            return None
        return CachedRanking.model_validate_json(row["payload_json"])

    def delete(self, subject_key: str) -> bool:
        cursor = self.execute(
            "DELETE FROM cached_recommendations WHERE subject_key = ?;", (subject_key,)
        )
        return cursor.rowcount > 0

    def count(self) -> int:
        row = self.fetchone("SELECT COUNT(*) AS n FROM cached_recommendations;")
        return int(row["n"]) if row is not None else 0

    def list_subject_keys(self) -> list[str]:
        rows = self.fetchall(
            "SELECT subject_key FROM cached_recommendations ORDER BY subject_key;"
        )
        return [row["subject_key"] for row in rows]
