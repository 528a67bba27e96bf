"""
Recommendation reporters: log lines and JSON report files.

Every computed ranking can be handed to a ``RecommendationLogger``.  The line
format is shared by all reporters::

    Computed recommendations for Vince: (Adam {total:19,ageDifference:-6,friendsInCommon:15,sameGender:10}),(Luanne {total:8,ageDifference:-7,friendsInCommon:15})

Partial scores are sorted by name; entries are comma-joined without spaces.

Reporters
---------
LoggingRecommendationLogger     — writes the line to ``logging`` at INFO.
RememberingRecommendationLogger — keeps the last line per subject (tests,
                                  CLI echo).
write_recommendations_json()    — one structured JSON file per ranking.
"""

from __future__ import annotations

import json
import logging
import re
import threading
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Protocol, Sequence, runtime_checkable

from reco_engine.result.recommendation import Recommendation
from reco_engine.utils.time_utils import utc_stamp, utcnow

if TYPE_CHECKING:
    from reco_engine.engine.context import RecommendationContext

logger = logging.getLogger(__name__)

REPORT_SCHEMA_VERSION = "v1"


def format_recommendations(subject: Any, ranked: Sequence[Recommendation]) -> str:
    """Render one ranking as a single report line."""
    return f"Computed recommendations for {subject}: " + ",".join(str(r) for r in ranked)


@runtime_checkable
class RecommendationLogger(Protocol):
    """Receives every ranking the engine computes."""

    def log(
        self,
        subject: Any,
        ranked: Sequence[Recommendation],
        context: Optional["RecommendationContext"] = None,
    ) -> None:
        ...


class LoggingRecommendationLogger:
    """Writes each ranking to a ``logging`` logger."""

    def __init__(self, logger_name: str = __name__, level: int = logging.INFO) -> None:
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def log(
        self,
        subject: Any,
        ranked: Sequence[Recommendation],
        context: Optional["RecommendationContext"] = None,
    ) -> None:
        if self._logger.isEnabledFor(self._level):
            self._logger.log(self._level, format_recommendations(subject, ranked))


class RememberingRecommendationLogger:
    """Remembers the last report line for each subject."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._lines: dict[Any, str] = {}

    def log(
        self,
        subject: Any,
        ranked: Sequence[Recommendation],
        context: Optional["RecommendationContext"] = None,
    ) -> None:
        line = format_recommendations(subject, ranked)
        with self._lock:
            self._lines[subject] = line

    def get(self, subject: Any) -> Optional[str]:
        """Last line logged for ``subject``, or ``None``."""
        with self._lock:
            return self._lines.get(subject)

    def clear(self) -> None:
        with self._lock:
            self._lines.clear()


# ── JSON report ────────────────────────────────────────────────────────────────

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]+")


def write_recommendations_json(
    subject: Any,
    ranked: Sequence[Recommendation],
    output_dir: Path,
    mode: str = "real-time",
    generated_at: datetime | None = None,
) -> Path:
    """Write one ranking to a structured JSON file.

    File name: ``recommendations_{subject}_{YYYYmmddTHHMMSSZ}.json``.

    Args:
        subject:      Subject the ranking was computed for.
        ranked:       Recommendations, best first.
        output_dir:   Target directory (created if missing).
        mode:         Execution mode label stored in the payload.
        generated_at: Timestamp for payload + filename. Defaults to now (UTC).

    Returns:
        Path to the written JSON file.
    """
    if generated_at is None:
        generated_at = utcnow()

    output_dir.mkdir(parents=True, exist_ok=True)
    subject_slug = _UNSAFE_CHARS.sub("_", str(subject)) or "subject"
    json_path = output_dir / f"recommendations_{subject_slug}_{utc_stamp(generated_at)}.json"

    payload: dict = {
        "schema_version":  REPORT_SCHEMA_VERSION,
        "subject":         str(subject),
        "mode":            mode,
        "generated_at":    generated_at.isoformat(),
        "recommendations": ranking_as_dicts(ranked),
    }

    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Recommendation JSON written: %s", json_path)
    return json_path


def ranking_as_dicts(ranked: Sequence[Recommendation]) -> list[dict]:
    return [
        {
            "rank":     rank,
            "item":     str(r.item),
            "total":    r.total,
            "partials": r.score.as_dict(),
        }
        for rank, r in enumerate(ranked, start=1)
    ]
