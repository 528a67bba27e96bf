"""
Tests for reco_engine/reporting/reporter.py and utils/logging.py.

What we test
------------
format_recommendations():
  - Exact line format; empty ranking.
LoggingRecommendationLogger:
  - Emits the line at INFO.
RememberingRecommendationLogger:
  - Keeps only the last line per subject; clear().
write_recommendations_json():
  - Writes a timestamped file with rank/item/total/partials.
_JsonFormatter:
  - One JSON object per record, extras included.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from reco_engine.reporting.reporter import (
    LoggingRecommendationLogger,
    RecommendationLogger,
    RememberingRecommendationLogger,
    format_recommendations,
    write_recommendations_json,
)
from reco_engine.result.recommendation import Recommendation
from reco_engine.result.score import Score
from reco_engine.utils.logging import _JsonFormatter


# ── Helpers ───────────────────────────────────────────────────────────────────

def _ranked() -> list[Recommendation]:
    return [
        Recommendation("Adam", Score({"friendsInCommon": 15, "sameGender": 10, "ageDifference": -6})),
        Recommendation("Luanne", Score({"friendsInCommon": 15, "ageDifference": -7})),
    ]


EXPECTED = (
    "Computed recommendations for Vince: "
    "(Adam {total:19,ageDifference:-6,friendsInCommon:15,sameGender:10}),"
    "(Luanne {total:8,ageDifference:-7,friendsInCommon:15})"
)


class TestFormat:
    def test_line(self):
        assert format_recommendations("Vince", _ranked()) == EXPECTED

    def test_empty(self):
        assert format_recommendations("Bob", []) == "Computed recommendations for Bob: "


class TestLoggers:
    def test_logging_logger(self, caplog):
        reporter = LoggingRecommendationLogger("reco_engine.test")
        assert isinstance(reporter, RecommendationLogger)
        with caplog.at_level(logging.INFO, logger="reco_engine.test"):
            reporter.log("Vince", _ranked())
        assert EXPECTED in caplog.text

    def test_remembering_logger_keeps_last(self):
        reporter = RememberingRecommendationLogger()
        reporter.log("Vince", _ranked()[1:])
        reporter.log("Vince", _ranked())
        reporter.log("Adam", [])
        assert reporter.get("Vince") == EXPECTED
        assert reporter.get("Nobody") is None
        reporter.clear()
        assert reporter.get("Vince") is None


class TestJsonReport:
    def test_write(self, tmp_path):
        generated_at = datetime(2026, 2, 24, 15, 0, tzinfo=timezone.utc)
        path = write_recommendations_json(
            "Vince", _ranked(), tmp_path / "out", mode="precomputed", generated_at=generated_at
        )

        assert path.name == "recommendations_Vince_20260224T150000Z.json"
        payload = json.loads(path.read_text())
        assert payload["subject"] == "Vince"
        assert payload["mode"] == "precomputed"
        assert payload["recommendations"][0] == {
            "rank": 1, "item": "Adam", "total": 19,
            "partials": {"ageDifference": -6, "friendsInCommon": 15, "sameGender": 10},
        }
        assert payload["recommendations"][1]["rank"] == 2

    def test_unsafe_subject_in_filename(self, tmp_path):
        path = write_recommendations_json("a/b c", [], tmp_path)
        assert "/" not in path.name.removeprefix("recommendations_")
        assert path.exists()


class TestJsonFormatter:
    def test_one_object_with_extras(self):
        record = logging.LogRecord("reco_engine.x", logging.INFO, __file__, 1,
                                   "hello %s", ("world",), None)
        record.subject = "Vince"
        payload = json.loads(_JsonFormatter().format(record))
        assert payload["msg"] == "hello world"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "reco_engine.x"
        assert payload["subject"] == "Vince"
        assert "args" not in payload
