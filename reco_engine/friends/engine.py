"""
Assembly of the friend-recommendation engine from configuration.

    graph  = PeopleGraph.from_json(Path(config.data.graph_file))
    engine = build_friends_engine(graph, config)
    engine.recommend(graph.get("Vince"), limit=2)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from reco_engine.config import AppConfig
from reco_engine.engine.delegating import DelegatingEngine
from reco_engine.engine.registry import build_units
from reco_engine.engine.top_level import RecommendationEngine
from reco_engine.friends import units as _units  # noqa: F401  (registers the units)
from reco_engine.friends.blacklists import ExcludeSelf, ExistingFriends
from reco_engine.friends.post_processors import (
    PenalizeAgeDifference,
    RewardSameGender,
    RewardSameLocation,
)
from reco_engine.graph.people import PeopleGraph

if TYPE_CHECKING:
    from reco_engine.cache.base import CacheStore
    from reco_engine.reporting.reporter import RecommendationLogger

logger = logging.getLogger(__name__)


def build_friends_engine(
    graph: PeopleGraph,
    config: Optional[AppConfig] = None,
    cache: Optional["CacheStore"] = None,
    reporter: Optional["RecommendationLogger"] = None,
    seed: Optional[int] = None,
) -> RecommendationEngine:
    """Build the full friend-recommendation pipeline.

    Args:
        graph:    Social graph supplying people and friendships.
        config:   Application config; defaults to ``AppConfig()``.
        cache:    Store backing precomputed mode; optional.
        reporter: Receives every computed ranking; optional.
        seed:     Seed for the ``random_people`` unit.

    Raises:
        KeyError: If ``engine.units`` names an unregistered unit.
    """
    config = config or AppConfig()

    units = build_units(config.engine.units, graph=graph, seed=seed)
    delegate = DelegatingEngine.from_config(units, config.engine, name="friends")
    logger.debug("Built %r", delegate)

    return RecommendationEngine(
        delegate,
        post_processors=[RewardSameGender(), RewardSameLocation(), PenalizeAgeDifference()],
        blacklists=[ExistingFriends(graph)],
        filters=[ExcludeSelf()],
        cache=cache,
        reporter=reporter,
        default_limit=config.engine.default_limit,
        max_precomputed=config.precompute.max_recommendations,
    )
