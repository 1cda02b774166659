"""
Follow Ranker Core Library.

This package tracks the authenticated user's GitHub follow graph, caches
relations and profiles locally, and ranks accounts by impact score.

Usage:
    # Config
    from follow_ranker.config import get_settings, Settings

    # Logging
    from follow_ranker.logging import get_logger, configure_logging

    # Pipeline
    from follow_ranker.services import FollowGraphService, EnrichmentPipeline
"""

__version__ = "1.0.0"

# Users should import directly from submodules:
#   from follow_ranker.config import get_settings
#   from follow_ranker.cache import RelationCacheStore
#   from follow_ranker.services import FollowGraphService
