"""
Core services.

Services provide a clean interface over the caches and the GitHub client.
"""

from follow_ranker.services.enrichment import EnrichmentPipeline, EnrichmentResult, rank_rows
from follow_ranker.services.follow_graph import (
    FollowGraphService,
    GraphReport,
    create_follow_graph_service,
)

__all__ = [
    "EnrichmentPipeline",
    "EnrichmentResult",
    "FollowGraphService",
    "GraphReport",
    "create_follow_graph_service",
    "rank_rows",
]
