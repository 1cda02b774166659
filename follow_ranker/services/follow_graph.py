"""
Follow graph service.

Ties the pipeline together: current snapshot -> partition -> ranked
categories, plus the summary counts a reporter renders.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from follow_ranker.api.github_client import GitHubClient
from follow_ranker.cache import JsonFileStore, ProfileCacheStore, RelationCacheStore
from follow_ranker.config import Settings
from follow_ranker.graph import partition, sorted_identities
from follow_ranker.logging import get_logger, log_timing
from follow_ranker.models import Category
from follow_ranker.scoring import get_score_fn
from follow_ranker.services.enrichment import EnrichmentPipeline, EnrichmentResult

logger = get_logger("services.follow_graph")


@dataclass
class GraphReport:
    """Summary counts and ranked categories for one run."""

    total_followees: int
    total_followers: int
    mutuals_count: int
    watching_count: int
    watchers_count: int
    last_update: float
    newly_gained: Optional[list[str]] = None
    newly_lost: Optional[list[str]] = None
    sections: dict[Category, EnrichmentResult] = field(default_factory=dict)

    def counts(self) -> dict[str, int]:
        return {
            "followings": self.total_followees,
            "followers": self.total_followers,
            "mutuals": self.mutuals_count,
            "watching": self.watching_count,
            "no-follow": self.watchers_count,
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "counts": self.counts(),
            "last_update": self.last_update,
            "newly_gained": self.newly_gained,
            "newly_lost": self.newly_lost,
            "sections": {
                category.value: section.to_dict() for category, section in self.sections.items()
            },
        }


class FollowGraphService:
    """
    High-level service producing a GraphReport.

    Usage:
        service = FollowGraphService(relations, pipeline)
        report = await service.build_report(include_mutuals=True)
    """

    def __init__(self, relations: RelationCacheStore, pipeline: EnrichmentPipeline):
        self.relations = relations
        self.pipeline = pipeline

    @log_timing("build_report")
    async def build_report(
        self, force_refresh: bool = False, include_mutuals: bool = False
    ) -> GraphReport:
        """
        Raises:
            RemoteFetchError: If the relation snapshot needs a refresh that fails
        """
        snapshot = await self.relations.get_snapshot(force_refresh=force_refresh)
        groups = partition(snapshot.followers, snapshot.followees)

        report = GraphReport(
            total_followees=len(snapshot.followees),
            total_followers=len(snapshot.followers),
            mutuals_count=len(groups.mutuals),
            watching_count=len(groups.watching),
            watchers_count=len(groups.watchers),
            last_update=snapshot.last_update,
        )

        diff = self.relations.last_diff
        if diff is not None:
            report.newly_gained = sorted_identities(diff.gained)
            report.newly_lost = sorted_identities(diff.lost)

        categories = [
            (Category.WATCHING, groups.watching),
            (Category.WATCHER, groups.watchers),
        ]
        if include_mutuals:
            categories.append((Category.MUTUAL, groups.mutuals))

        for category, members in categories:
            report.sections[category] = await self.pipeline.enrich(
                sorted_identities(members), category
            )

        logger.info("report_built", **report.counts())
        return report


def create_follow_graph_service(settings: Settings, client: GitHubClient) -> FollowGraphService:
    """Wire file-backed caches and the scoring strategy from settings."""
    relations = RelationCacheStore(
        JsonFileStore(settings.relations_cache_path),
        client,
        ttl_seconds=settings.relations_ttl_seconds,
        page_size=settings.page_size,
    )
    profiles = ProfileCacheStore(JsonFileStore(settings.user_cache_path), client)
    pipeline = EnrichmentPipeline(
        profiles,
        score_fn=get_score_fn(settings.score_strategy, settings.score_epsilon),
        concurrency=settings.enrichment_concurrency,
    )
    return FollowGraphService(relations, pipeline)
