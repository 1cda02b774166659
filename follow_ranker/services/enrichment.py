"""
Enrichment pipeline: resolve identities to profiles and rank them.

Identities are resolved concurrently through the profile cache with a
semaphore bounding the fan-out. All fetches are joined before sorting, so
the ranking never depends on completion order.
"""

import asyncio
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from follow_ranker.cache.profile_cache import ProfileCacheStore
from follow_ranker.constants import DEFAULT_ENRICHMENT_CONCURRENCY
from follow_ranker.exceptions import FollowRankerError
from follow_ranker.logging import get_logger, log_context
from follow_ranker.models import Category, ClassifiedRow, ProfileRecord
from follow_ranker.scoring import ScoreFn, calculate_impact_score

logger = get_logger("enrichment")


@dataclass
class EnrichmentResult:
    """
    Ranked rows for one category plus the identities that could not be resolved.

    Iterating the result yields its rows in rank order.
    """

    category: Category
    rows: list[ClassifiedRow] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def success_count(self) -> int:
        return len(self.rows)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    def __iter__(self) -> Iterator[ClassifiedRow]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "rows": [row.to_dict() for row in self.rows],
            "failures": dict(sorted(self.failures.items())),
        }


def rank_rows(rows: Sequence[ClassifiedRow]) -> list[ClassifiedRow]:
    """Descending score, ties broken by ascending identity."""
    return sorted(rows, key=lambda row: (-row.impact_score, row.identity))


class EnrichmentPipeline:
    """
    Async fan-out over the profile cache with concurrency control.

    Example:
        pipeline = EnrichmentPipeline(profiles, concurrency=8)
        result = await pipeline.enrich(["octocat", "torvalds"], Category.WATCHING)
        for row in result:
            print(row.identity, row.impact_score)
    """

    def __init__(
        self,
        profiles: ProfileCacheStore,
        score_fn: ScoreFn = calculate_impact_score,
        concurrency: int = DEFAULT_ENRICHMENT_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            msg = f"concurrency must be at least 1, got {concurrency}"
            raise ValueError(msg)

        self._profiles = profiles
        self._score_fn = score_fn
        self._concurrency = concurrency

    async def enrich(self, identities: Sequence[str], category: Category) -> EnrichmentResult:
        """
        Resolve, score and rank `identities` as members of `category`.

        A failed fetch drops that identity's row and records the error in
        `failures`; the rest of the batch is unaffected.
        """
        # The requested set is fixed upfront; duplicates resolve once
        unique = list(dict.fromkeys(identities))
        result = EnrichmentResult(category=category)
        if not unique:
            return result

        semaphore = asyncio.Semaphore(self._concurrency)

        async def resolve(identity: str) -> ProfileRecord:
            async with semaphore:
                return await self._profiles.get_profile(identity)

        with log_context(category=category.value):
            logger.info("enrichment_started", identities=len(unique), concurrency=self._concurrency)
            outcomes = await asyncio.gather(
                *(resolve(identity) for identity in unique),
                return_exceptions=True,
            )

            rows: list[ClassifiedRow] = []
            for identity, outcome in zip(unique, outcomes):
                if isinstance(outcome, BaseException):
                    if not isinstance(outcome, Exception):
                        raise outcome
                    self._log_failure(identity, outcome)
                    result.failures[identity] = str(outcome) or type(outcome).__name__
                    continue
                rows.append(
                    ClassifiedRow(
                        category=category,
                        profile=outcome,
                        impact_score=self._score_fn(outcome),
                    )
                )

            result.rows = rank_rows(rows)
            logger.info(
                "enrichment_complete",
                success_count=result.success_count,
                failed_count=result.failed_count,
            )
        return result

    def _log_failure(self, identity: str, error: Exception) -> None:
        if isinstance(error, FollowRankerError):
            logger.warning("profile_fetch_failed", identity=identity, error=str(error))
        else:
            logger.error(
                "profile_fetch_failed",
                identity=identity,
                error=str(error),
                error_type=type(error).__name__,
            )
