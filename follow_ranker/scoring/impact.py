# Impact scoring for ranking profiles within a relationship category

import math
from collections.abc import Callable
from functools import partial

from follow_ranker.constants import SCORE_EPSILON
from follow_ranker.models import ProfileRecord

ScoreFn = Callable[[ProfileRecord], float]


def calculate_impact_score(profile: ProfileRecord, epsilon: float = SCORE_EPSILON) -> float:
    """
    Impact score: repository weight plus follower / followee ratio.

    impact = log10(repos + ε) + (followers + ε) / (followees + ε)

    The same ε keeps zero repos and zero followees finite without noticeably
    shifting accounts that have non-zero counts.
    """
    repo_weight = math.log10(profile.public_repo_count + epsilon)
    return repo_weight + calculate_follow_ratio(profile, epsilon)


def calculate_follow_ratio(profile: ProfileRecord, epsilon: float = SCORE_EPSILON) -> float:
    """Follower / followee ratio alone (impact score without the repo term)."""
    return (profile.follower_count + epsilon) / (profile.followee_count + epsilon)


SCORING_STRATEGIES: dict[str, Callable[..., float]] = {
    "impact": calculate_impact_score,
    "ratio": calculate_follow_ratio,
}


def get_score_fn(name: str = "impact", epsilon: float = SCORE_EPSILON) -> ScoreFn:
    """
    Resolve a scoring strategy by name.

    Raises:
        ValueError: If no strategy is registered under `name`
    """
    key = name.strip().lower()
    if key not in SCORING_STRATEGIES:
        raise ValueError(
            f"Unknown scoring strategy '{name}'. Expected one of: {', '.join(sorted(SCORING_STRATEGIES))}"
        )
    return partial(SCORING_STRATEGIES[key], epsilon=epsilon)
