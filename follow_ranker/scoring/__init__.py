# Profile scoring module

from .impact import (
    SCORING_STRATEGIES,
    ScoreFn,
    calculate_follow_ratio,
    calculate_impact_score,
    get_score_fn,
)

__all__ = [
    "SCORING_STRATEGIES",
    "ScoreFn",
    "calculate_follow_ratio",
    "calculate_impact_score",
    "get_score_fn",
]
