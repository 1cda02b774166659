"""
Application constants for Follow Ranker.

Contains GitHub API endpoints, cache naming, and scoring defaults.
"""

# =============================================================================
# GitHub API Constants
# =============================================================================

GITHUB_API_BASE = "https://api.github.com"
GITHUB_ACCEPT_HEADER = "application/vnd.github+json"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "FollowRanker/1.0"

FOLLOWERS_PATH = "/user/followers"
FOLLOWING_PATH = "/user/following"
USER_PATH = "/users/{login}"

# GitHub caps per_page at 100 for list endpoints
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 100

RATE_LIMIT_REQUESTS_PER_HOUR = 5000
RATE_LIMIT_LOW_WATERMARK = 10
RATE_LIMIT_MAX_WAIT_SECONDS = 300

# =============================================================================
# Cache Constants
# =============================================================================

DEFAULT_CACHE_DIR = "~/.cache/follow-ranker"
RELATIONS_CACHE_NAME = "relationsCache"
USER_CACHE_NAME = "userCache"
DEFAULT_RELATIONS_TTL_SECONDS = 60 * 60  # 1 hour

# =============================================================================
# Scoring Constants
# =============================================================================

SCORE_EPSILON = 1e-5
DEFAULT_SCORE_STRATEGY = "impact"
DEFAULT_ENRICHMENT_CONCURRENCY = 8

# =============================================================================
# Report Columns
# =============================================================================

TABLE_COLUMNS = ["login", "repos", "following", "followers", "score", "url"]
