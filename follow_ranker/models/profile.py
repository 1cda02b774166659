"""
Profile models.

ProfileRecord mirrors the subset of the GitHub user payload the ranking
needs. It is parsed from, and serialized back to, the raw API field names so
the profile cache stores exactly what GitHub returned.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import Category


class ProfileRecord(BaseModel):
    """Last observed profile statistics for one identity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    identity: str = Field(alias="login", min_length=1)
    public_repo_count: int = Field(default=0, alias="public_repos", ge=0)
    follower_count: int = Field(default=0, alias="followers", ge=0)
    followee_count: int = Field(default=0, alias="following", ge=0)
    profile_url: str = Field(default="", alias="html_url")

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "ProfileRecord":
        """Build a record from a GitHub `GET /users/{login}` response."""
        return cls.model_validate(payload)

    def to_cache(self) -> dict[str, Any]:
        """Raw GitHub field names, as persisted in the user cache."""
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class ClassifiedRow:
    """A ranked profile within one relationship category."""

    category: Category
    profile: ProfileRecord
    impact_score: float

    @property
    def identity(self) -> str:
        return self.profile.identity

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "login": self.profile.identity,
            "repos": self.profile.public_repo_count,
            "following": self.profile.followee_count,
            "followers": self.profile.follower_count,
            "score": self.impact_score,
            "url": self.profile.profile_url,
        }
