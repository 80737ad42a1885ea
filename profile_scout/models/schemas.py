from __future__ import annotations

import re
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_NON_HANDLE_CHARS = re.compile(r"[^A-Za-z0-9._]")


def normalize_username(raw: str) -> str:
    """Reduce a handle, an '@handle' or a profile URL to the bare handle."""
    path = urlparse((raw or "").strip()).path
    segments = [s for s in path.split("/") if s.strip()]
    if not segments:
        return ""
    return _NON_HANDLE_CHARS.sub("", segments[-1].strip().lstrip("@"))


# --- Requests ---


class DiscoveryRequest(BaseModel):
    query: str

    @field_validator("query")
    @classmethod
    def query_must_not_be_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Query is required and must be a non-empty string")
        return cleaned


# --- Domain records ---


class Candidate(BaseModel):
    """A discovered social profile."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    username: str
    display_name: str = ""
    bio: str = ""
    follower_count: int = 0
    following_count: int = 0
    post_count: int = 0
    engagement_rate: float = 0.0
    category: str = ""
    verified: bool = False
    location: str | None = None
    source_url: str = ""

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True)


# --- Structured model outputs ---


class SearchPlan(BaseModel):
    search_queries: list[str] = Field(
        default_factory=list,
        description="Search queries to find social accounts (max 3 queries)",
    )


class ExtractedProfile(BaseModel):
    username: str = Field(description="Account username without @")
    name: str = Field(default="", description="Display name")
    bio: str = Field(default="", description="Bio or description")
    followers: int = Field(default=0, description="Follower count (estimate if not exact)")
    following: int | None = Field(default=None, description="Following count if stated")
    posts: int | None = Field(default=None, description="Post count if stated")
    category: str = Field(default="", description="Category or niche")
    verified: bool = Field(default=False, description="Verification status")
    engagement_rate: float | None = Field(default=None, description="Engagement rate if available")
    location: str | None = Field(default=None, description="Location if mentioned")


class ExtractedProfiles(BaseModel):
    accounts: list[ExtractedProfile] = Field(default_factory=list)


class SufficiencyVerdict(BaseModel):
    sufficient: bool = Field(
        description="Whether the found accounts are sufficient for the user's request"
    )
    gaps: list[str] = Field(default_factory=list, description="Identified gaps in the results")
    follow_up_queries: list[str] = Field(
        default_factory=list,
        description="Additional search queries if needed (max 2 queries)",
    )


# --- Responses ---


class ModelInfo(BaseModel):
    id: str
    name: str
    description: str
    active: bool = False


class ModelsResponse(BaseModel):
    models: list[ModelInfo]
