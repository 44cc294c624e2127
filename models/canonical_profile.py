from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


COLLECTION_FIELDS: tuple[str, ...] = (
    "experience",
    "education",
    "skills",
    "certifications",
    "languages",
    "courses",
    "projects",
    "publications",
    "patents",
    "volunteer_experience",
    "honors_and_awards",
    "organizations",
    "recommendations_given",
    "recommendations_received",
    "posts",
    "activity",
    "articles",
    "people_also_viewed",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CanonicalProfile(BaseModel):
    """Schema-stable profile consumed by messaging, email lookup and dashboards.

    Optional scalars are a real value or None, never an empty string.
    Collections are always lists; element shapes are provider-defined.
    """

    # Identity
    linkedin_id: str | None = None
    linkedin_num_id: str | None = None
    url: str | None = None
    input_url: str | None = None
    public_identifier: str | None = None

    # Names
    full_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    headline: str | None = None
    about: str | None = None
    summary: str | None = None

    # Location
    location: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    country_code: str | None = None

    industry: str | None = None

    # Current employment
    current_company_name: str | None = None
    current_company_id: str | None = None
    current_position: str | None = None

    # Metrics
    connections_count: int | None = Field(default=None, ge=0)
    followers_count: int | None = Field(default=None, ge=0)
    recommendations_count: int | None = Field(default=None, ge=0)

    # Media
    profile_image_url: str | None = None
    banner_image_url: str | None = None

    experience: list[Any] = Field(default_factory=list)
    education: list[Any] = Field(default_factory=list)
    skills: list[Any] = Field(default_factory=list)
    certifications: list[Any] = Field(default_factory=list)
    languages: list[Any] = Field(default_factory=list)
    courses: list[Any] = Field(default_factory=list)
    projects: list[Any] = Field(default_factory=list)
    publications: list[Any] = Field(default_factory=list)
    patents: list[Any] = Field(default_factory=list)
    volunteer_experience: list[Any] = Field(default_factory=list)
    honors_and_awards: list[Any] = Field(default_factory=list)
    organizations: list[Any] = Field(default_factory=list)
    recommendations_given: list[Any] = Field(default_factory=list)
    recommendations_received: list[Any] = Field(default_factory=list)
    posts: list[Any] = Field(default_factory=list)
    activity: list[Any] = Field(default_factory=list)
    articles: list[Any] = Field(default_factory=list)
    people_also_viewed: list[Any] = Field(default_factory=list)

    # Metadata
    data_source: str = "bright_data"
    extracted_at: datetime = Field(default_factory=_utcnow)
    completeness: int = Field(default=0, ge=0, le=100)

    raw_data: Any = None

    model_config = ConfigDict(extra="ignore")
