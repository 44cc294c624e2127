from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from models.canonical_profile import CanonicalProfile
from services.errors import NormalizationError
from services.field_resolution import key, nested, resolve, sequence
from utils.json_sanitize import sanitize_for_json
from utils.number_parsing import to_count


logger = logging.getLogger(__name__)


# Candidate keys per canonical field, highest priority first.
SCALAR_FIELDS = {
    "linkedin_id": (key("linkedin_id"), key("linkedinId"), key("id")),
    "linkedin_num_id": (key("linkedin_num_id"), key("linkedinNumId"), key("numericId")),
    "url": (key("url"), key("canonicalUrl"), key("linkedinUrl")),
    "input_url": (key("input_url"), key("inputUrl")),
    "public_identifier": (key("public_identifier"), key("publicIdentifier")),
    "full_name": (key("name"), key("full_name"), key("fullName")),
    "first_name": (key("first_name"), key("firstName")),
    "last_name": (key("last_name"), key("lastName")),
    "headline": (key("headline"), key("position")),
    "about": (key("about"), key("summary"), key("description")),
    "summary": (key("summary"), key("about"), key("description")),
    "location": (key("location"), key("geo_location")),
    "city": (key("city"), key("geo_city")),
    "state": (key("state"), key("geo_state")),
    "country": (key("country"), key("geo_country")),
    "country_code": (key("country_code"), key("countryCode")),
    "industry": (key("industry"),),
    "current_company_name": (
        key("current_company_name"),
        key("currentCompanyName"),
        nested("current_company", "name"),
        key("current_company"),
        key("currentCompany"),
        key("company"),
    ),
    "current_company_id": (
        key("current_company_id"),
        key("currentCompanyId"),
        nested("current_company", "company_id"),
    ),
    "current_position": (
        key("current_position"),
        key("currentPosition"),
        nested("current_company", "title"),
        key("position"),
        key("headline"),
    ),
    "profile_image_url": (
        key("profile_pic_url"),
        key("profile_picture"),
        key("profileImageUrl"),
        key("avatar"),
    ),
    "banner_image_url": (key("banner_image"), key("background_image"), key("backgroundImage")),
    "data_source": (key("db_source"), key("data_source")),
}

COUNT_FIELDS = {
    "connections_count": (key("connections_count"), key("connectionsCount"), key("connections")),
    "followers_count": (key("followers_count"), key("followersCount"), key("followers")),
    "recommendations_count": (key("recommendations_count"), key("recommendationsCount")),
}

COLLECTION_CANDIDATES = {
    "experience": (
        key("experience"),
        key("work_experience"),
        key("experiences"),
        key("jobs"),
        key("positions"),
    ),
    "education": (key("education"), key("educations"), key("schools")),
    "skills": (key("skills"), key("skill_list"), key("skillsList")),
    "certifications": (key("certifications"), key("certificates"), key("certificationList")),
    "languages": (key("languages"), key("language_list")),
    "courses": (key("courses"), key("course_list")),
    "projects": (key("projects"), key("project_list")),
    "publications": (key("publications"), key("publication_list")),
    "patents": (key("patents"), key("patent_list")),
    "volunteer_experience": (
        key("volunteer_experience"),
        key("volunteerExperience"),
        key("volunteering"),
        key("volunteer_work"),
        key("volunteerWork"),
    ),
    "honors_and_awards": (key("honors_and_awards"), key("awards"), key("honors")),
    "organizations": (key("organizations"), key("organization_list")),
    "recommendations_given": (key("recommendations_given"), key("given_recommendations")),
    "recommendations_received": (
        key("recommendations_received"),
        key("received_recommendations"),
        key("recommendations"),
    ),
    "posts": (key("posts"), key("recent_posts")),
    "activity": (key("activity"), key("recent_activity")),
    "articles": (key("articles"), key("article_list")),
    "people_also_viewed": (key("people_also_viewed"), key("also_viewed"), key("similar_profiles")),
}

# Fields counted by the completeness score.
COMPLETENESS_FIELDS = (
    "full_name",
    "headline",
    "location",
    "about",
    "current_position",
    "experience",
    "education",
    "skills",
    "connections_count",
)


def split_name(full_name: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    if not full_name:
        return None, None
    parts = [p for p in str(full_name).strip().split() if p]
    if not parts:
        return None, None
    if len(parts) == 1:
        return parts[0], None
    return parts[0], " ".join(parts[1:])


def unwrap_payload(raw: Any) -> Dict[str, Any]:
    """Provider results are either a profile object or an array whose first element is the profile."""
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else None
    if not isinstance(raw, dict):
        raise NormalizationError(f"No profile object in provider payload (got {type(raw).__name__})")
    return raw


def profile_completeness(profile: CanonicalProfile) -> int:
    filled = 0
    for name in COMPLETENESS_FIELDS:
        value = getattr(profile, name)
        if value is None or value == []:
            continue
        filled += 1
    return round(filled * 100 / len(COMPLETENESS_FIELDS))


def normalize(raw: Any, data_source: Optional[str] = None) -> CanonicalProfile:
    """Map a raw provider (or extension) payload onto CanonicalProfile.

    Missing optional fields become None or [], never an error. Only a missing
    payload raises NormalizationError. ``raw`` is not mutated.
    """
    if raw is None:
        raise NormalizationError("No profile data received")
    data = unwrap_payload(raw)

    fields: Dict[str, Any] = {}
    for name, accessors in SCALAR_FIELDS.items():
        fields[name] = resolve(data, accessors)
    for name, accessors in COUNT_FIELDS.items():
        fields[name] = resolve(data, accessors, coerce=to_count)
    for name, accessors in COLLECTION_CANDIDATES.items():
        fields[name] = sanitize_for_json(resolve(data, accessors, coerce=sequence) or [])

    derived_first, derived_last = split_name(fields["full_name"])
    if fields["first_name"] is None:
        fields["first_name"] = derived_first
    if fields["last_name"] is None:
        fields["last_name"] = derived_last

    fields["data_source"] = data_source or fields["data_source"] or "bright_data"
    fields["raw_data"] = sanitize_for_json(data)

    profile = CanonicalProfile(**fields)
    profile.completeness = profile_completeness(profile)

    logger.debug(
        "Normalized profile %s: experience=%d education=%d skills=%d",
        profile.full_name or profile.url or "-",
        len(profile.experience),
        len(profile.education),
        len(profile.skills),
        extra={"step": "normalize"},
    )
    return profile
