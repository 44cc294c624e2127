from __future__ import annotations

from typing import Any, Dict, List, Optional

from models.canonical_profile import CanonicalProfile


def _skill_names(skills: List[Any]) -> List[str]:
    names: List[str] = []
    for s in skills:
        if isinstance(s, dict):
            name = s.get("name") or s.get("title")
        else:
            name = s
        if isinstance(name, str) and name.strip():
            names.append(name.strip())
    return names


def _current_title(profile: CanonicalProfile) -> Optional[str]:
    if profile.current_position:
        return profile.current_position
    # Fall back to the most recent experience entry
    for item in profile.experience[:1]:
        if isinstance(item, dict):
            title = item.get("title") or item.get("position")
            if isinstance(title, str) and title.strip():
                return title.strip()
    return None


def to_message_context(profile: CanonicalProfile) -> Dict[str, Any]:
    """Read-only view used when drafting a personalized message."""
    return {
        "full_name": profile.full_name,
        "first_name": profile.first_name,
        "headline": profile.headline,
        "about": profile.about or profile.summary,
        "current_company": profile.current_company_name,
        "current_position": _current_title(profile),
        "location": profile.location,
        "experience": list(profile.experience),
        "education": list(profile.education),
        "skills": _skill_names(profile.skills),
    }


def to_email_lookup(profile: CanonicalProfile) -> Dict[str, Any]:
    """Identity plus current employer, the inputs an email finder needs."""
    return {
        "full_name": profile.full_name,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "company": profile.current_company_name,
        "company_id": profile.current_company_id,
        "title": _current_title(profile),
        "linkedin_url": profile.url or profile.input_url,
    }
