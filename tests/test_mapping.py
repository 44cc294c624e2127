from __future__ import annotations

from models.canonical_profile import CanonicalProfile
from services.mapping import to_email_lookup, to_message_context
from services.profile_normalizer import normalize


def test_message_context_and_email_lookup():
    profile = normalize({
        "name": "Jane Doe",
        "url": "https://www.linkedin.com/in/jane-doe",
        "headline": "Data @ Acme",
        "about": "Builds pipelines.",
        "current_company": {"name": "Acme GmbH", "company_id": "acme"},
        "experience": [{"title": "Head of Data", "company": "Acme GmbH"}],
        "education": [{"title": "TU Berlin"}],
        "skills": [{"name": "Python"}, "SQL", {"name": ""}],
    })

    ctx = to_message_context(profile)
    assert ctx["first_name"] == "Jane"
    assert ctx["current_company"] == "Acme GmbH"
    assert ctx["current_position"] == "Data @ Acme"
    assert ctx["skills"] == ["Python", "SQL"]
    assert ctx["education"] == [{"title": "TU Berlin"}]

    lookup = to_email_lookup(profile)
    assert lookup == {
        "full_name": "Jane Doe",
        "first_name": "Jane",
        "last_name": "Doe",
        "company": "Acme GmbH",
        "company_id": "acme",
        "title": ctx["current_position"],
        "linkedin_url": "https://www.linkedin.com/in/jane-doe",
    }


def test_views_tolerate_sparse_profiles():
    profile = normalize({"name": "Solo"})
    assert to_message_context(profile)["skills"] == []
    assert to_email_lookup(profile)["company"] is None


def test_title_falls_back_to_latest_experience():
    profile = CanonicalProfile(full_name="Jane Doe", experience=[{"title": "Head of Data"}, {"title": "Analyst"}])
    assert to_email_lookup(profile)["title"] == "Head of Data"
