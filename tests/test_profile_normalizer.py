from __future__ import annotations

import copy

import pytest

from models.canonical_profile import COLLECTION_FIELDS, CanonicalProfile
from services.errors import NormalizationError
from services.profile_normalizer import COLLECTION_CANDIDATES, normalize, split_name
from utils.json_sanitize import CIRCULAR_MARKER


def _sample():
    return {
        "id": "jane-doe-123",
        "name": "Jane Q Doe",
        "url": "https://www.linkedin.com/in/jane-doe-123",
        "position": "Head of Data at Acme",
        "about": "Builds pipelines.",
        "city": "Berlin, Berlin, Germany",
        "country_code": "DE",
        "current_company": {"name": "Acme GmbH", "company_id": "acme", "title": "Head of Data"},
        "connections": "500+",
        "followers": "1.2K",
        "experience": [{"title": "Head of Data", "company": "Acme GmbH"}],
        "education": [{"title": "TU Berlin"}],
        "languages": [{"title": "German"}],
    }


def test_normalize_maps_core_fields():
    profile = normalize(_sample())
    assert isinstance(profile, CanonicalProfile)
    assert profile.linkedin_id == "jane-doe-123"
    assert profile.full_name == "Jane Q Doe"
    assert profile.first_name == "Jane" and profile.last_name == "Q Doe"
    assert profile.headline == "Head of Data at Acme"
    assert profile.current_company_name == "Acme GmbH"
    assert profile.current_company_id == "acme"
    assert profile.current_position == "Head of Data"
    assert profile.connections_count == 500
    assert profile.followers_count == 1200
    assert profile.experience == [{"title": "Head of Data", "company": "Acme GmbH"}]
    assert profile.data_source == "bright_data"


def test_missing_fields_are_none_or_empty_lists():
    profile = normalize({"name": "Solo"})
    assert profile.headline is None
    assert profile.connections_count is None
    for field in COLLECTION_FIELDS:
        assert getattr(profile, field) == []
    assert profile.first_name == "Solo" and profile.last_name is None


def test_blank_strings_become_none():
    profile = normalize({"name": "  ", "headline": "", "followers": ""})
    assert profile.full_name is None
    assert profile.headline is None
    assert profile.followers_count is None


def test_candidate_priority_ignores_key_order():
    a = {"name": "Primary", "full_name": "Secondary", "fullName": "Tertiary"}
    b = {"fullName": "Tertiary", "full_name": "Secondary", "name": "Primary"}
    assert normalize(a).full_name == normalize(b).full_name == "Primary"

    c = {"fullName": "Tertiary", "full_name": "Secondary"}
    assert normalize(c).full_name == "Secondary"


def test_explicit_names_win_over_split():
    profile = normalize({"name": "Jane Doe", "first_name": "Janet", "last_name": "Doe-Smith"})
    assert profile.first_name == "Janet"
    assert profile.last_name == "Doe-Smith"


def test_collection_alternates_and_shapes():
    profile = normalize({
        "work_experience": [{"title": "Engineer"}],
        "skills": '["python", "sql"]',
        "certifications": {"title": "AWS"},
        "volunteering": [{"role": "Mentor"}],
    })
    assert profile.experience == [{"title": "Engineer"}]
    assert profile.skills == ["python", "sql"]
    assert profile.certifications == [{"title": "AWS"}]
    assert profile.volunteer_experience == [{"role": "Mentor"}]


def test_array_payload_uses_first_element():
    profile = normalize([{"name": "First"}, {"name": "Second"}])
    assert profile.full_name == "First"


def test_missing_payload_raises():
    with pytest.raises(NormalizationError):
        normalize(None)
    with pytest.raises(NormalizationError):
        normalize([])
    with pytest.raises(NormalizationError):
        normalize("not a profile")


def test_raw_data_is_sanitized_and_input_untouched():
    raw = _sample()
    raw["score"] = float("nan")
    raw["self"] = raw
    raw["experience"][0]["parent"] = raw["experience"]
    snapshot_keys = set(raw)

    profile = normalize(raw)

    assert profile.raw_data["self"] == CIRCULAR_MARKER
    assert profile.raw_data["score"] is None
    assert profile.experience[0]["parent"] == CIRCULAR_MARKER
    # Input keeps its original references
    assert set(raw) == snapshot_keys
    assert raw["self"] is raw
    assert raw["experience"][0]["parent"] is raw["experience"]
    profile.model_dump_json()


def test_collections_are_copies():
    raw = {"experience": [{"title": "Engineer"}]}
    before = copy.deepcopy(raw)
    profile = normalize(raw)
    profile.experience[0]["title"] = "Changed"
    assert raw == before


def test_data_source_override_and_completeness():
    profile = normalize(_sample(), data_source="chrome_extension")
    assert profile.data_source == "chrome_extension"
    assert 0 < profile.completeness <= 100
    assert normalize({}).completeness == 0
    assert normalize({"name": "x"}).completeness < profile.completeness


def test_every_collection_field_has_candidates():
    assert set(COLLECTION_CANDIDATES) == set(COLLECTION_FIELDS)


def test_split_name():
    assert split_name("Jane") == ("Jane", None)
    assert split_name("  Jane   van Doe ") == ("Jane", "van Doe")
    assert split_name(None) == (None, None)
