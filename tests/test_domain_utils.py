from __future__ import annotations

import pytest

from services.domain_utils import clean_profile_url, normalize_profile_url


def test_normalize_profile_url_equates_variants():
    a = normalize_profile_url("HTTPS://www.example.com/in/jdoe/")
    b = normalize_profile_url("example.com/in/jdoe")
    assert a == b == "example.com/in/jdoe"


def test_normalize_profile_url_drops_query_and_fragment():
    assert normalize_profile_url("https://www.linkedin.com/in/Jane-Doe/?trk=public#about") == "linkedin.com/in/jane-doe"
    assert normalize_profile_url("http://linkedin.com/in/jane-doe") == "linkedin.com/in/jane-doe"


def test_normalize_profile_url_empty():
    assert normalize_profile_url("") is None
    assert normalize_profile_url(None) is None
    assert normalize_profile_url("https://") is None


def test_clean_profile_url_forces_https():
    assert clean_profile_url("www.linkedin.com/in/Jane-Doe/") == "https://www.linkedin.com/in/Jane-Doe"
    assert clean_profile_url(" http://linkedin.com/in/jdoe ") == "https://linkedin.com/in/jdoe"
    with pytest.raises(ValueError):
        clean_profile_url("   ")
