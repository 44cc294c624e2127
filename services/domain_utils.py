from __future__ import annotations

import re
from typing import Optional


_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.\-]*://")


def normalize_profile_url(url: Optional[str]) -> Optional[str]:
    """Dedup key for a target: lower-case, no scheme, no leading www., no query/fragment, no trailing slash.

    'HTTPS://www.example.com/in/jdoe/?trk=x' -> 'example.com/in/jdoe'
    """
    if not url:
        return None
    text = str(url).strip().lower()
    text = _SCHEME_RE.sub("", text)
    if text.startswith("www."):
        text = text[len("www."):]
    for sep in ("#", "?"):
        text = text.split(sep, 1)[0]
    text = text.rstrip("/")
    return text or None


def clean_profile_url(url: Optional[str]) -> str:
    """URL sent to the provider: trimmed, https, no trailing slash.

    The provider needs a full URL, so case and path are left untouched.
    """
    text = (url or "").strip()
    if not text:
        raise ValueError("Profile URL is required")
    text = re.sub(r"^https?://", "", text, flags=re.IGNORECASE)
    text = text.rstrip("/")
    if not text:
        raise ValueError(f"Invalid profile URL: {url!r}")
    return f"https://{text}"
