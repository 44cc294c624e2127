from __future__ import annotations

import json
import sqlite3
from typing import Any, Dict, List, Optional

from models.canonical_profile import CanonicalProfile


PROFILE_COLUMNS = (
    "linkedin_id",
    "full_name",
    "first_name",
    "last_name",
    "headline",
    "about",
    "location",
    "country_code",
    "industry",
    "current_company_name",
    "current_company_id",
    "current_position",
    "connections_count",
    "followers_count",
    "experience_json",
    "education_json",
    "skills_json",
    "profile_json",
    "raw_data_json",
    "data_source",
    "completeness",
    "extraction_method",
    "job_id",
    "extracted_at",
)


def _profile_row(profile: CanonicalProfile, method: Optional[str], job_id: Optional[str]) -> Dict[str, Any]:
    return {
        "linkedin_id": profile.linkedin_id,
        "full_name": profile.full_name,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "headline": profile.headline,
        "about": profile.about,
        "location": profile.location,
        "country_code": profile.country_code,
        "industry": profile.industry,
        "current_company_name": profile.current_company_name,
        "current_company_id": profile.current_company_id,
        "current_position": profile.current_position,
        "connections_count": profile.connections_count,
        "followers_count": profile.followers_count,
        "experience_json": json.dumps(profile.experience, ensure_ascii=False),
        "education_json": json.dumps(profile.education, ensure_ascii=False),
        "skills_json": json.dumps(profile.skills, ensure_ascii=False),
        "profile_json": profile.model_dump_json(),
        "raw_data_json": json.dumps(profile.raw_data, ensure_ascii=False),
        "data_source": profile.data_source,
        "completeness": profile.completeness,
        "extraction_method": method,
        "job_id": job_id,
        "extracted_at": profile.extracted_at.isoformat(),
    }


class ProfilesRepo:
    """Upserts canonical profiles: user_profiles by user_id, target_profiles by (user_id, normalized_url)."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def upsert_target_profile(
        self,
        user_id: str,
        linkedin_url: str,
        normalized_url: str,
        profile: CanonicalProfile,
        method: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> int:
        """Insert or replace the target profile for (user_id, normalized_url); returns row id."""
        row = _profile_row(profile, method, job_id)
        cols = ("user_id", "linkedin_url", "normalized_url") + PROFILE_COLUMNS
        updates = ", ".join(f"{c} = excluded.{c}" for c in ("linkedin_url",) + PROFILE_COLUMNS)
        sql = (
            f"INSERT INTO target_profiles ({', '.join(cols)}) "
            f"VALUES ({', '.join('?' for _ in cols)}) "
            "ON CONFLICT(user_id, normalized_url) DO UPDATE SET "
            f"{updates}, updated_at = datetime('now') "
            "RETURNING id;"
        )
        cur = self.conn.cursor()
        cur.execute(sql, (user_id, linkedin_url, normalized_url, *[row[c] for c in PROFILE_COLUMNS]))
        target_id = int(cur.fetchone()[0])
        self.conn.commit()
        return target_id

    def upsert_user_profile(
        self,
        user_id: str,
        linkedin_url: str,
        normalized_url: str,
        profile: CanonicalProfile,
        method: Optional[str] = None,
        job_id: Optional[str] = None,
    ) -> str:
        """Insert or replace the user's own profile; returns user_id."""
        row = _profile_row(profile, method, job_id)
        cols = ("user_id", "linkedin_url", "normalized_url") + PROFILE_COLUMNS
        updates = ", ".join(f"{c} = excluded.{c}" for c in ("linkedin_url", "normalized_url") + PROFILE_COLUMNS)
        sql = (
            f"INSERT INTO user_profiles ({', '.join(cols)}) "
            f"VALUES ({', '.join('?' for _ in cols)}) "
            "ON CONFLICT(user_id) DO UPDATE SET "
            f"{updates}, updated_at = datetime('now');"
        )
        self.conn.execute(sql, (user_id, linkedin_url, normalized_url, *[row[c] for c in PROFILE_COLUMNS]))
        self.conn.commit()
        return user_id

    def get_target_profile(self, user_id: str, normalized_url: str) -> Optional[CanonicalProfile]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT profile_json FROM target_profiles WHERE user_id = ? AND normalized_url = ?",
            (user_id, normalized_url),
        )
        row = cur.fetchone()
        return CanonicalProfile.model_validate_json(row[0]) if row else None

    def get_user_profile(self, user_id: str) -> Optional[CanonicalProfile]:
        cur = self.conn.cursor()
        cur.execute("SELECT profile_json FROM user_profiles WHERE user_id = ?", (user_id,))
        row = cur.fetchone()
        return CanonicalProfile.model_validate_json(row[0]) if row else None

    def count_target_profiles(self, user_id: Optional[str] = None) -> int:
        cur = self.conn.cursor()
        if user_id is None:
            cur.execute("SELECT COUNT(*) FROM target_profiles")
        else:
            cur.execute("SELECT COUNT(*) FROM target_profiles WHERE user_id = ?", (user_id,))
        return int(cur.fetchone()[0])

    def list_target_urls(self, user_id: str) -> List[str]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT normalized_url FROM target_profiles WHERE user_id = ? ORDER BY updated_at DESC, id DESC",
            (user_id,),
        )
        return [r[0] for r in cur.fetchall()]
