from __future__ import annotations

import sqlite3


_PROFILE_COLUMNS = (
    "  linkedin_id TEXT,\n"
    "  full_name TEXT,\n"
    "  first_name TEXT,\n"
    "  last_name TEXT,\n"
    "  headline TEXT,\n"
    "  about TEXT,\n"
    "  location TEXT,\n"
    "  country_code TEXT,\n"
    "  industry TEXT,\n"
    "  current_company_name TEXT,\n"
    "  current_company_id TEXT,\n"
    "  current_position TEXT,\n"
    "  connections_count INTEGER,\n"
    "  followers_count INTEGER,\n"
    "  experience_json TEXT NOT NULL DEFAULT '[]',\n"
    "  education_json TEXT NOT NULL DEFAULT '[]',\n"
    "  skills_json TEXT NOT NULL DEFAULT '[]',\n"
    "  profile_json TEXT NOT NULL,\n"
    "  raw_data_json TEXT,\n"
    "  data_source TEXT,\n"
    "  completeness INTEGER,\n"
    "  extraction_method TEXT,\n"
    "  job_id TEXT,\n"
    "  extracted_at TEXT,\n"
    "  created_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
    "  updated_at TEXT NOT NULL DEFAULT (datetime('now'))"
)


def bootstrap(conn: sqlite3.Connection) -> None:
    """Create profile and extraction-status tables, indexes and views (idempotent)."""
    cur = conn.cursor()

    # A user's own profile: 1:1 with the user
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS user_profiles (\n"
            "  user_id TEXT PRIMARY KEY,\n"
            "  linkedin_url TEXT NOT NULL,\n"
            "  normalized_url TEXT NOT NULL,\n"
            f"{_PROFILE_COLUMNS}\n"
            ")"
        )
    )

    # Profiles a user extracted about other people: 1:1 per (user, normalized url)
    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS target_profiles (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  user_id TEXT NOT NULL,\n"
            "  linkedin_url TEXT NOT NULL,\n"
            "  normalized_url TEXT NOT NULL,\n"
            f"{_PROFILE_COLUMNS},\n"
            "  UNIQUE(user_id, normalized_url)\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_target_profiles_user ON target_profiles(user_id);")

    cur.execute(
        (
            "CREATE TABLE IF NOT EXISTS extraction_status (\n"
            "  id INTEGER PRIMARY KEY AUTOINCREMENT,\n"
            "  user_id TEXT NOT NULL,\n"
            "  normalized_url TEXT NOT NULL,\n"
            "  input_url TEXT,\n"
            "  is_own_profile INTEGER NOT NULL DEFAULT 0,\n"
            "  status TEXT NOT NULL DEFAULT 'processing' CHECK (status IN ('processing', 'completed', 'failed')),\n"
            "  method TEXT,\n"
            "  job_id TEXT,\n"
            "  error_type TEXT,\n"
            "  error_message TEXT,\n"
            "  retry_count INTEGER NOT NULL DEFAULT 0,\n"
            "  started_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  completed_at TEXT,\n"
            "  updated_at TEXT NOT NULL DEFAULT (datetime('now')),\n"
            "  UNIQUE(user_id, normalized_url)\n"
            ")"
        )
    )
    cur.execute("CREATE INDEX IF NOT EXISTS idx_extraction_status_status ON extraction_status(status);")

    # View for status dashboards
    cur.execute("DROP VIEW IF EXISTS v_extraction_overview;")
    cur.execute(
        (
            "CREATE VIEW v_extraction_overview AS\n"
            "SELECT\n"
            "  s.user_id,\n"
            "  s.normalized_url,\n"
            "  s.is_own_profile,\n"
            "  s.status,\n"
            "  s.method,\n"
            "  s.error_type,\n"
            "  s.retry_count,\n"
            "  s.started_at,\n"
            "  s.completed_at,\n"
            "  COALESCE(t.full_name, u.full_name) AS full_name,\n"
            "  COALESCE(t.current_company_name, u.current_company_name) AS current_company_name,\n"
            "  COALESCE(t.completeness, u.completeness) AS completeness\n"
            "FROM extraction_status s\n"
            "LEFT JOIN target_profiles t ON t.user_id = s.user_id AND t.normalized_url = s.normalized_url\n"
            "LEFT JOIN user_profiles u ON u.user_id = s.user_id AND u.normalized_url = s.normalized_url;"
        )
    )

    conn.commit()
