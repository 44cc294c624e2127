from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from models.canonical_profile import CanonicalProfile
from models.extraction_status import ExtractionStatusRecord


def _provider_usage_for_run(run_id: str, log_path: Path) -> Dict[str, Dict[str, int]]:
    """Aggregate provider calls from the JSONL trace for the given run_id.

    Returns dict like { 'trigger': {'calls': N, 'errors': E}, 'status': {...} }
    """
    result: Dict[str, Dict[str, int]] = {}
    if not log_path.exists():
        return result
    with log_path.open("r", encoding="utf-8") as f:
        for line in f:
            try:
                rec = json.loads(line)
            except ValueError:
                continue
            if not isinstance(rec, dict) or rec.get("run_id") != run_id:
                continue
            bucket = result.setdefault(rec.get("operation") or "unknown", {"calls": 0, "errors": 0})
            bucket["calls"] += 1
            if rec.get("status") != "ok":
                bucket["errors"] += 1
    return result


def print_extraction_summary(records: Iterable[ExtractionStatusRecord], run_id: Optional[str] = None) -> None:
    """Print status counts and, when tracing is on, provider call usage for this run."""
    from config.settings import get_settings

    counts: Dict[str, int] = {"processing": 0, "completed": 0, "failed": 0}
    rows = list(records)
    for r in rows:
        counts[r.status] = counts.get(r.status, 0) + 1

    print("\n" + "=" * 60)
    print("PROFILE EXTRACTION - SUMMARY")
    print("=" * 60)
    print(f"Records: {len(rows)}")
    for status, n in counts.items():
        print(f"  {status}: {n}")
    failed = [r for r in rows if r.status == "failed"]
    if failed:
        print()
        print("Failures:")
        for r in failed:
            print(f"  {r.normalized_url} [{r.error_type}] {r.error_message or ''}".rstrip())

    settings = get_settings()
    if run_id and settings.provider_trace:
        usage = _provider_usage_for_run(run_id, Path(settings.provider_log_path))
        if usage:
            print()
            print("Provider Usage:")
            for operation, stats in usage.items():
                print(f"  {operation}: calls={stats['calls']}, errors={stats['errors']}")
    print("=" * 60)


def print_profile_report(profile: CanonicalProfile) -> None:
    print("\n" + "=" * 60)
    print(profile.full_name or "(unnamed profile)")
    print("=" * 60)
    print(f"Headline: {profile.headline or 'N/A'}")
    print(f"Company: {profile.current_company_name or 'N/A'}")
    print(f"Position: {profile.current_position or 'N/A'}")
    print(f"Location: {profile.location or 'N/A'}")
    print(f"Connections: {profile.connections_count if profile.connections_count is not None else 'N/A'}")
    print(f"Followers: {profile.followers_count if profile.followers_count is not None else 'N/A'}")
    print(f"Experience entries: {len(profile.experience)}")
    print(f"Education entries: {len(profile.education)}")
    print(f"Skills: {len(profile.skills)}")
    print(f"Source: {profile.data_source}  Completeness: {profile.completeness}%")
    print("=" * 60)
