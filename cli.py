import argparse
import json
import os
import sys
import uuid as _uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from db.connection import get_connection
from db import schema
from db.repos.extraction_status_repo import ExtractionStatusRepo
from db.repos.profiles_repo import ProfilesRepo
from pipelines.extract_profile import ExtractionRunner, extract_profile, ingest_scraped_profile
from services.background import BackgroundExtractor
from services.brightdata_client import BrightDataClient
from services.domain_utils import normalize_profile_url
from services.errors import ConfigurationError, NormalizationError
from services.field_resolution import key, nested, resolve
from services.orchestrator import ExtractionOrchestrator
from services.profile_normalizer import unwrap_payload
from services.reporting import print_extraction_summary, print_profile_report
from config.settings import get_settings
from utils.logging_setup import init_logging


PAYLOAD_URL_CANDIDATES = (key("url"), key("input_url"), nested("input", "url"), key("profileUrl"))


def _build_orchestrator() -> ExtractionOrchestrator:
    try:
        client = BrightDataClient()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        raise SystemExit(2)
    return ExtractionOrchestrator(client)


def _print_outcome(ctx) -> None:
    if ctx.already_exists:
        rec = ctx.existing_record
        state = rec.status if rec is not None else "unknown"
        print(f"Already extracted: {ctx.normalized_url} (status={state})")
    elif ctx.error is not None:
        print(f"Failed: {ctx.normalized_url} [{getattr(ctx.error, 'error_type', 'unexpected_error')}] {ctx.error}")
    elif ctx.result is not None:
        result = ctx.result
        suffix = f", job={result.job_id}" if result.job_id else ""
        print(f"Saved: {ctx.normalized_url} (method={result.method}{suffix}, completeness={result.profile.completeness}%)")


@contextmanager
def _open_db(db_path: str):
    """Bootstrapped connection for one subcommand, closed on the way out."""
    conn = get_connection(db_path)
    try:
        schema.bootstrap(conn)
        yield conn
    finally:
        conn.close()


def cmd_bootstrap(args):
    with _open_db(args.db):
        print("Schema ready")


def cmd_extract(args):
    urls = list(dict.fromkeys(args.url))
    if args.own_profile and len(urls) > 1:
        print("--own-profile takes a single --url", file=sys.stderr)
        raise SystemExit(2)
    orchestrator = _build_orchestrator()

    if len(urls) == 1:
        with _open_db(args.db) as conn:
            ctx = extract_profile(
                conn, orchestrator, args.user_id, urls[0], is_own_profile=args.own_profile, retry=args.retry
            )
        _print_outcome(ctx)
        return

    # Several targets: one worker thread (and connection) per extraction
    runner = ExtractionRunner(args.db, orchestrator)
    runner.bootstrap()
    background = BackgroundExtractor(runner, max_workers=get_settings().extraction_workers)
    futures = [background.submit(args.user_id, u, retry=args.retry) for u in urls]
    background.shutdown(wait=True)
    for fut in futures:
        _print_outcome(fut.result())

    with _open_db(args.db) as conn:
        repo = ExtractionStatusRepo(conn)
        records = [r for r in (repo.find(args.user_id, normalize_profile_url(u) or "") for u in urls) if r is not None]
    print_extraction_summary(records, run_id=os.getenv("RUN_ID"))


def cmd_ingest_scraped(args):
    payload = json.loads(Path(args.input).read_text(encoding="utf-8"))
    target_url = args.url
    if not target_url:
        try:
            target_url = resolve(unwrap_payload(payload), PAYLOAD_URL_CANDIDATES)
        except NormalizationError as e:
            print(f"Invalid payload: {e}", file=sys.stderr)
            raise SystemExit(2)
    if not target_url:
        print("No profile URL in payload; pass --url", file=sys.stderr)
        raise SystemExit(2)
    with _open_db(args.db) as conn:
        ctx = ingest_scraped_profile(conn, args.user_id, target_url, payload, is_own_profile=args.own_profile)
    _print_outcome(ctx)


def cmd_status(args):
    with _open_db(args.db) as conn:
        record = ExtractionStatusRepo(conn).find(args.user_id, normalize_profile_url(args.url) or "")
    if record is None:
        print("No extraction recorded")
        return
    print(json.dumps(record.model_dump(), ensure_ascii=False, indent=2))


def cmd_report_profile(args):
    with _open_db(args.db) as conn:
        repo = ProfilesRepo(conn)
        if args.url:
            profile = repo.get_target_profile(args.user_id, normalize_profile_url(args.url) or "")
        else:
            profile = repo.get_user_profile(args.user_id)
    if profile is None:
        print("No profile found")
        return
    print_profile_report(profile)


def cmd_list_status(args):
    with _open_db(args.db) as conn:
        records = ExtractionStatusRepo(conn).list_by_status(args.status, limit=args.limit)
    for r in records:
        print(f"{r.updated_at}\t{r.status}\t{r.user_id}\t{r.normalized_url}\t{r.error_type or ''}")
    print_extraction_summary(records, run_id=os.getenv("RUN_ID"))


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    if not os.getenv("RUN_ID"):
        ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        os.environ["RUN_ID"] = f"{ts}-{_uuid.uuid4().hex[:6]}"

    parser = argparse.ArgumentParser(description="LinkedIn profile extraction CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and views")
    p_boot.set_defaults(func=cmd_bootstrap)

    p_ext = sub.add_parser("extract", help="Extract LinkedIn profiles through Bright Data")
    p_ext.add_argument("--user-id", required=True)
    p_ext.add_argument("--url", required=True, action="append", help="Profile URL (repeatable)")
    p_ext.add_argument("--own-profile", action="store_true", help="Store as the user's own profile")
    p_ext.add_argument("--retry", action="store_true", help="Re-run a previously failed extraction")
    p_ext.set_defaults(func=cmd_extract)

    p_ing = sub.add_parser("ingest-scraped", help="Normalize and store a profile scraped by the browser extension")
    p_ing.add_argument("--user-id", required=True)
    p_ing.add_argument("--input", required=True, help="Path to JSON payload")
    p_ing.add_argument("--url", default=None, help="Profile URL (default: taken from the payload)")
    p_ing.add_argument("--own-profile", action="store_true")
    p_ing.set_defaults(func=cmd_ingest_scraped)

    p_st = sub.add_parser("status", help="Show the extraction record for a (user, profile) pair")
    p_st.add_argument("--user-id", required=True)
    p_st.add_argument("--url", required=True)
    p_st.set_defaults(func=cmd_status)

    p_rp = sub.add_parser("report-profile", help="Show a stored profile (own profile when --url is omitted)")
    p_rp.add_argument("--user-id", required=True)
    p_rp.add_argument("--url", default=None)
    p_rp.set_defaults(func=cmd_report_profile)

    p_ls = sub.add_parser("list-status", help="List recent extraction records")
    p_ls.add_argument("--status", choices=["processing", "completed", "failed"], default=None)
    p_ls.add_argument("--limit", type=int, default=20)
    p_ls.set_defaults(func=cmd_list_status)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
