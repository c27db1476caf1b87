import argparse
import json
import os
import uuid as _uuid

from config.settings import Settings, get_settings
from db import schema
from db.connection import Store
from pipelines.enrich_employees import run_sweep
from pipelines.ingest_employees import ingest_source
from services.domain_utils import normalize_linkedin_profile_url
from services.enrichment_service import EnrichmentOrchestrator
from services.merge import MergePolicy
from services.reporting import format_progress, print_ingest_summary, print_sweep_summary
from services.request_executor import RateLimitedExecutor, RetryPolicy
from services.rocketreach_client import RocketReachClient
from sources.registry import get_source
from utils.logging_setup import init_logging
from utils.rate_limit import limiter_for_interval
import sources  # noqa: F401 ensure registration


def _ensure_run_id() -> None:
    if not os.getenv("RUN_ID"):
        os.environ["RUN_ID"] = _uuid.uuid4().hex


def _build_client(settings: Settings) -> RocketReachClient:
    if not settings.rocketreach_api_key:
        raise RuntimeError("ROCKETREACH_API_KEY is not set; add it to your environment or .env")
    executor = RateLimitedExecutor(
        policy=RetryPolicy(
            max_attempts=settings.max_retries,
            default_wait_seconds=settings.default_retry_after_seconds,
        ),
        timeout=settings.http_timeout_seconds,
        trace_path=settings.api_log_path if settings.api_trace else None,
    )
    return RocketReachClient(executor, settings.rocketreach_api_key, settings.rocketreach_base_url)


def _build_orchestrator(settings: Settings, client: RocketReachClient) -> EnrichmentOrchestrator:
    return EnrichmentOrchestrator(
        client,
        poll_interval=settings.poll_interval_seconds,
        max_polls=settings.poll_max_attempts,
    )


def _merge_policy(args, settings: Settings) -> MergePolicy:
    return MergePolicy(getattr(args, "merge_policy", None) or settings.merge_policy)


def cmd_bootstrap(args):
    with Store(args.db):
        pass
    print("Schema ready")


def cmd_ingest(args):
    settings = get_settings()
    _ensure_run_id()
    orchestrator = None if args.no_enrich else _build_orchestrator(settings, _build_client(settings))
    source = get_source("csv_import", path=args.input)
    with Store(args.db) as store:
        report = ingest_source(
            store,
            source,
            orchestrator=orchestrator,
            policy=_merge_policy(args, settings),
            issue_log_path=settings.issue_log_path,
        )
    print_ingest_summary(report, source=args.input)


def cmd_search_company(args):
    settings = get_settings()
    _ensure_run_id()
    client = _build_client(settings)
    orchestrator = None if args.no_enrich else _build_orchestrator(settings, client)
    source = get_source(
        "people_search",
        client=client,
        company=args.company,
        location=args.location or settings.search_location,
        start=args.start,
        page_size=args.page_size or settings.search_page_size,
    )
    with Store(args.db) as store:
        report = ingest_source(
            store,
            source,
            orchestrator=orchestrator,
            policy=_merge_policy(args, settings),
            issue_log_path=settings.issue_log_path,
        )
    print_ingest_summary(report, source=f"people search: {args.company}")


def cmd_enrich(args):
    settings = get_settings()
    _ensure_run_id()
    client = _build_client(settings)
    orchestrator = _build_orchestrator(settings, client)

    def _progress(progress):
        print(format_progress(progress))

    with Store(args.db) as store:
        report = run_sweep(
            store,
            orchestrator,
            limiter=limiter_for_interval(settings.courtesy_delay_seconds),
            limit=args.limit,
            skip_rejected=args.skip_rejected,
            on_progress=_progress if args.progress else None,
        )
    print_sweep_summary(report)
    print(f"Enriched {report.enriched} employees")


def cmd_report_company(args):
    with Store(args.db) as store:
        company = store.companies.find_by_name(args.company)
        if company is None:
            print("No record found for company")
            return
        cur = store.conn.cursor()
        cur.execute(
            (
                "SELECT employee_id, name, linkedin_url, title, location, emails, phone_numbers, "
                "       is_enriched, enrichment_outcome, last_enriched_at "
                "FROM v_employees_with_company WHERE company_id = ? ORDER BY employee_id"
            ),
            (company.id,),
        )
        employees = [dict(r) for r in cur.fetchall()]
    result = {**company.model_dump(), "employees": employees}
    print(json.dumps(result, indent=2, ensure_ascii=False))


def cmd_shared_employers(args):
    profile = normalize_linkedin_profile_url(args.profile)
    if not profile:
        print("Invalid LinkedIn profile URL")
        return
    with Store(args.db) as store:
        employee = store.employees.get_by_linkedin_url(profile)
        if employee is None:
            print("No record found for profile")
            return
        matches = store.job_history.find_shared_employers(int(employee.id))
    print(json.dumps({"employee_id": employee.id, "name": employee.name, "shared": matches}, indent=2, ensure_ascii=False))


def cmd_tables(args):
    with Store(args.db) as store:
        for name in args.drop or []:
            if schema.drop_table(store.conn, name):
                print(f"Dropped table: {name}")
            else:
                print(f"No such table: {name}")
        for name, count in schema.list_tables(store.conn):
            print(f"{name}\t{count}")


def main():
    settings = get_settings()
    init_logging(settings.log_level)
    parser = argparse.ArgumentParser(description="Employee enrichment CLI")
    parser.add_argument("--db", default=settings.db_path, help="Path to SQLite DB (default from settings)")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_boot = sub.add_parser("bootstrap", help="Create tables and indexes")
    p_boot.set_defaults(func=cmd_bootstrap)

    policies = [p.value for p in MergePolicy]

    p_ing = sub.add_parser("ingest", help="Import employees from a CSV file or a directory of CSV files")
    p_ing.add_argument("--input", required=True, help="Path to a .csv file or a directory of them")
    p_ing.add_argument("--no-enrich", action="store_true", help="Skip people-search enrichment during import")
    p_ing.add_argument("--merge-policy", choices=policies, default=None, help="How re-imported rows merge (default from settings)")
    p_ing.set_defaults(func=cmd_ingest)

    p_sc = sub.add_parser("search-company", help="Find a company's current employees via people search and import them")
    p_sc.add_argument("--company", required=True, help="Company name as the service lists it")
    p_sc.add_argument("--location", default=None, help="Location filter (default from settings)")
    p_sc.add_argument("--start", type=int, default=1, help="Result offset (default: 1)")
    p_sc.add_argument("--page-size", type=int, default=None, help="Results per page (default from settings)")
    p_sc.add_argument("--no-enrich", action="store_true", help="Skip per-employee enrichment")
    p_sc.add_argument("--merge-policy", choices=policies, default=None, help="How re-imported rows merge (default from settings)")
    p_sc.set_defaults(func=cmd_search_company)

    p_enr = sub.add_parser("enrich", help="Enrich every employee not yet enriched")
    p_enr.add_argument("--limit", type=int, default=None, help="Max employees to enrich in this run (default: all)")
    p_enr.add_argument("--progress", action="store_true", help="Print progress and ETA after each employee")
    p_enr.add_argument("--skip-rejected", action="store_true", help="Leave out employees the service already rejected")
    p_enr.set_defaults(func=cmd_enrich)

    p_rc = sub.add_parser("report-company", help="Show a company and its employees")
    p_rc.add_argument("--company", required=True, help="Company name (case-insensitive)")
    p_rc.set_defaults(func=cmd_report_company)

    p_se = sub.add_parser("shared-employers", help="Employees who share a past employer with a profile")
    p_se.add_argument("--profile", required=True, help="LinkedIn profile URL")
    p_se.set_defaults(func=cmd_shared_employers)

    p_tb = sub.add_parser("tables", help="List tables with row counts; optionally drop some")
    p_tb.add_argument("--drop", action="append", help="Table to drop (repeatable)")
    p_tb.set_defaults(func=cmd_tables)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
