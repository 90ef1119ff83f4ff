"""Command-line interface for the storeshift scheduling tool."""

import argparse
import json
import logging
import sys
import uuid
from datetime import date, timedelta
from typing import Optional

from storeshift.domain.config import SchedulingConfig
from storeshift.domain.models import BusinessHour, RequiredRole, WorkItem
from storeshift.domain.timeutils import parse_hhmm, week_start
from storeshift.errors import StoreShiftError
from storeshift.logging_setup import configure_logging
from storeshift.output.pdf_generator import PDFGenerator
from storeshift.persistence.repository import ScheduleRepository
from storeshift.persistence.tables import create_db_engine, create_session_factory, init_database
from storeshift.service.requests import AutoAssignRequest, CopyWeekRequest, CoverageRequest, parse_date
from storeshift.service.scheduling_service import SchedulingService

logger = logging.getLogger(__name__)


def create_sample_store(session_factory, member_count: int = 6, name: str = "Demo Cafe") -> str:
    """Seed a sample store with roles, members, work items and hours.

    Args:
        session_factory: Sessionmaker bound to an initialized database.
        member_count: Number of members to create.
        name: Store name.

    Returns:
        ID of the new store.
    """
    names = [
        "Alice", "Bob", "Carol", "David", "Eve", "Frank", "Grace", "Henry",
        "Ivy", "Jack", "Kate", "Leo", "Mia", "Noah", "Olivia", "Paul",
    ]

    with session_factory.begin() as session:
        repo = ScheduleRepository(session)
        store = repo.add_store(name)
        barista = repo.add_role(store.id, "Barista", code="BAR")
        cashier = repo.add_role(store.id, "Cashier", code="CSH")

        for i in range(member_count):
            member_name = names[i % len(names)]
            if i >= len(names):
                member_name = f"{member_name}{i // len(names) + 1}"
            # Alternate roles; every third member holds both
            roles = {barista.id} if i % 2 == 0 else {cashier.id}
            if i % 3 == 0:
                roles = {barista.id, cashier.id}
            repo.add_member(store.id, member_name, role_ids=roles, user_id=f"user-{i + 1}")

        opening = repo.add_work_item(
            WorkItem(
                id=str(uuid.uuid4()),
                store_id=store.id,
                name="Opening",
                start_min=parse_hhmm("07:00"),
                end_min=parse_hhmm("15:00"),
                unpaid_break_min=30,
            )
        )
        closing = repo.add_work_item(
            WorkItem(
                id=str(uuid.uuid4()),
                store_id=store.id,
                name="Closing",
                start_min=parse_hhmm("14:00"),
                end_min=parse_hhmm("22:00"),
                unpaid_break_min=30,
            )
        )
        repo.add_required_role(RequiredRole(opening.id, barista.id, min_count=1))
        repo.add_required_role(RequiredRole(closing.id, barista.id, min_count=1))
        repo.add_required_role(RequiredRole(closing.id, cashier.id, min_count=1))

        # Weekdays 07:00-22:00; weekends close at midnight
        for weekday in range(7):
            if weekday in (0, 6):
                hour = BusinessHour(store.id, weekday, parse_hhmm("09:00"), 0)
            else:
                hour = BusinessHour(store.id, weekday, parse_hhmm("07:00"), parse_hhmm("22:00"))
            repo.set_business_hour(hour)

    logger.info("Created sample store %s with %d members", store.id, member_count)
    return store.id


def run_demo(service: SchedulingService, member_count: int, output_path: Optional[str]) -> None:
    """Seed a store, auto-assign this week, copy it forward and report hours."""
    print(f"Creating demo store with {member_count} members...")
    store_id = create_sample_store(service.session_factory, member_count)
    start = week_start(date.today(), service.config.week_starts_on)
    end = start + timedelta(days=6)

    result = service.auto_assign(AutoAssignRequest(store_id, start, end, actor="demo"))
    print(f"\nStore {store_id}")
    print(f"  Week: {start} to {end}")
    print(f"  Assignments created: {result.created_count}")
    print(f"  Unfilled slots: {len(result.unfilled_slots)}")

    copied = service.copy_week(CopyWeekRequest(store_id, start, start + timedelta(days=7), actor="demo"))
    print(f"  Copied to next week: {copied.copied_count} ({copied.message})")

    _print_hours(service, store_id, start)

    if output_path:
        print(f"\nGenerating PDF: {output_path}")
        PDFGenerator().generate(service.week_snapshot(store_id, start), start, output_path)
        print("  PDF created successfully!")


def _print_hours(service: SchedulingService, store_id: str, today: date) -> None:
    summary = service.work_hours(store_id, today=today)
    print(f"\nWeekly Hours ({summary.week.date_from} to {summary.week.date_to}): "
          f"{summary.week.total_hours:.1f}")
    for row in summary.week.by_member:
        print(f"  {row.member_name:<16} {row.hours:>6.1f}")
    print(f"Monthly Hours ({summary.month.date_from} to {summary.month.date_to}): "
          f"{summary.month.total_hours:.1f}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storeshift",
        description="storeshift - Store Staff Shift Scheduler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s init-db                                  Create the schedule tables
  %(prog)s demo --count 8 --output roster.pdf       Seed a store and schedule a week
  %(prog)s auto-assign --store S --from 2024-06-03 --to 2024-06-09
  %(prog)s validate --store S --work-item W --member M1 --member M2
  %(prog)s copy-week --store S --source 2024-06-03 --target 2024-06-10
  %(prog)s unavailable --store S --member M --date 2024-06-04 --start 10:00 --end 14:00
  %(prog)s list-unavailable --store S --from 2024-06-03 --to 2024-06-09
  %(prog)s hours --store S --today 2024-06-05
        """,
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy database URL (default: $STORESHIFT_DATABASE_URL or sqlite:///storeshift.db)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: $STORESHIFT_LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("init-db", help="Create the database tables")

    demo_parser = subparsers.add_parser("demo", help="Seed a sample store and schedule it")
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=6,
        help="Number of members to create (default: 6)",
    )
    demo_parser.add_argument("--output", "-o", type=str, help="Output PDF file path")

    assign_parser = subparsers.add_parser("auto-assign", help="Fill open slots for a date range")
    assign_parser.add_argument("--store", required=True, help="Store ID")
    assign_parser.add_argument("--from", dest="date_from", required=True, help="First date (YYYY-MM-DD)")
    assign_parser.add_argument("--to", dest="date_to", required=True, help="Last date (YYYY-MM-DD)")
    assign_parser.add_argument("--member", help="Only assign this member")
    assign_parser.add_argument("--date", help="Only schedule this date")
    assign_parser.add_argument("--actor", default="cli", help="created_by stamp (default: cli)")

    validate_parser = subparsers.add_parser("validate", help="Check role coverage")
    validate_parser.add_argument("--store", required=True, help="Store ID")
    validate_parser.add_argument(
        "--work-item", dest="work_items", action="append", required=True,
        help="Work item ID (repeatable)",
    )
    validate_parser.add_argument(
        "--member", dest="members", action="append", default=[],
        help="Assigned member ID (repeatable)",
    )
    validate_parser.add_argument(
        "--locale", default="en", choices=["en", "ko", "ja"],
        help="Message language (default: en)",
    )
    validate_parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    copy_parser = subparsers.add_parser("copy-week", help="Copy one week's schedule onto another")
    copy_parser.add_argument("--store", required=True, help="Store ID")
    copy_parser.add_argument("--source", required=True, help="Any date in the source week")
    copy_parser.add_argument("--target", required=True, help="Any date in the target week")
    copy_parser.add_argument("--actor", default="cli", help="created_by stamp (default: cli)")

    unavailable_parser = subparsers.add_parser("unavailable", help="Mark a member unavailable")
    unavailable_parser.add_argument("--store", required=True, help="Store ID")
    unavailable_parser.add_argument("--member", required=True, help="Member ID")
    unavailable_parser.add_argument("--date", required=True, help="Date (YYYY-MM-DD)")
    unavailable_parser.add_argument("--reason", help="Optional reason")
    unavailable_parser.add_argument("--start", help="Start of a partial-day window (HH:MM)")
    unavailable_parser.add_argument("--end", help="End of a partial-day window (HH:MM)")

    list_unavailable_parser = subparsers.add_parser(
        "list-unavailable", help="List unavailability records for a date range"
    )
    list_unavailable_parser.add_argument("--store", required=True, help="Store ID")
    list_unavailable_parser.add_argument("--from", dest="date_from", required=True, help="First date (YYYY-MM-DD)")
    list_unavailable_parser.add_argument("--to", dest="date_to", required=True, help="Last date (YYYY-MM-DD)")
    list_unavailable_parser.add_argument("--member", help="Only this member")

    hours_parser = subparsers.add_parser("hours", help="Report paid hours per member")
    hours_parser.add_argument("--store", required=True, help="Store ID")
    hours_parser.add_argument("--today", help="Reference date (default: today)")
    hours_parser.add_argument("--json", action="store_true", help="Print the summary as JSON")

    pdf_parser = subparsers.add_parser("roster-pdf", help="Render a weekly roster PDF")
    pdf_parser.add_argument("--store", required=True, help="Store ID")
    pdf_parser.add_argument("--week", required=True, help="Any date in the week")
    pdf_parser.add_argument("--output", "-o", required=True, help="Output PDF file path")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 1

    config = SchedulingConfig.from_env()
    if args.database_url:
        config.database_url = args.database_url
    if args.log_level:
        config.log_level = args.log_level.upper()
    configure_logging(config.log_level)

    engine = create_db_engine(config.database_url)
    init_database(engine)
    service = SchedulingService(create_session_factory(engine), config)

    try:
        if args.command == "init-db":
            print(f"Database ready: {config.database_url}")
        elif args.command == "demo":
            run_demo(service, args.count, args.output)
        elif args.command == "auto-assign":
            result = service.auto_assign(
                AutoAssignRequest(
                    store_id=args.store,
                    date_from=args.date_from,
                    date_to=args.date_to,
                    member_id=args.member,
                    date=args.date,
                    actor=args.actor,
                )
            )
            print(json.dumps(result.get_summary()))
        elif args.command == "validate":
            report = service.validate_role_coverage(
                CoverageRequest(args.store, args.work_items, args.members, args.locale)
            )
            if args.json:
                print(json.dumps(report.to_dict(), ensure_ascii=False, indent=2))
            else:
                print(report.message)
                for coverage in report.role_coverage:
                    mark = "ok" if coverage.is_sufficient else "SHORT"
                    print(f"  {coverage.label}: {coverage.current_count}/{coverage.required_count} {mark}")
        elif args.command == "copy-week":
            result = service.copy_week(
                CopyWeekRequest(args.store, args.source, args.target, actor=args.actor)
            )
            print(json.dumps(result.to_dict()))
        elif args.command == "unavailable":
            record = service.mark_unavailable(
                args.store, args.member, args.date, args.reason, args.start, args.end
            )
            window = f" ({record.start_time}-{record.end_time})" if record.has_time_restriction else ""
            print(f"Member {args.member} marked unavailable on {args.date}{window}")
        elif args.command == "list-unavailable":
            records = service.list_unavailable(args.store, args.date_from, args.date_to, args.member)
            for record in records:
                window = f"{record.start_time}-{record.end_time}" if record.has_time_restriction else "all day"
                reason = f"  {record.reason}" if record.reason else ""
                print(f"{record.date.isoformat()}  {record.member_id}  {window}{reason}")
            print(f"{len(records)} record(s)")
        elif args.command == "hours":
            today = parse_date(args.today, "today") if args.today else date.today()
            if args.json:
                print(json.dumps(service.work_hours(args.store, today=today).to_dict(), indent=2))
            else:
                _print_hours(service, args.store, today)
        elif args.command == "roster-pdf":
            week_of = parse_date(args.week, "week")
            PDFGenerator().generate(service.week_snapshot(args.store, week_of), week_of, args.output)
            print(f"Roster written to {args.output}")
    except StoreShiftError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(main())
