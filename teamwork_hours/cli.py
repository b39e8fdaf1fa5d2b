"""Command line entrypoint (console script ``teamwork-hours``)."""

from __future__ import annotations

import argparse
import datetime
import logging
import sys
from typing import List, Optional

from dotenv import load_dotenv

from . import __version__, printers
from .allocator import allocate, parse_duration, split_days, validate_hours
from .client import TeamworkClient
from .config import load_settings, parse_date, save_settings
from .core import booked_hours_since, last_time_entries, last_used_tasks, missing_hours, submit_plan
from .errors import AuthenticationError, TeamworkHoursError
from .interactive import InteractiveSession
from .login_helper import clear_stored_credentials, load_stored_credentials, save_credentials
from .models import Credentials

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teamwork-hours",
        description="Log bulk time entries in Teamwork from the command line.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", metavar="command")
    sub.required = True

    auth = sub.add_parser("auth", help="check and store company id and API token")
    auth.add_argument("-c", dest="company_id", required=True, help="Teamwork subdomain")
    auth.add_argument("-t", dest="token", required=True, help="API token")

    sub.add_parser("logout", help="remove stored credentials")
    sub.add_parser("interactive", help="guided bulk time entry")

    project = sub.add_parser("project", help="projects").add_subparsers(
        dest="action", metavar="action"
    )
    project.required = True
    p_list = project.add_parser("list", help="list projects")
    p_list.add_argument("-s", dest="search", help="search term")
    p_alias = project.add_parser("alias", help="give a project a local alias")
    p_alias.add_argument("-i", dest="id", required=True)
    p_alias.add_argument("-n", dest="name", required=True)

    entries = sub.add_parser("time-entries", help="time entries").add_subparsers(
        dest="action", metavar="action"
    )
    entries.required = True
    last = entries.add_parser("last", help="most recent time entries")
    last.add_argument("-n", dest="nb", type=int, default=10)
    entries.add_parser("last-tasks", help="tasks of the most recent time entries")
    missing = entries.add_parser("missing", help="unlogged hours since a date")
    missing.add_argument("-s", dest="since", required=True, help="YYYY-MM-DD")
    save = entries.add_parser("save", help="spread hours over work days")
    save.add_argument("-t", dest="task_id", required=True)
    save.add_argument("-s", dest="start_date", required=True, help="YYYY-MM-DD")
    save.add_argument("-H", dest="hours", required=True, help="e.g. 8d4h, 3d, 12")
    save.add_argument("-d", dest="description", default="")
    save.add_argument("-r", "--dry-run", dest="dry_run", action="store_true")
    save.add_argument("--hours-per-day", dest="hours_per_day")
    save.add_argument("--stop-on-error", action="store_true")
    save.add_argument(
        "--check-existing",
        action="store_true",
        help="count entries already in Teamwork against each day",
    )

    time_off = sub.add_parser("time-off", help="days off").add_subparsers(
        dest="action", metavar="action"
    )
    time_off.required = True
    off_save = time_off.add_parser("save", help="record time off (0 hours removes it)")
    off_save.add_argument("-d", dest="date", required=True, help="YYYY-MM-DD")
    off_save.add_argument("-H", dest="hours", default="8")
    off_list = time_off.add_parser("list", help="list time off")
    off_list.add_argument("-y", dest="year", type=int)
    off_list.add_argument("-m", dest="month", type=int)

    return parser


def _require_credentials() -> Credentials:
    credentials = load_stored_credentials()
    if credentials is None:
        raise AuthenticationError(
            "No credentials found. Init them by authenticating with command `auth`"
        )
    return credentials


def _client(settings) -> TeamworkClient:
    return TeamworkClient(_require_credentials(), timeout=settings.request_timeout)


def cmd_auth(args, settings) -> int:
    credentials = Credentials(company_id=args.company_id, token=args.token)
    account = TeamworkClient(credentials, timeout=settings.request_timeout).get_account()
    logger.debug("Token belongs to person %s", account.id)
    if not save_credentials(credentials):
        return 1
    print(f"Company and token saved in keyring for '{args.company_id}'.")
    return 0


def cmd_project(args, settings) -> int:
    if args.action == "list":
        print("List projects ...")
        printers.print_projects(_client(settings).list_projects(args.search), settings)
    else:
        path = save_settings(settings.with_alias(args.id, args.name))
        print(f"Alias '{args.name}' saved in {path}")
    return 0


def cmd_time_entries(args, settings) -> int:
    if args.action == "last":
        printers.print_time_entries(last_time_entries(_client(settings), limit=args.nb))
    elif args.action == "last-tasks":
        printers.print_tasks(last_used_tasks(_client(settings)))
    elif args.action == "missing":
        since = parse_date(args.since)
        print(f"Getting missing entries since {since} ...")
        hours = missing_hours(
            _client(settings), since, settings.times_off, settings.hours_per_day
        )
        days, rest = split_days(hours, settings.hours_per_day)
        print(f"Missing {days} days and {printers.fmt_hours(rest)} hours")
    else:
        return _save_time(args, settings)
    return 0


def _save_time(args, settings) -> int:
    per_day = args.hours_per_day or settings.hours_per_day
    start = parse_date(args.start_date)
    total = parse_duration(args.hours, per_day)
    # reject bad hour values before anything is fetched from Teamwork
    total, per_day = validate_hours(total, per_day)

    client = None if args.dry_run and not args.check_existing else _client(settings)
    days_off = settings.full_days_off(per_day)
    booked = booked_hours_since(
        client if args.check_existing else None,
        start,
        [t for t in settings.times_off if t.date not in days_off],
    )
    plan = allocate(start, total, per_day, excluded_dates=days_off, booked_hours=booked)
    printers.print_plan(plan, args.description)

    report = submit_plan(
        client,
        args.task_id,
        plan,
        args.description,
        dry_run=args.dry_run,
        stop_on_error=args.stop_on_error,
        on_result=printers.print_result,
    )
    printers.print_summary(report)
    return 0 if report.complete else 1


def cmd_time_off(args, settings) -> int:
    if args.action == "save":
        path = save_settings(settings.with_time_off(args.date, args.hours))
        print(f"Time off on {args.date} saved in {path}")
    else:
        year = args.year or datetime.date.today().year
        printers.print_times_off(settings.times_off_in(year, args.month))
    return 0


def cmd_interactive(args, settings) -> int:
    return InteractiveSession(settings, credentials=load_stored_credentials()).run()


COMMANDS = {
    "auth": cmd_auth,
    "project": cmd_project,
    "time-entries": cmd_time_entries,
    "time-off": cmd_time_off,
    "interactive": cmd_interactive,
}


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "logout":
        clear_stored_credentials()
        return 0

    try:
        settings = load_settings()
        return COMMANDS[args.command](args, settings)
    except TeamworkHoursError as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nAborted.")
        return 130


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
