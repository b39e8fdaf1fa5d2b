"""Operations combining the Teamwork client with the allocator."""

from __future__ import annotations

import datetime
import logging
from collections import defaultdict
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional

from .allocator import DEFAULT_HOURS_PER_DAY, remaining_workload, working_days
from .client import TeamworkClient
from .errors import SubmissionError
from .models import (
    AllocationPlan,
    RemoteTimeEntry,
    SubmissionReport,
    SubmissionResult,
    Task,
    TimeOff,
)

logger = logging.getLogger(__name__)

# Entries per request when reading history; more pages are fetched as needed.
HISTORY_PAGE_SIZE = 500


def time_entries_since(client: TeamworkClient, since: datetime.date) -> List[RemoteTimeEntry]:
    """Every entry of the current user from ``since`` on, page after page."""
    entries: List[RemoteTimeEntry] = []
    page = 1
    while True:
        chunk = client.time_entries(page_size=HISTORY_PAGE_SIZE, from_date=since, page=page)
        entries.extend(chunk)
        if len(chunk) < HISTORY_PAGE_SIZE:
            return entries
        page += 1


def submit_plan(
    client: Optional[TeamworkClient],
    task_id,
    plan: AllocationPlan,
    description: str,
    dry_run: bool = False,
    stop_on_error: bool = False,
    on_result: Optional[Callable[[SubmissionResult], None]] = None,
) -> SubmissionReport:
    """Create one Teamwork time entry per entry of ``plan``.

    Entries are sent one after the other. A failing entry is recorded and the
    next one is still attempted unless ``stop_on_error`` is set; entries that
    already went through are never rolled back. AuthenticationError is not
    caught. With ``dry_run`` no request at all is made and ``client`` may be
    None.
    """
    report = SubmissionReport(plan=plan, dry_run=dry_run)
    person_id = None
    if not dry_run:
        if client is None:
            raise ValueError("A client is required unless dry_run is set")
        person_id = client.get_account().id

    logger.info(
        "Submitting %s hours over %d entries to task %s%s",
        plan.total_hours,
        len(plan),
        task_id,
        " (dry run)" if dry_run else "",
    )
    for entry in plan:
        if dry_run:
            result = SubmissionResult(entry=entry, ok=True, dry_run=True)
        else:
            try:
                entry_id = client.create_time_entry(
                    task_id, entry, description, person_id=person_id
                )
                result = SubmissionResult(entry=entry, ok=True, entry_id=entry_id)
            except SubmissionError as e:
                logger.warning("Entry for %s failed: %s", entry.date, e)
                result = SubmissionResult(entry=entry, ok=False, error=str(e))

        report.results.append(result)
        if on_result:
            on_result(result)
        if not result.ok and stop_on_error:
            logger.info("Stopping after first failure")
            break
    return report


def last_time_entries(
    client: TeamworkClient, limit: int = 10, since: Optional[datetime.date] = None
) -> List[RemoteTimeEntry]:
    return client.time_entries(page_size=limit, from_date=since)


def last_used_tasks(client: TeamworkClient, limit: int = 60) -> List[Task]:
    """Distinct tasks of the last ``limit`` entries, most recent first."""
    tasks = []
    seen = set()
    for entry in client.time_entries(page_size=limit):
        if not entry.todo_item_id or entry.todo_item_id in seen:
            continue
        seen.add(entry.todo_item_id)
        tasks.append(entry.task())
    return tasks


def missing_hours(
    client: TeamworkClient,
    since: datetime.date,
    time_off: Iterable[TimeOff] = (),
    hours_per_day=DEFAULT_HOURS_PER_DAY,
    today: Optional[datetime.date] = None,
) -> Decimal:
    """Unlogged hours over the working days in [since, today)."""
    today = today or datetime.date.today()
    if today <= since:
        return Decimal("0")

    entries = time_entries_since(client, since)
    time_off = list(time_off)
    return sum(
        (
            remaining_workload(day, entries, time_off, hours_per_day)
            for day in working_days(since, today)
        ),
        Decimal("0"),
    )


def booked_hours_since(
    client: Optional[TeamworkClient],
    start_date: datetime.date,
    time_off: Iterable[TimeOff] = (),
) -> Dict[datetime.date, Decimal]:
    """Hours already taken per day from ``start_date`` on.

    Combines time off with the entries already on the server (when a client is
    given), ready to be passed to ``allocate(booked_hours=...)``.
    """
    booked: Dict[datetime.date, Decimal] = defaultdict(Decimal)
    for t in time_off:
        if t.date >= start_date:
            booked[t.date] += t.hours
    if client is not None:
        for e in time_entries_since(client, start_date):
            if e.date >= start_date:
                booked[e.date] += e.hours
    return dict(booked)
