"""Console output for the CLI commands."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List

from .models import (
    AllocationPlan,
    Project,
    RemoteTimeEntry,
    SubmissionReport,
    SubmissionResult,
    Task,
    TimeOff,
)


def fmt_hours(hours: Decimal) -> str:
    text = f"{hours:f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def print_projects(projects: Iterable[Project], settings) -> None:
    print(f"{'#id':<10} {'Alias':<15} Name")
    for p in projects:
        alias = settings.get_alias(p.id)
        print(f"{p.id:<10} {alias.alias if alias else '--':<15} {p.name}")


def print_time_entries(entries: List[RemoteTimeEntry]) -> None:
    if not entries:
        print("No time entries found.")
        return
    print(f"{'#id':<10} {'Date':<10} {'Hours':>5}  Task / Description")
    for e in entries:
        print(
            f"{e.id:<10} {e.date.strftime('%d-%m-%Y'):<10} {fmt_hours(e.hours):>5}  "
            f"{e.project_name} > {e.todo_list_name} > {e.todo_item_name}"
        )
        if e.description:
            print(f"{'':<28}{e.description}")


def print_tasks(tasks: List[Task]) -> None:
    print(f"{'Id':<10} Name")
    for t in tasks:
        print(f"{t.id:<10} {t.name}")


def print_times_off(times_off: List[TimeOff]) -> None:
    if not times_off:
        print("No time off recorded.")
        return
    print(f"{'Date':<12} Hours")
    for t in sorted(times_off, key=lambda t: t.date, reverse=True):
        print(f"{t.date.isoformat():<12} {fmt_hours(t.hours)}")


def print_plan(plan: AllocationPlan, description: str = "") -> None:
    print(
        f"\n--- {fmt_hours(plan.total_hours)} hours over {len(plan)} day(s), "
        f"{plan.first_date} to {plan.last_date} ---"
    )
    for entry in plan:
        line = f"{entry.date.strftime('%Y%m%d')} / {fmt_hours(entry.hours)}"
        print(f"{line} : {description}" if description else line)


def print_result(result: SubmissionResult) -> None:
    day = result.entry.date.isoformat()
    if result.dry_run:
        print(f"\t{day} {fmt_hours(result.entry.hours)}h (dry run, not sent)")
    elif result.ok:
        print(f"\t{day} {fmt_hours(result.entry.hours)}h ✔️ (#id : {result.entry_id})")
    else:
        print(f"\t{day} {fmt_hours(result.entry.hours)}h ✘ {result.error}")


def print_summary(report: SubmissionReport) -> None:
    print("\n--- Summary ---")
    if report.dry_run:
        print(
            f"Dry run: {len(report.plan)} entries totalling "
            f"{fmt_hours(report.plan.total_hours)} hours would be submitted."
        )
        return
    print(
        f"Submitted {len(report.succeeded)}/{len(report.plan)} entries "
        f"({fmt_hours(report.submitted_hours)} of {fmt_hours(report.plan.total_hours)} hours)."
    )
    for r in report.failed:
        print(f"Failed: {r.entry.date.isoformat()} - {r.error}")
    skipped = len(report.plan) - len(report.results)
    if skipped:
        print(f"Not attempted: {skipped} entries.")
