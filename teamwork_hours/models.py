"""Value types shared by the allocator, the Teamwork client and the CLI."""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

TEAMWORK_HOST = "eu.teamwork.com"


@dataclass(frozen=True)
class Credentials:
    """Company subdomain and API token for one process lifetime."""

    company_id: str
    token: str

    @property
    def base_url(self) -> str:
        return f"https://{self.company_id}.{TEAMWORK_HOST}"

    def __repr__(self) -> str:
        # keep the token out of logs and tracebacks
        return f"Credentials(company_id={self.company_id!r}, token='***')"


@dataclass(frozen=True)
class TimeEntry:
    date: datetime.date
    hours: Decimal

    @property
    def total_minutes(self) -> int:
        return int((self.hours * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def whole_hours(self) -> int:
        return self.total_minutes // 60

    @property
    def minutes(self) -> int:
        return self.total_minutes % 60


@dataclass(frozen=True)
class AllocationPlan:
    """Ordered time entries whose hours add up to ``total_hours``."""

    entries: Tuple[TimeEntry, ...]
    total_hours: Decimal

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def allocated_hours(self) -> Decimal:
        return sum((e.hours for e in self.entries), Decimal("0"))

    @property
    def first_date(self) -> Optional[datetime.date]:
        return self.entries[0].date if self.entries else None

    @property
    def last_date(self) -> Optional[datetime.date]:
        return self.entries[-1].date if self.entries else None


@dataclass(frozen=True)
class TimeOff:
    date: datetime.date
    hours: Decimal


@dataclass(frozen=True)
class ProjectAlias:
    project_id: str
    alias: str


# Remote objects, as returned by the Teamwork API


@dataclass(frozen=True)
class Account:
    id: str


@dataclass(frozen=True)
class Project:
    id: str
    name: str


@dataclass(frozen=True)
class TaskList:
    id: str
    name: str
    uncompleted_count: int = 0


@dataclass(frozen=True)
class Task:
    id: int
    name: str
    sub_tasks: Tuple["Task", ...] = ()


@dataclass(frozen=True)
class RemoteTimeEntry:
    id: str
    date: datetime.date
    hours: Decimal
    description: str = ""
    project_id: str = ""
    project_name: str = ""
    todo_list_id: str = ""
    todo_list_name: str = ""
    todo_item_id: str = ""
    todo_item_name: str = ""

    def task(self) -> Task:
        return Task(id=int(self.todo_item_id), name=self.todo_item_name)


@dataclass(frozen=True)
class SubmissionResult:
    entry: TimeEntry
    ok: bool
    entry_id: Optional[str] = None
    error: Optional[str] = None
    dry_run: bool = False


@dataclass
class SubmissionReport:
    """Outcome of pushing an AllocationPlan to Teamwork."""

    plan: AllocationPlan
    dry_run: bool = False
    results: list = field(default_factory=list)

    @property
    def succeeded(self) -> list:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list:
        return [r for r in self.results if not r.ok]

    @property
    def submitted_hours(self) -> Decimal:
        return sum((r.entry.hours for r in self.succeeded), Decimal("0"))

    @property
    def complete(self) -> bool:
        return not self.failed and len(self.results) == len(self.plan)
