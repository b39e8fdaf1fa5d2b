"""Interactive shell: pick a task, describe the hours, review and submit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from . import printers
from .allocator import allocate
from .client import TeamworkClient
from .config import Settings
from .core import last_used_tasks, submit_plan
from .errors import AuthenticationError, InvalidInput
from .login_helper import ensure_credentials, save_credentials
from .models import AllocationPlan, Credentials, Project, Task, TaskList
from .prompts import ConsolePrompter, Prompter, parse_date_list

logger = logging.getLogger(__name__)

RECENT_TASKS = "Pick one of my recently used tasks"
SEARCH_TASKS = "Search tasks by project"


@dataclass(frozen=True)
class TaskItem:
    task: Task
    is_sub: bool = False

    def __str__(self) -> str:
        if self.is_sub:
            return f"    {self.task.name}"
        return f"{self.task.name} ({len(self.task.sub_tasks)} sub tasks)"


def flatten_tasks(tasks: List[Task]) -> List[TaskItem]:
    items = []
    for t in tasks:
        items.append(TaskItem(task=t))
        items.extend(TaskItem(task=st, is_sub=True) for st in t.sub_tasks)
    return items


def _project_label(project: Project) -> str:
    return project.name


def _tasklist_label(tasklist: TaskList) -> str:
    return f"{tasklist.name} ({tasklist.uncompleted_count} tasks)"


class InteractiveSession:
    """Walks the user through one bulk submission.

    Credentials are only asked for when none were passed in. An
    AuthenticationError ends the session with exit code 1.
    """

    def __init__(
        self,
        settings: Settings,
        credentials: Optional[Credentials] = None,
        prompter: Optional[Prompter] = None,
        client_factory: Callable[..., TeamworkClient] = TeamworkClient,
    ):
        self.settings = settings
        self.credentials = credentials
        self.prompter = prompter or ConsolePrompter()
        self.client_factory = client_factory

    def run(self) -> int:
        try:
            credentials = self.credentials or ensure_credentials(
                force_login=True, ask=self.prompter.ask_text, store=False
            )
            client = self.client_factory(credentials, timeout=self.settings.request_timeout)
            account = client.get_account()
            logger.debug("Authenticated as person %s", account.id)
            # typed credentials are only kept once Teamwork accepted them
            if self.credentials is None and save_credentials(credentials):
                print("Credentials saved to keyring.")

            task = self.select_task(client)
            description = self.prompter.ask_text("Description", default="")
            plan = self.ask_plan()
            printers.print_plan(plan, description)

            dry_run = self.prompter.ask_yes_no(
                "Dry run (show the entries, send nothing)?", default=True
            )
            if not dry_run and not self.prompter.ask_yes_no(
                f"Submit {len(plan)} entries to task '{task.name}'?", default=False
            ):
                print("Nothing submitted.")
                return 0

            report = submit_plan(
                None if dry_run else client,
                task.id,
                plan,
                description,
                dry_run=dry_run,
                on_result=printers.print_result,
            )
        except AuthenticationError as e:
            print(f"Authentication failed: {e}")
            return 1

        printers.print_summary(report)
        return 0 if report.complete else 1

    def select_task(self, client: TeamworkClient) -> Task:
        if self.prompter.choose("What do you want to do?", [RECENT_TASKS, SEARCH_TASKS]) == 0:
            recent = last_used_tasks(client)
            if recent:
                idx = self.prompter.choose("Choose a task", [t.name for t in recent])
                return recent[idx]
            print("No recent time entries, searching instead.")
        return self.search_task(client)

    def search_task(self, client: TeamworkClient) -> Task:
        while True:
            projects = client.list_projects()
            project = projects[
                self.prompter.choose("Choose a project", [_project_label(p) for p in projects])
            ]
            tasklists = client.list_tasklists(project.id)
            if not tasklists:
                print(f"Project {project.name} has no task lists.")
                continue
            tasklist = tasklists[
                self.prompter.choose("Choose a task list", [_tasklist_label(t) for t in tasklists])
            ]
            items = flatten_tasks(client.list_tasks(tasklist.id))
            if not items:
                print(f"Task list {tasklist.name} has no tasks.")
                continue
            return items[self.prompter.choose("Choose a task", [str(i) for i in items])].task

    def ask_plan(self) -> AllocationPlan:
        """Ask for the allocation inputs until they form a valid plan."""
        ask = self.prompter
        while True:
            start = ask.ask_date("Start date (first day to fill)")
            total = ask.ask_number("Total hours to log")
            per_day = ask.ask_number("Hours per day", default=self.settings.hours_per_day)
            vacation = ask.ask_text("Vacation days to skip (comma separated)", default="")
            try:
                excluded = set(parse_date_list(vacation))
                excluded |= self.settings.full_days_off(per_day)
                return allocate(
                    start,
                    total,
                    per_day,
                    excluded_dates=excluded,
                    booked_hours=self.settings.partial_days_off(per_day),
                )
            except InvalidInput as e:
                print(f"Invalid input: {e}")
