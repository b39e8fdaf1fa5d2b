"""
Teamwork Hours Test Configuration

Shared fixtures for all tests. Nothing here talks to Teamwork or to the real
OS keyring.
"""
import datetime
from decimal import Decimal

import pytest
from keyring.errors import PasswordDeleteError

from teamwork_hours.errors import AuthenticationError, SubmissionError
from teamwork_hours.models import Account, Credentials, Project, RemoteTimeEntry, Task, TaskList


# =============================================================================
# FAKES
# =============================================================================

class MemoryKeyring:
    """In-memory stand-in for the keyring module."""

    def __init__(self):
        self.store = {}

    def get_password(self, service, key):
        return self.store.get((service, key))

    def set_password(self, service, key, value):
        self.store[(service, key)] = value

    def delete_password(self, service, key):
        if (service, key) not in self.store:
            raise PasswordDeleteError(key)
        del self.store[(service, key)]


class FakeClient:
    """Records calls the way TeamworkClient would receive them."""

    def __init__(self, credentials=None, timeout=None, entries=(), projects=None,
                 tasklists=None, tasks=None, fail_on=(), auth_error=False):
        self.credentials = credentials
        self.timeout = timeout
        self.entries = list(entries)
        self.projects = projects if projects is not None else [Project(id="1", name="Website")]
        self.tasklists = tasklists if tasklists is not None else [TaskList(id="10", name="Sprint", uncompleted_count=2)]
        self.tasks = tasks if tasks is not None else [
            Task(id=100, name="Build", sub_tasks=(Task(id=101, name="Frontend"),)),
            Task(id=200, name="Run"),
        ]
        self.fail_on = set(fail_on)
        self.auth_error = auth_error
        self.created = []
        self.calls = []

    def get_account(self):
        self.calls.append("get_account")
        if self.auth_error:
            raise AuthenticationError("rejected")
        return Account(id="42")

    def list_projects(self, search=None):
        return self.projects

    def list_tasklists(self, project_id):
        return self.tasklists

    def list_tasks(self, tasklist_id):
        return self.tasks

    def time_entries(self, page_size=10, from_date=None, user_id=None, page=1):
        self.calls.append("time_entries")
        matching = [e for e in self.entries if from_date is None or e.date >= from_date]
        return matching[(page - 1) * page_size:page * page_size]

    def create_time_entry(self, task_id, entry, description, person_id=None):
        if entry.date in self.fail_on:
            raise SubmissionError("HTTP 500", entry_date=entry.date)
        self.created.append((task_id, entry, description, person_id))
        return str(1000 + len(self.created))


class ScriptedPrompter:
    """Prompter answering from a list; None means 'accept the default'."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.asked = []

    def _next(self, prompt):
        self.asked.append(prompt)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {prompt}")
        return self.answers.pop(0)

    def ask_text(self, prompt, default=None):
        answer = self._next(prompt)
        return default if answer is None else answer

    def ask_date(self, prompt, default=None):
        answer = self._next(prompt)
        return default if answer is None else answer

    def ask_number(self, prompt, default=None):
        answer = self._next(prompt)
        return Decimal(str(default if answer is None else answer))

    def ask_yes_no(self, prompt, default=False):
        answer = self._next(prompt)
        return default if answer is None else answer

    def choose(self, prompt, options, default=0):
        answer = self._next(prompt)
        return default if answer is None else answer


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Point settings at a temp file and hide any real credentials."""
    monkeypatch.setenv("TEAMWORK_SETTINGS", str(tmp_path / "teamwork.yaml"))
    monkeypatch.delenv("TEAMWORK_COMPANY_ID", raising=False)
    monkeypatch.delenv("TEAMWORK_TOKEN", raising=False)
    return tmp_path


@pytest.fixture(autouse=True)
def memory_keyring(monkeypatch):
    kr = MemoryKeyring()
    monkeypatch.setattr("teamwork_hours.login_helper.keyring", kr)
    return kr


@pytest.fixture
def credentials():
    return Credentials(company_id="acme", token="twp_secret")


@pytest.fixture
def monday():
    """2019-06-24 is a Monday."""
    return datetime.date(2019, 6, 24)


@pytest.fixture
def remote_entries():
    return [
        RemoteTimeEntry(
            id="9", date=datetime.date(2019, 6, 25), hours=Decimal("4"),
            description="review", project_id="1", project_name="Website",
            todo_list_id="10", todo_list_name="Sprint", todo_item_id="200", todo_item_name="Run",
        ),
        RemoteTimeEntry(
            id="8", date=datetime.date(2019, 6, 24), hours=Decimal("8"),
            description="dev", project_id="1", project_name="Website",
            todo_list_id="10", todo_list_name="Sprint", todo_item_id="100", todo_item_name="Build",
        ),
        RemoteTimeEntry(
            id="7", date=datetime.date(2019, 6, 21), hours=Decimal("8"),
            description="dev", project_id="1", project_name="Website",
            todo_list_id="10", todo_list_name="Sprint", todo_item_id="100", todo_item_name="Build",
        ),
    ]


@pytest.fixture
def fake_client(credentials, remote_entries):
    return FakeClient(credentials, entries=remote_entries)
