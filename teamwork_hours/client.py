"""Thin Teamwork Projects API client.

Only the handful of endpoints the CLI needs are wrapped. Every call goes
through ``_request`` which applies basic auth (token as user name), the
configured timeout, and maps HTTP failures onto this package's exceptions.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import requests
from dateutil.parser import isoparse

from .config import DEFAULT_TIMEOUT
from .errors import ApiError, AuthenticationError, SubmissionError
from .models import (
    Account,
    Credentials,
    Project,
    RemoteTimeEntry,
    Task,
    TaskList,
    TimeEntry,
)

logger = logging.getLogger(__name__)

USER_AGENT = "teamwork-hours"
ENTRY_START_TIME = "08:00"


def _parse_task(raw: dict) -> Task:
    return Task(
        id=int(raw["id"]),
        name=raw.get("content") or raw.get("name", ""),
        sub_tasks=tuple(_parse_task(s) for s in raw.get("subTasks") or []),
    )


def _parse_time_entry(raw: dict) -> RemoteTimeEntry:
    hours = Decimal(str(raw.get("hours") or "0"))
    minutes = raw.get("minutes")
    if minutes:
        hours += Decimal(str(minutes)) / 60
    return RemoteTimeEntry(
        id=str(raw["id"]),
        date=isoparse(raw["date"]).date(),
        hours=hours,
        description=raw.get("description", ""),
        project_id=str(raw.get("project-id", "")),
        project_name=raw.get("project-name", ""),
        todo_list_id=str(raw.get("todo-list-id", "")),
        todo_list_name=raw.get("todo-list-name", ""),
        todo_item_id=str(raw.get("todo-item-id", "")),
        todo_item_name=raw.get("todo-item-name", ""),
    )


class TeamworkClient:
    """Authenticated access to one Teamwork tenant."""

    def __init__(
        self,
        credentials: Credentials,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.credentials = credentials
        self.base_url = credentials.base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.auth = (credentials.token, "")
        self.session.headers.update(
            {"User-Agent": USER_AGENT, "Accept": "application/json"}
        )
        self._account: Optional[Account] = None

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[dict] = None,
    ) -> dict:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self.session.request(
                method, url, params=params, json=body, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ApiError(f"Could not reach {self.base_url}: {e}") from e

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"Teamwork rejected the credentials for company "
                f"'{self.credentials.company_id}' (HTTP {response.status_code})"
            )
        if response.status_code >= 400:
            raise ApiError(
                f"{method} {path} failed with HTTP {response.status_code}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{method} {path} returned invalid JSON") from e

    def get_account(self) -> Account:
        """The person owning the token. Cached for the client's lifetime."""
        if self._account is None:
            data = self._request("GET", "me.json")
            try:
                self._account = Account(id=str(data["person"]["id"]))
            except (KeyError, TypeError) as e:
                raise ApiError("me.json response has no person id") from e
        return self._account

    def list_projects(self, search: Optional[str] = None) -> List[Project]:
        params = {"searchTerm": search} if search else None
        data = self._request("GET", "projects.json", params=params)
        return [
            Project(id=str(p["id"]), name=p.get("name", ""))
            for p in data.get("projects", [])
        ]

    def list_tasklists(self, project_id) -> List[TaskList]:
        data = self._request("GET", f"projects/{project_id}/tasklists.json")
        return [
            TaskList(
                id=str(t["id"]),
                name=t.get("name", ""),
                uncompleted_count=int(t.get("uncompleted-count") or 0),
            )
            for t in data.get("tasklists", [])
        ]

    def list_tasks(self, tasklist_id) -> List[Task]:
        data = self._request(
            "GET", f"tasklists/{tasklist_id}/tasks.json", params={"nestSubTasks": "yes"}
        )
        return [_parse_task(t) for t in data.get("todo-items", [])]

    def time_entries(
        self,
        page_size: int = 10,
        from_date=None,
        user_id: Optional[str] = None,
        page: int = 1,
    ) -> List[RemoteTimeEntry]:
        """Time entries of ``user_id`` (default: current user), newest first.

        ``page`` is 1-based; use it to walk past ``page_size`` entries.
        """
        params = {
            "userId": user_id or self.get_account().id,
            "pageSize": page_size,
            "sortby": "date",
            "sortorder": "DESC",
        }
        if from_date is not None:
            params["fromdate"] = from_date.strftime("%Y%m%d")
        if page > 1:
            params["page"] = page
        data = self._request("GET", "time_entries.json", params=params)
        entries = [_parse_time_entry(e) for e in data.get("time-entries", [])]
        logger.debug("Fetched %d time entries", len(entries))
        return entries

    def create_time_entry(
        self,
        task_id,
        entry: TimeEntry,
        description: str,
        person_id: Optional[str] = None,
    ) -> str:
        """Create one time entry on ``task_id``; returns Teamwork's id for it.

        Raises SubmissionError when the request fails or Teamwork does not
        answer with STATUS OK. AuthenticationError is passed through untouched.
        """
        body = {
            "time-entry": {
                "description": description,
                "person-id": person_id or self.get_account().id,
                "date": entry.date.strftime("%Y%m%d"),
                "time": ENTRY_START_TIME,
                "hours": str(entry.whole_hours),
                "minutes": str(entry.minutes),
            }
        }
        try:
            data = self._request("POST", f"tasks/{task_id}/time_entries.json", body=body)
        except ApiError as e:
            raise SubmissionError(str(e), entry_date=entry.date) from e

        status = str(data.get("STATUS", "")).upper()
        entry_id = data.get("timeLogId") or data.get("id")
        if status != "OK":
            raise SubmissionError(
                f"Teamwork answered {status or 'no status'} (#id: {entry_id or 'unknown'})",
                entry_date=entry.date,
            )
        return str(entry_id) if entry_id is not None else "unknown"
