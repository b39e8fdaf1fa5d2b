"""Settings file handling.

Non-secret settings live in a small YAML file (``~/.teamwork.yaml`` unless
``TEAMWORK_SETTINGS`` points elsewhere)::

    hours_per_day: 8
    request_timeout: 30
    project_aliases:
      - {project_id: "359738", alias: infra}
    times_off:
      - {date: 2019-07-14, hours: 8}

Secrets (company id, token) are not stored here, see login_helper.
"""

from __future__ import annotations

import datetime
import logging
import os
from dataclasses import dataclass, field, replace
from decimal import Decimal
from pathlib import Path
from typing import Dict, List, Optional, Set

import yaml

from .allocator import DEFAULT_HOURS_PER_DAY, to_decimal
from .errors import ConfigError, InvalidInput
from .models import ProjectAlias, TimeOff

logger = logging.getLogger(__name__)

SETTINGS_ENV = "TEAMWORK_SETTINGS"
DEFAULT_SETTINGS_PATH = Path.home() / ".teamwork.yaml"
DEFAULT_TIMEOUT = 30.0


def settings_path() -> Path:
    override = os.environ.get(SETTINGS_ENV)
    return Path(override).expanduser() if override else DEFAULT_SETTINGS_PATH


def parse_date(value) -> datetime.date:
    """Strict ISO date (YYYY-MM-DD), as used on the command line and in YAML."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput(f"Could not parse {value!r} using format %Y-%m-%d") from None


def _plain_number(value: Decimal):
    return int(value) if value == value.to_integral_value() else float(value)


@dataclass(frozen=True)
class Settings:
    hours_per_day: Decimal = DEFAULT_HOURS_PER_DAY
    request_timeout: float = DEFAULT_TIMEOUT
    project_aliases: List[ProjectAlias] = field(default_factory=list)
    times_off: List[TimeOff] = field(default_factory=list)

    def get_alias(self, project_id) -> Optional[ProjectAlias]:
        return next(
            (a for a in self.project_aliases if a.project_id == str(project_id)), None
        )

    def with_alias(self, project_id, alias: str) -> "Settings":
        aliases = [a for a in self.project_aliases if a.project_id != str(project_id)]
        aliases.append(ProjectAlias(project_id=str(project_id), alias=alias))
        return replace(self, project_aliases=aliases)

    def with_time_off(self, date, hours) -> "Settings":
        """Record time off on ``date``; zero hours removes it."""
        day = parse_date(date)
        amount = to_decimal(hours, "hours")
        if amount < 0:
            raise InvalidInput(f"Time off hours cannot be negative, got {amount}")
        times_off = [t for t in self.times_off if t.date != day]
        if amount > 0:
            times_off.append(TimeOff(date=day, hours=amount))
        times_off.sort(key=lambda t: t.date)
        return replace(self, times_off=times_off)

    def times_off_in(self, year: int, month: Optional[int] = None) -> List[TimeOff]:
        return [
            t
            for t in self.times_off
            if t.date.year == year and (month is None or t.date.month == month)
        ]

    def full_days_off(self, hours_per_day=None) -> Set[datetime.date]:
        per_day = to_decimal(hours_per_day or self.hours_per_day, "hours_per_day")
        return {t.date for t in self.times_off if t.hours >= per_day}

    def partial_days_off(self, hours_per_day=None) -> Dict[datetime.date, Decimal]:
        per_day = to_decimal(hours_per_day or self.hours_per_day, "hours_per_day")
        return {t.date: t.hours for t in self.times_off if t.hours < per_day}

    def to_dict(self) -> dict:
        return {
            "hours_per_day": _plain_number(self.hours_per_day),
            "request_timeout": self.request_timeout,
            "project_aliases": [
                {"project_id": a.project_id, "alias": a.alias}
                for a in self.project_aliases
            ],
            "times_off": [
                {"date": t.date.isoformat(), "hours": _plain_number(t.hours)}
                for t in self.times_off
            ],
        }


def _settings_from_dict(raw: dict) -> Settings:
    try:
        hours_per_day = to_decimal(raw.get("hours_per_day", DEFAULT_HOURS_PER_DAY))
        timeout = float(raw.get("request_timeout", DEFAULT_TIMEOUT))
        aliases = [
            ProjectAlias(project_id=str(a["project_id"]), alias=str(a["alias"]))
            for a in raw.get("project_aliases") or []
        ]
        times_off = [
            TimeOff(date=parse_date(t["date"]), hours=to_decimal(t.get("hours", 8)))
            for t in raw.get("times_off") or []
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid settings: {e}") from e
    if hours_per_day <= 0:
        raise ConfigError(f"hours_per_day must be greater than 0, got {hours_per_day}")
    return Settings(
        hours_per_day=hours_per_day,
        request_timeout=timeout,
        project_aliases=aliases,
        times_off=sorted(times_off, key=lambda t: t.date),
    )


def load_settings(path: Optional[Path] = None) -> Settings:
    """Read the settings file; a missing file yields the defaults."""
    path = Path(path) if path else settings_path()
    if not path.exists():
        logger.debug("No settings file at %s, using defaults", path)
        return Settings()

    try:
        with open(path, encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping at the top level")
    return _settings_from_dict(raw)


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    path = Path(path) if path else settings_path()
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(settings.to_dict(), f, sort_keys=False)
    logger.debug("Settings written to %s", path)
    return path
