"""teamwork_hours package

Bulk time entry for Teamwork Projects from the command line.

Public API (minimal for now):
- allocate: spread hours over work days
- TeamworkClient: authenticated API access
- submit_plan: push an AllocationPlan to Teamwork
- ensure_credentials: credential helper

CLI entrypoint exposed via setup.py as `teamwork-hours`.
"""

__version__ = "0.4.0"

from .allocator import allocate  # noqa: E402
from .client import TeamworkClient  # noqa: E402
from .core import submit_plan  # noqa: E402
from .login_helper import ensure_credentials  # noqa: E402

__all__ = [
    "allocate",
    "TeamworkClient",
    "submit_plan",
    "ensure_credentials",
    "__version__",
]
