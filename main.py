"""Backward compatible wrapper.

The project is packaged. Use the console script `teamwork-hours` now.
Running this module directly delegates to `teamwork_hours.cli.main`.
"""

import sys

from teamwork_hours.cli import main

if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
