"""Mini README: Core package initializer for the team fines ledger.

The package tracks per-player fine balances, a match-by-match history and
the admin session wizard used to record a match's fines. Sub-packages:
``ledger`` (pure fine arithmetic and data model), ``store`` (document store
backends), ``session`` (wizard state machine) and ``interface`` (FastAPI).
"""

from .logging_utils import get_logger

__all__ = ["get_logger"]
