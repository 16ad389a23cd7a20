"""Mini README: Interactive interfaces for the fines ledger.

Exports the FastAPI application factory serving the leaderboard, history
and admin endpoints. The Typer CLI lives in ``main_fines_desk.py`` at the
repository root.
"""

from .web_app import create_application

__all__ = ["create_application"]
