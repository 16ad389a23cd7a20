"""Mini README: Centralised configuration models and helpers for the ledger.

Structure:
    * FinesLedgerSettings - Pydantic model describing runtime configuration.
    * get_settings - cached accessor for environment-aware settings.

Usage:
    Import ``get_settings`` to read environment variables, choose the store
    backend, set the shared admin secret, and specify service ports. The
    configuration is cached so validation happens once per process.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class FinesLedgerSettings(BaseSettings):
    """Runtime configuration for the fines ledger service."""

    environment: str = Field(
        "development",
        description="Environment label; 'development' logs at DEBUG, anything else at INFO.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the persisted ledger document file.",
    )
    store_backend: str = Field(
        "json",
        description="Ledger store backend name ('json' persists to disk, 'memory' does not).",
    )
    store_filename: str = Field(
        "ledger.json",
        description="File name of the JSON store inside the data directory.",
    )
    admin_password: str = Field(
        "kevmick",
        description=(
            "Shared secret unlocking the admin panel. Compared in plain text;"
            " it keeps casual visitors out and nothing more."
        ),
    )
    currency_symbol: str = Field("£", description="Prefix used when formatting balances.")
    high_debt_threshold: float = Field(
        10.0,
        description="Balances above this amount are flagged on the leaderboard.",
        ge=0,
    )
    seed_demo_roster: bool = Field(
        False,
        description="Populate an empty roster with demo players on start-up.",
    )
    interface_host: str = Field(
        "0.0.0.0",
        description="Network interface for the web service to bind to.",
    )
    interface_port: int = Field(
        8000,
        description="Default port the web service exposes.",
        ge=1,
        le=65535,
    )

    class Config:
        env_prefix = "FINESLEDGER_"
        env_file = ".env"
        case_sensitive = False

    @validator("data_directory", pre=True)
    def expand_path(cls, value: Optional[str | Path]) -> Path:
        """Ensure configured paths expand user directories and exist."""

        path = Path(value).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def store_path(self) -> Path:
        """Full path of the JSON store file."""

        return self.data_directory / self.store_filename


@lru_cache()
def get_settings() -> FinesLedgerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return FinesLedgerSettings()
