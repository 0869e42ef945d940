"""Runtime configuration for the registry service."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DATA_PATH = Path(
    os.environ.get(
        "REGISTRY_DATA_PATH", Path(__file__).resolve().parent / "data"
    )
)
SNAPSHOT_PATH = DATA_PATH / "ledger.json.enc"
KEYRING_PATH = DATA_PATH / "ledger_keys.json"
AUDIT_LOG_PATH = DATA_PATH / "audit.log"


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Resolved settings. Paths are ``None`` when persistence is disabled."""

    snapshot_path: Optional[Path] = None
    keyring_path: Optional[Path] = None
    audit_log_path: Optional[Path] = None
    log_level: str = "INFO"

    @property
    def persistent(self) -> bool:
        return self.snapshot_path is not None


def load_settings() -> Settings:
    log_level = os.environ.get("REGISTRY_LOG_LEVEL", "INFO").upper()
    if not _env_flag("REGISTRY_PERSIST"):
        return Settings(log_level=log_level)
    return Settings(
        snapshot_path=SNAPSHOT_PATH,
        keyring_path=KEYRING_PATH,
        audit_log_path=AUDIT_LOG_PATH,
        log_level=log_level,
    )
