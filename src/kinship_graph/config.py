"""Environment-driven configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass


def _s(name: str, default: str) -> str:
    return os.getenv(name) or default


def _i(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _b(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class KinshipConfig:
    db_path: str = _s("KINSHIP_DB_PATH", "./data/kinship.db")
    log_level: str = _s("KINSHIP_LOG_LEVEL", "INFO").upper()

    # SQLite busy timeout for concurrent writers
    busy_timeout_ms: int = _i("KINSHIP_BUSY_TIMEOUT_MS", 5000)

    # Derive step-parent/sibling edges when a child declares a parent
    inference_enabled: bool = _b("KINSHIP_INFERENCE_ENABLED", True)

    @classmethod
    def from_env(cls) -> KinshipConfig:
        """Re-read the environment (defaults above are bound at import time)."""
        return cls(
            db_path=_s("KINSHIP_DB_PATH", "./data/kinship.db"),
            log_level=_s("KINSHIP_LOG_LEVEL", "INFO").upper(),
            busy_timeout_ms=_i("KINSHIP_BUSY_TIMEOUT_MS", 5000),
            inference_enabled=_b("KINSHIP_INFERENCE_ENABLED", True),
        )


CONFIG = KinshipConfig()
