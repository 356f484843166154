"""Environment helpers for resolving repository-local .env files."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_REPO_ROOT = Path(__file__).resolve().parents[3]


@lru_cache(maxsize=1)
def load_repo_dotenv() -> bool:
    """Load the .env file at the repository root once."""

    env_path = _REPO_ROOT / ".env"
    if not env_path.exists():
        return False
    load_dotenv(env_path, override=False)
    return True


def env_setting(name: str, default: Optional[str] = None) -> Optional[str]:
    """Read ``name`` from the environment after the repository .env was applied."""

    load_repo_dotenv()
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


__all__ = ["env_setting", "load_repo_dotenv"]
