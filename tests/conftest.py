"""Pytest path configuration for sketch_rnn_stepper tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT / "src", REPO_ROOT):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))


@pytest.fixture(autouse=True)
def _isolate_checkpoint_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's .env overrides from leaking into catalog tests."""

    for name in ("SKETCH_RNN_LARGE_BASE", "SKETCH_RNN_SMALL_BASE", "SKETCH_RNN_DEVICE"):
        monkeypatch.delenv(name, raising=False)
