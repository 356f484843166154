"""Session state for the seed-then-sample generation protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class Uninitialized:
    """No generation has happened yet; recurrent state is absent."""


@dataclass(frozen=True, slots=True)
class Ready:
    """Recurrent state exists and the pixel factor has been applied."""

    recurrent_state: Any


SessionState = Union[Uninitialized, Ready]

UNINITIALIZED = Uninitialized()


def recurrent_state_of(state: SessionState) -> Any:
    """Return the recurrent state carried by ``state`` or ``None`` before first use."""

    if isinstance(state, Ready):
        return state.recurrent_state
    return None


__all__ = ["Ready", "SessionState", "UNINITIALIZED", "Uninitialized", "recurrent_state_of"]
