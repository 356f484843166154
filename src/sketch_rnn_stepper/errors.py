"""Exception hierarchy shared by the stepper runtime and the model wrapper."""

from __future__ import annotations

from typing import Any, Optional


class SketchRNNError(RuntimeError):
    """Base class for failures raised by ``sketch_rnn_stepper``."""


class CheckpointLoadError(SketchRNNError):
    """Raised when model parameters cannot be fetched or parsed.

    A load failure is fatal to the session that triggered it. It surfaces once
    through the session's ``ready`` future (and completion callback, when one was
    supplied) and is never retried automatically.
    """

    def __init__(
        self,
        message: str,
        *,
        location: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.location = location
        self.status_code = status_code


class InvalidSeedStrokeError(SketchRNNError, ValueError):
    """Raised when a seed stroke is malformed (missing offsets or unknown pen tag)."""

    def __init__(self, message: str, *, index: Optional[int] = None, stroke: Any = None) -> None:
        super().__init__(message)
        self.index = index
        self.stroke = stroke


class ModelNotReadyError(SketchRNNError):
    """Raised when the model is queried before its parameters were loaded."""


__all__ = [
    "CheckpointLoadError",
    "InvalidSeedStrokeError",
    "ModelNotReadyError",
    "SketchRNNError",
]
