"""Conversion between public pen strokes and the model's 5-value stroke vectors."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Union

from ..errors import InvalidSeedStrokeError

PenState = Literal["down", "up", "end"]
StrokeVector = List[float]

# Index of each pen flag inside ``[dx, dy, down, up, end]``. Iteration order is
# also the decode priority when more than one flag is set.
PEN_FLAG_INDEX: Dict[str, int] = {"down": 2, "up": 3, "end": 4}
STROKE_VECTOR_SIZE = 5


@dataclass(frozen=True, slots=True)
class Stroke:
    """One pen movement: an offset from the previous position plus a pen tag.

    ``pen=None`` is the implicit "draw" state (no flag set).
    """

    dx: float
    dy: float
    pen: Optional[PenState] = None

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"dx": self.dx, "dy": self.dy}
        if self.pen is not None:
            payload["pen"] = self.pen
        return payload


StrokeLike = Union[Stroke, Mapping[str, Any]]


def _field(stroke: StrokeLike, name: str) -> Any:
    if isinstance(stroke, Stroke):
        return getattr(stroke, name)
    if isinstance(stroke, Mapping):
        return stroke.get(name)
    raise InvalidSeedStrokeError(
        f"Stroke must be a Stroke or a mapping, received {type(stroke).__name__}.",
        stroke=stroke,
    )


def _offset(stroke: StrokeLike, name: str, index: Optional[int]) -> float:
    value = _field(stroke, name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidSeedStrokeError(
            f"Stroke field {name!r} must be numeric, received {value!r}.",
            index=index,
            stroke=stroke,
        )
    value = float(value)
    if not math.isfinite(value):
        raise InvalidSeedStrokeError(
            f"Stroke field {name!r} must be finite, received {value!r}.",
            index=index,
            stroke=stroke,
        )
    return value


def encode_stroke(stroke: StrokeLike, *, index: Optional[int] = None) -> StrokeVector:
    """Map a public stroke to ``[dx, dy, down, up, end]``.

    ``dx``/``dy`` pass through unchanged and the pen tag becomes a one-hot flag
    (all zero when the stroke has no pen tag).
    """

    dx = _offset(stroke, "dx", index)
    dy = _offset(stroke, "dy", index)
    pen = _field(stroke, "pen")
    flags = [0.0, 0.0, 0.0]
    if pen is not None:
        if pen not in PEN_FLAG_INDEX:
            raise InvalidSeedStrokeError(
                f"Unknown pen state {pen!r}; expected one of {sorted(PEN_FLAG_INDEX)}.",
                index=index,
                stroke=stroke,
            )
        flags[PEN_FLAG_INDEX[pen] - 2] = 1.0
    return [dx, dy, *flags]


def encode_strokes(strokes: Sequence[StrokeLike]) -> List[StrokeVector]:
    """Encode a whole seed sequence, failing before any of it is used."""

    return [encode_stroke(stroke, index=idx) for idx, stroke in enumerate(strokes)]


def decode_stroke(vector: Sequence[float]) -> Stroke:
    """Map ``[dx, dy, down, up, end]`` back to a public stroke.

    The pen tag is chosen by priority down > up > end, so a vector with several
    flags raised still decodes deterministically.
    """

    if len(vector) != STROKE_VECTOR_SIZE:
        raise ValueError(
            f"Stroke vectors must have {STROKE_VECTOR_SIZE} entries, received {len(vector)}."
        )
    pen: Optional[PenState] = None
    for name, flag_index in PEN_FLAG_INDEX.items():
        if vector[flag_index] == 1:
            pen = name  # type: ignore[assignment]
            break
    return Stroke(dx=float(vector[0]), dy=float(vector[1]), pen=pen)


__all__ = [
    "PEN_FLAG_INDEX",
    "PenState",
    "STROKE_VECTOR_SIZE",
    "Stroke",
    "StrokeLike",
    "StrokeVector",
    "decode_stroke",
    "encode_stroke",
    "encode_strokes",
]
