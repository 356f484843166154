"""Generation option resolution for stroke-by-stroke sketch sessions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union


@dataclass(slots=True)
class SessionDefaults:
    """Fallback sampling controls applied when a call leaves an option unset."""

    temperature: float = 0.65
    pixel_factor: float = 3.0

    def __post_init__(self) -> None:
        if self.temperature <= 0.0:
            raise ValueError("SessionDefaults.temperature must be positive.")
        if self.pixel_factor <= 0.0:
            raise ValueError("SessionDefaults.pixel_factor must be positive.")


@dataclass(frozen=True, slots=True)
class GenerationOptions:
    """Resolved options for a single ``generate`` call."""

    temperature: float
    pixel_factor: float


OptionsLike = Union[GenerationOptions, Mapping[str, Any], None]


def _truthy_number(value: Any) -> Optional[float]:
    """Coerce ``value`` to a float, returning ``None`` when it is falsy.

    Missing, non-numeric and NaN values are treated as unset, and so is an
    explicit ``0``. Callers asking for ``temperature=0`` get the default.
    Booleans are also treated as unset rather than coerced to ``1``/``0``, so
    ``temperature=True`` resolves to the default instead of ``1.0``.
    """

    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or number == 0.0:
        return None
    return number


def resolve_generation_options(
    options: OptionsLike,
    defaults: Optional[SessionDefaults] = None,
) -> GenerationOptions:
    """Resolve per-call options against session defaults.

    Accepts a ``GenerationOptions`` instance or a mapping with ``temperature`` and
    ``pixel_factor`` keys (``pixelFactor`` is accepted as an alias).

    Raises ``ValueError`` when a value survives the fallback but is negative
    or infinite.
    """

    defaults = defaults or SessionDefaults()
    if isinstance(options, GenerationOptions):
        raw_temperature: Any = options.temperature
        raw_pixel_factor: Any = options.pixel_factor
    else:
        payload = options or {}
        raw_temperature = payload.get("temperature")
        raw_pixel_factor = payload.get("pixel_factor", payload.get("pixelFactor"))
    temperature = _truthy_number(raw_temperature) or defaults.temperature
    pixel_factor = _truthy_number(raw_pixel_factor) or defaults.pixel_factor
    for name, value in (("temperature", temperature), ("pixel_factor", pixel_factor)):
        if value <= 0.0 or math.isinf(value):
            raise ValueError(f"{name} must be a positive finite number, received {value!r}.")
    return GenerationOptions(temperature=temperature, pixel_factor=pixel_factor)


def build_session_defaults(payload: Optional[Mapping[str, Any]] = None) -> SessionDefaults:
    """Build ``SessionDefaults`` from a YAML-style mapping, ignoring unknown keys."""

    if not payload:
        return SessionDefaults()
    kwargs = {}
    for key in ("temperature", "pixel_factor"):
        if payload.get(key) is not None:
            kwargs[key] = float(payload[key])
    return SessionDefaults(**kwargs)


__all__ = [
    "GenerationOptions",
    "OptionsLike",
    "SessionDefaults",
    "build_session_defaults",
    "resolve_generation_options",
]
