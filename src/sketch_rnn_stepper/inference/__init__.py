"""Stroke-by-stroke generation sessions and the stroke codec."""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import Dict, Iterable, Tuple

__all__ = [
    "GenerationOptions",
    "PEN_FLAG_INDEX",
    "Ready",
    "SessionDefaults",
    "SessionState",
    "SketchModel",
    "SketchRNN",
    "Stroke",
    "Uninitialized",
    "build_session_defaults",
    "decode_stroke",
    "encode_stroke",
    "encode_strokes",
    "resolve_generation_options",
    "sketch_rnn",
]

_EXPORTS: Dict[str, Tuple[str, ...]] = {
    "codec": ("PEN_FLAG_INDEX", "Stroke", "decode_stroke", "encode_stroke", "encode_strokes"),
    "config": (
        "GenerationOptions",
        "SessionDefaults",
        "build_session_defaults",
        "resolve_generation_options",
    ),
    "session": ("SketchModel", "SketchRNN", "sketch_rnn"),
    "state": ("Ready", "SessionState", "Uninitialized"),
}


def _load_module(name: str) -> ModuleType:
    return importlib.import_module(f"sketch_rnn_stepper.inference.{name}")


def __getattr__(name: str):
    for module_name, symbols in _EXPORTS.items():
        if name in symbols:
            module = _load_module(module_name)
            return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> Iterable[str]:
    return sorted(set(__all__))
