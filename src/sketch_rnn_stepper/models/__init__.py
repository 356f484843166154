"""SketchRNN decoder backend, checkpoint loading and the model catalog."""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import Dict, Iterable, Tuple

__all__ = [
    "DecoderCheckpoint",
    "FetchConfig",
    "LSTMState",
    "MODEL_NAMES",
    "MixtureDensity",
    "SketchRNNModel",
    "load_checkpoint",
    "parse_checkpoint",
    "resolve_checkpoint_url",
]

_EXPORTS: Dict[str, Tuple[str, ...]] = {
    "catalog": ("MODEL_NAMES", "resolve_checkpoint_url"),
    "checkpoint": ("DecoderCheckpoint", "FetchConfig", "load_checkpoint", "parse_checkpoint"),
    "sketch_rnn": ("LSTMState", "MixtureDensity", "SketchRNNModel"),
}


def _load_module(name: str) -> ModuleType:
    return importlib.import_module(f"sketch_rnn_stepper.models.{name}")


def __getattr__(name: str):
    for module_name, symbols in _EXPORTS.items():
        if name in symbols:
            return getattr(_load_module(module_name), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> Iterable[str]:
    return sorted(set(__all__))
