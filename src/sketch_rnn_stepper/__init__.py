"""Step a SketchRNN decoder one pen stroke at a time."""

from importlib import import_module
from typing import Any

from .utils.env import load_repo_dotenv

load_repo_dotenv()

__all__ = ("errors", "inference", "models", "utils", "SketchRNN", "Stroke", "sketch_rnn")

_SHORTCUTS = {
    "SketchRNN": "inference.session",
    "sketch_rnn": "inference.session",
    "Stroke": "inference.codec",
}


def __getattr__(name: str) -> Any:
    if name in _SHORTCUTS:
        module = import_module(f"{__name__}.{_SHORTCUTS[name]}")
        value = getattr(module, name)
        globals()[name] = value
        return value
    if name in __all__:
        module = import_module(f"{__name__}.{name}")
        globals()[name] = module
        return module
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
