"""Utility helpers for logging, callbacks, device management, and reproducibility."""

from .logging import configure_logging
from .callbacks import CompletionCallback, call_callback
from .devices import resolve_device
from .env import env_setting, load_repo_dotenv
from .random import make_generator, seed_everything

__all__ = [
    "CompletionCallback",
    "call_callback",
    "configure_logging",
    "env_setting",
    "load_repo_dotenv",
    "make_generator",
    "resolve_device",
    "seed_everything",
]
