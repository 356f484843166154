"""Device utilities with macOS MPS/CUDA support."""

from __future__ import annotations

from typing import Literal

import torch

from .env import env_setting


def resolve_device() -> Literal["cpu", "cuda", "mps"]:
    """Resolve the runtime device from the SKETCH_RNN_DEVICE environment variable.

    The decoder is tiny and steps one stroke at a time, so the default is ``cpu``
    when the variable is unset. An explicitly requested accelerator that is not
    available raises ``ValueError``.
    """
    device = env_setting("SKETCH_RNN_DEVICE", "cpu")

    if device == "cuda":
        if not torch.cuda.is_available():
            raise ValueError("SKETCH_RNN_DEVICE is set to 'cuda', but CUDA is not available.")
        return "cuda"
    elif device == "mps":
        if not (hasattr(torch.backends, "mps") and torch.backends.mps.is_available()):
            raise ValueError("SKETCH_RNN_DEVICE is set to 'mps', but MPS is not available.")
        return "mps"
    elif device == "cpu":
        return "cpu"
    else:
        raise ValueError(f"Unsupported device specified in SKETCH_RNN_DEVICE: {device}")
