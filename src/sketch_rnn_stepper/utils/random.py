"""Randomness helpers for reproducible sketches."""

from __future__ import annotations

import os
import random
from typing import Optional

import numpy as np
import torch


def seed_everything(seed: Optional[int]) -> None:
    """Seed Python, NumPy, and PyTorch RNGs.

    Parameters
    ----------
    seed:
        The seed to apply. When ``None`` the function is a no-op so callers
        can pass configuration values directly.
    """

    if seed is None:
        return

    value = int(seed)
    random.seed(value)
    os.environ["PYTHONHASHSEED"] = str(value)
    np.random.seed(value)
    torch.manual_seed(value)

    if torch.cuda.is_available():  # pragma: no cover - exercised on CUDA hosts
        torch.cuda.manual_seed_all(value)


def make_generator(seed: Optional[int], device: str = "cpu") -> Optional[torch.Generator]:
    """Return a dedicated ``torch.Generator`` for ``seed`` or ``None`` to use the global RNG."""

    if seed is None:
        return None
    generator = torch.Generator(device=device)
    generator.manual_seed(int(seed))
    return generator
