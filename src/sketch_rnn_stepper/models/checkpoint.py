"""Fetching and decoding SketchRNN ``*.gen.json`` decoder checkpoints.

A checkpoint is a JSON array ``[info, dimensions, weights]``:

* ``info`` holds metadata; ``scale_factor`` (the dataset's offset normaliser)
  is required.
* ``dimensions`` lists the shape of every weight array.
* ``weights`` lists base64-encoded little-endian int16 buffers. Real values are
  the int16 values divided by ``WEIGHT_SCALE``.

Weights appear in decoder order: output kernel, output bias, LSTM kernel, LSTM
bias.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence, Tuple
from urllib.parse import urlparse

import httpx
import numpy as np

from ..errors import CheckpointLoadError

logger = logging.getLogger("sketch rnn stepper.checkpoint")

WEIGHT_SCALE = 10000.0
WEIGHT_NAMES: Tuple[str, ...] = ("output_kernel", "output_bias", "lstm_kernel", "lstm_bias")


@dataclass(slots=True)
class FetchConfig:
    """Transport settings for remote checkpoints."""

    timeout_seconds: float = 60.0
    follow_redirects: bool = True


@dataclass(slots=True)
class DecoderCheckpoint:
    """Decoded decoder parameters plus the checkpoint metadata."""

    info: Mapping[str, Any]
    weights: Mapping[str, np.ndarray]

    @property
    def scale_factor(self) -> float:
        return float(self.info["scale_factor"])

    @property
    def num_units(self) -> int:
        return int(self.weights["output_kernel"].shape[0])

    @property
    def num_mixtures(self) -> int:
        return (int(self.weights["output_kernel"].shape[1]) - 3) // 6


def decode_weight_blob(blob: str) -> np.ndarray:
    """Decode one base64 int16 buffer into float32 values."""

    raw = base64.b64decode(blob)
    if len(raw) % 2:
        raise ValueError("Weight buffer length must be a multiple of two bytes.")
    return np.frombuffer(raw, dtype="<i2").astype(np.float32) / np.float32(WEIGHT_SCALE)


def encode_weight_blob(values: Any) -> str:
    """Quantise float values to the checkpoint's int16 base64 encoding."""

    array = np.rint(np.asarray(values, dtype=np.float64).reshape(-1) * WEIGHT_SCALE)
    clipped = np.clip(array, np.iinfo(np.int16).min, np.iinfo(np.int16).max)
    return base64.b64encode(clipped.astype("<i2").tobytes()).decode("ascii")


def _is_remote(location: str) -> bool:
    return urlparse(location).scheme in {"http", "https"}


def _local_path(location: str) -> Path:
    parsed = urlparse(location)
    if parsed.scheme == "file":
        return Path(parsed.path)
    return Path(location)


async def fetch_checkpoint(location: str, *, config: FetchConfig | None = None) -> Any:
    """Return the parsed JSON payload stored at ``location`` (URL or local path)."""

    config = config or FetchConfig()
    try:
        if _is_remote(location):
            async with httpx.AsyncClient(
                timeout=config.timeout_seconds, follow_redirects=config.follow_redirects
            ) as client:
                response = await client.get(location)
                response.raise_for_status()
                text = response.text
        else:
            text = await asyncio.to_thread(_local_path(location).read_text, encoding="utf-8")
        return json.loads(text)
    except httpx.HTTPStatusError as exc:
        raise CheckpointLoadError(
            f"Checkpoint request to {location} failed with HTTP {exc.response.status_code}.",
            location=location,
            status_code=exc.response.status_code,
        ) from exc
    except httpx.HTTPError as exc:
        raise CheckpointLoadError(
            f"Checkpoint request to {location} failed: {exc.__class__.__name__}: {exc}",
            location=location,
        ) from exc
    except OSError as exc:
        raise CheckpointLoadError(
            f"Checkpoint file {location} could not be read: {exc}", location=location
        ) from exc
    except json.JSONDecodeError as exc:
        raise CheckpointLoadError(
            f"Checkpoint at {location} is not valid JSON: {exc}", location=location
        ) from exc


def _expect(condition: bool, message: str, location: str) -> None:
    if not condition:
        raise CheckpointLoadError(message, location=location)


def parse_checkpoint(payload: Any, *, location: str = "<memory>") -> DecoderCheckpoint:
    """Validate a ``[info, dimensions, weights]`` payload and decode its weights."""

    _expect(
        isinstance(payload, Sequence) and not isinstance(payload, str) and len(payload) == 3,
        "Checkpoint must be a JSON array of [info, dimensions, weights].",
        location,
    )
    info, dimensions, blobs = payload
    _expect(isinstance(info, Mapping), "Checkpoint info must be an object.", location)
    _expect("scale_factor" in info, "Checkpoint info is missing 'scale_factor'.", location)
    _expect(
        isinstance(dimensions, Sequence) and len(dimensions) == len(WEIGHT_NAMES),
        f"Checkpoint must declare {len(WEIGHT_NAMES)} weight shapes.",
        location,
    )
    _expect(
        isinstance(blobs, Sequence) and len(blobs) == len(WEIGHT_NAMES),
        f"Checkpoint must contain {len(WEIGHT_NAMES)} weight buffers.",
        location,
    )

    weights = {}
    for name, shape, blob in zip(WEIGHT_NAMES, dimensions, blobs):
        shape = tuple(int(dim) for dim in shape)
        try:
            values = decode_weight_blob(blob)
        except (TypeError, ValueError) as exc:
            raise CheckpointLoadError(
                f"Weight {name!r} could not be decoded: {exc}", location=location
            ) from exc
        _expect(
            values.size == math.prod(shape),
            f"Weight {name!r} holds {values.size} values but shape {shape} was declared.",
            location,
        )
        weights[name] = values.reshape(shape)

    units, outputs = weights["output_kernel"].shape
    _expect(
        (outputs - 3) % 6 == 0 and outputs > 3,
        f"Output layer width {outputs} is not 3 + 6 * num_mixtures.",
        location,
    )
    _expect(weights["output_bias"].shape == (outputs,), "Output bias shape mismatch.", location)
    _expect(
        weights["lstm_kernel"].shape == (5 + units, 4 * units),
        f"LSTM kernel must be shaped {(5 + units, 4 * units)}.",
        location,
    )
    _expect(weights["lstm_bias"].shape == (4 * units,), "LSTM bias shape mismatch.", location)
    return DecoderCheckpoint(info=dict(info), weights=weights)


async def load_checkpoint(location: str, *, config: FetchConfig | None = None) -> DecoderCheckpoint:
    """Fetch and decode the checkpoint at ``location``."""

    logger.info("Loading SketchRNN checkpoint from %s", location)
    payload = await fetch_checkpoint(location, config=config)
    checkpoint = parse_checkpoint(payload, location=location)
    logger.info(
        "Loaded checkpoint %s (%d units, %d mixtures)",
        checkpoint.info.get("name", location),
        checkpoint.num_units,
        checkpoint.num_mixtures,
    )
    return checkpoint


__all__ = [
    "DecoderCheckpoint",
    "FetchConfig",
    "WEIGHT_NAMES",
    "WEIGHT_SCALE",
    "decode_weight_blob",
    "encode_weight_blob",
    "fetch_checkpoint",
    "load_checkpoint",
    "parse_checkpoint",
]
