# ruff: noqa: E402
"""Stroke-by-stroke sketch generation CLI."""

from __future__ import annotations

# Ensure local src/ is on sys.path when running from the repo without installation
import os as _os
import sys as _sys

_REPO_ROOT = _os.path.abspath(_os.path.join(_os.path.dirname(__file__), ".."))
_SRC_PATH = _os.path.join(_REPO_ROOT, "src")
if _SRC_PATH not in _sys.path and _os.path.isdir(_SRC_PATH):
    _sys.path.insert(0, _SRC_PATH)

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from sketch_rnn_stepper.inference import SessionDefaults, SketchRNN, Stroke, build_session_defaults
from sketch_rnn_stepper.models.checkpoint import FetchConfig
from sketch_rnn_stepper.utils import configure_logging, seed_everything


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate sketches one stroke at a time with a SketchRNN decoder."
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/default.yaml"),
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--model",
        type=str,
        default=None,
        help="Catalog name (e.g. 'cat'), checkpoint URL or local .gen.json path.",
    )
    parser.add_argument("--small", action="store_true", help="Use the small model variant.")
    parser.add_argument("--temperature", type=float, default=None)
    parser.add_argument("--pixel-factor", type=float, default=None)
    parser.add_argument("--sketches", type=int, default=None, help="Number of sketches to draw.")
    parser.add_argument(
        "--max-strokes", type=int, default=None, help="Stroke cap per sketch if no end pen."
    )
    parser.add_argument(
        "--seed-strokes",
        type=Path,
        default=None,
        help="JSON file with a list of {dx, dy, pen} strokes fed before sampling.",
    )
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for reproducible output.")
    parser.add_argument("--output", type=Path, default=None, help="Write sketches as JSON here.")
    parser.add_argument("--log-level", type=str, default=None)
    return parser.parse_args(argv)


def load_config(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def load_seed_strokes(path: Optional[Path]) -> List[Dict[str, Any]]:
    if path is None:
        return []
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if not isinstance(payload, list):
        raise ValueError(f"Seed stroke file {path} must contain a JSON list.")
    return payload


def merge_settings(args: argparse.Namespace, raw_cfg: Mapping[str, Any]) -> Dict[str, Any]:
    """Overlay CLI flags on the YAML ``generation`` section."""

    generation = dict(raw_cfg.get("generation") or {})
    overrides = {
        "model": args.model,
        "temperature": args.temperature,
        "pixel_factor": args.pixel_factor,
        "sketches": args.sketches,
        "max_strokes": args.max_strokes,
        "seed": args.seed,
    }
    for key, value in overrides.items():
        if value is not None:
            generation[key] = value
    if args.small:
        generation["large"] = False
    generation.setdefault("model", "cat")
    generation.setdefault("large", True)
    generation.setdefault("sketches", 1)
    generation.setdefault("max_strokes", 250)
    return generation


async def draw_sketches(
    session: SketchRNN,
    *,
    sketches: int,
    max_strokes: int,
    seed_strokes: Sequence[Mapping[str, Any]] = (),
) -> List[List[Stroke]]:
    """Pull strokes until each sketch ends, resetting the session between sketches."""

    await session.ready
    results: List[List[Stroke]] = []
    for index in range(sketches):
        if index:
            session.reset()
        strokes: List[Stroke] = []
        seed: Sequence[Mapping[str, Any]] = list(seed_strokes)
        for _ in range(max_strokes):
            stroke = await session.generate({}, seed)
            seed = []
            strokes.append(stroke)
            if stroke.pen == "end":
                break
        results.append(strokes)
    return results


async def _run(settings: Mapping[str, Any], seed_strokes: List[Dict[str, Any]]) -> List[List[Stroke]]:
    defaults: SessionDefaults = build_session_defaults(settings)
    fetch = FetchConfig(timeout_seconds=float(settings.get("timeout_seconds", 60.0)))
    session = SketchRNN(
        str(settings["model"]),
        large=bool(settings["large"]),
        defaults=defaults,
        fetch_config=fetch,
        seed=settings.get("seed"),
    )
    return await draw_sketches(
        session,
        sketches=int(settings["sketches"]),
        max_strokes=int(settings["max_strokes"]),
        seed_strokes=seed_strokes,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    raw_cfg = load_config(args.config)
    logger = configure_logging(
        args.log_level or raw_cfg.get("log_level", "INFO"),
        name="sketch rnn stepper",
    )
    settings = merge_settings(args, raw_cfg)
    seed_everything(settings.get("seed"))
    seed_strokes = load_seed_strokes(args.seed_strokes)

    sketches = asyncio.run(_run(settings, seed_strokes))
    payload = [[stroke.as_dict() for stroke in sketch] for sketch in sketches]
    for index, sketch in enumerate(sketches):
        logger.info("Sketch %d: %d strokes", index, len(sketch))
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Wrote %d sketches to %s", len(payload), args.output)
    else:
        print(json.dumps(payload))


if __name__ == "__main__":
    main()
