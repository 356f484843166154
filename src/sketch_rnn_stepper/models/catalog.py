"""Catalog of published SketchRNN decoder checkpoints and location resolution."""

from __future__ import annotations

from typing import FrozenSet

from ..utils.env import env_setting

PATH_START_LARGE = "https://storage.googleapis.com/quickdraw-models/sketchRNN/large_models/"
PATH_START_SMALL = "https://storage.googleapis.com/quickdraw-models/sketchRNN/models/"
PATH_END = ".gen.json"

MODEL_NAMES: FrozenSet[str] = frozenset(
    {
        "alarm_clock",
        "ambulance",
        "angel",
        "ant",
        "antyoga",
        "backpack",
        "barn",
        "basket",
        "bear",
        "bee",
        "beeflower",
        "bicycle",
        "bird",
        "book",
        "brain",
        "bridge",
        "bulldozer",
        "bus",
        "butterfly",
        "cactus",
        "calendar",
        "castle",
        "cat",
        "catbus",
        "catpig",
        "chair",
        "couch",
        "crab",
        "crabchair",
        "crabrabbitfacepig",
        "cruise_ship",
        "diving_board",
        "dog",
        "dogbunny",
        "dolphin",
        "duck",
        "elephant",
        "elephantpig",
        "everything",
        "eye",
        "face",
        "fan",
        "fire_hydrant",
        "firetruck",
        "flamingo",
        "flower",
        "floweryoga",
        "frog",
        "frogsofa",
        "garden",
        "hand",
        "hedgeberry",
        "hedgehog",
        "helicopter",
        "kangaroo",
        "key",
        "lantern",
        "lighthouse",
        "lion",
        "lionsheep",
        "lobster",
        "map",
        "mermaid",
        "monapassport",
        "monkey",
        "mosquito",
        "octopus",
        "owl",
        "paintbrush",
        "palm_tree",
        "parrot",
        "passport",
        "peas",
        "penguin",
        "pig",
        "pigsheep",
        "pineapple",
        "pool",
        "postcard",
        "power_outlet",
        "rabbit",
        "rabbitturtle",
        "radio",
        "radioface",
        "rain",
        "rhinoceros",
        "rifle",
        "roller_coaster",
        "sandwich",
        "scorpion",
        "sea_turtle",
        "sheep",
        "skull",
        "snail",
        "snowflake",
        "speedboat",
        "spider",
        "squirrel",
        "steak",
        "stove",
        "strawberry",
        "swan",
        "swing_set",
        "the_mona_lisa",
        "tiger",
        "toothbrush",
        "toothpaste",
        "tractor",
        "trombone",
        "truck",
        "whale",
        "windmill",
        "yoga",
        "yogabicycle",
    }
)


def _base_path(large: bool) -> str:
    if large:
        base = env_setting("SKETCH_RNN_LARGE_BASE") or PATH_START_LARGE
    else:
        base = env_setting("SKETCH_RNN_SMALL_BASE") or PATH_START_SMALL
    return base if base.endswith("/") else f"{base}/"


def resolve_checkpoint_url(model: str, *, large: bool = True) -> str:
    """Expand a catalog name to its checkpoint URL; other identifiers pass through.

    Catalog names resolve to ``<base><name>.gen.json`` where the base depends on
    ``large``. Anything not in the catalog (a URL or a local path) is returned
    verbatim.
    """

    if model in MODEL_NAMES:
        return f"{_base_path(large)}{model}{PATH_END}"
    return model


__all__ = [
    "MODEL_NAMES",
    "PATH_END",
    "PATH_START_LARGE",
    "PATH_START_SMALL",
    "resolve_checkpoint_url",
]
