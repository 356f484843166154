"""Stateful stroke-by-stroke generation on top of a SketchRNN-style model.

A :class:`SketchRNN` session owns two pieces of mutable state: the current pen
vector (the last sampled stroke, in model form) and the model's recurrent
state. Each :meth:`SketchRNN.generate` call optionally folds seed strokes into
the recurrent state, advances it once with the current pen vector and samples
exactly one new stroke.

Sessions are not reentrant. Two overlapping ``generate`` calls on the same
session race on the pen/recurrent state and the result is undefined. Nothing
detects this; callers must await one call before issuing the next. Separate
sessions over the same model are independent.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from ..models.catalog import resolve_checkpoint_url
from ..models.checkpoint import FetchConfig
from ..models.sketch_rnn import SketchRNNModel
from ..utils.callbacks import CompletionCallback, call_callback
from .codec import Stroke, StrokeLike, StrokeVector, decode_stroke, encode_strokes
from .config import GenerationOptions, OptionsLike, SessionDefaults, resolve_generation_options
from .state import UNINITIALIZED, Ready, SessionState, recurrent_state_of

LOGGER = logging.getLogger("sketch rnn stepper.session")


class SketchModel(Protocol):
    """Primitives a session needs from the underlying generative model."""

    async def initialize(self) -> None: ...

    def zero_input(self) -> StrokeVector: ...

    def zero_state(self) -> Any: ...

    def set_pixel_factor(self, pixel_factor: float) -> Any: ...

    def update(self, stroke: Sequence[float], state: Any) -> Any: ...

    def update_strokes(self, strokes: Sequence[Sequence[float]], state: Any) -> Any: ...

    def get_pdf(self, state: Any, temperature: float) -> Any: ...

    def sample(self, pdf: Any) -> StrokeVector: ...


class SketchRNN:
    """One interactive drawing session.

    Construction must happen while an asyncio event loop is running: loading
    starts immediately and :attr:`ready` is the future that settles when it does.
    A load failure is reported once through ``ready`` (and ``callback``) and is
    re-raised by every later ``generate``.
    """

    def __init__(
        self,
        model: str,
        callback: Optional[CompletionCallback] = None,
        large: bool = True,
        *,
        defaults: Optional[SessionDefaults] = None,
        fetch_config: Optional[FetchConfig] = None,
        seed: Optional[int] = None,
        backend: Optional[SketchModel] = None,
    ) -> None:
        self.checkpoint_url = resolve_checkpoint_url(model, large=large)
        self.defaults = defaults or SessionDefaults()
        self.model: SketchModel = backend or SketchRNNModel(
            self.checkpoint_url, fetch_config=fetch_config, seed=seed
        )
        self.pen_state: StrokeVector = list(self.model.zero_input())
        self.state: SessionState = UNINITIALIZED
        LOGGER.info("Loading sketch model %s", self.checkpoint_url)
        self.ready: asyncio.Future[None] = call_callback(self._load(), callback)

    async def _load(self) -> None:
        try:
            await self.model.initialize()
        except Exception:
            LOGGER.error("Failed to load sketch model %s", self.checkpoint_url)
            raise
        LOGGER.info("Sketch model %s ready", self.checkpoint_url)

    @property
    def recurrent_state(self) -> Any:
        """Model recurrent state, or ``None`` until the first ``generate``."""

        return recurrent_state_of(self.state)

    def generate(
        self,
        options_or_seed_or_callback: Any = None,
        seed_or_callback: Any = None,
        callback: Optional[CompletionCallback] = None,
    ) -> "asyncio.Future[Stroke]":
        """Sample the next stroke, optionally seeding the model first.

        Accepted call forms::

            generate()
            generate(callback)
            generate(seed_strokes, callback=None)
            generate(options, callback)
            generate(options, seed_strokes, callback=None)

        ``options`` is a mapping (or :class:`GenerationOptions`) with
        ``temperature`` and ``pixel_factor``. Values that are missing,
        non-numeric or exactly ``0`` fall back to the session defaults, so
        ``{"temperature": 0}`` samples at the default temperature.
        ``pixel_factor`` only takes effect on the first call of a session.

        Options and seed strokes are validated here, before anything is
        scheduled: a negative option raises ``ValueError`` and a malformed seed
        raises :class:`~sketch_rnn_stepper.errors.InvalidSeedStrokeError`. If a
        model step fails later, pen and recurrent state keep their previous
        values.
        Returns a future resolving to the sampled :class:`Stroke`.
        """

        options, seed_strokes, done = _split_generate_args(
            options_or_seed_or_callback, seed_or_callback, callback
        )
        resolved = resolve_generation_options(options, self.defaults)
        seed_vectors = encode_strokes(seed_strokes)
        return call_callback(self._generate(resolved, seed_vectors), done)

    async def _generate(
        self, options: GenerationOptions, seed_vectors: List[StrokeVector]
    ) -> Stroke:
        await self.ready
        # No awaits past this point: the step below runs as one uninterrupted unit.
        if not isinstance(self.state, Ready):
            zero = self.model.zero_state()
            self.model.set_pixel_factor(options.pixel_factor)
            self.state = Ready(recurrent_state=zero)
            LOGGER.debug("Session initialised with pixel factor %.3f", options.pixel_factor)

        recurrent = self.state.recurrent_state
        if seed_vectors:
            recurrent = self.model.update_strokes(seed_vectors, recurrent)
        recurrent = self.model.update(self.pen_state, recurrent)
        pdf = self.model.get_pdf(recurrent, options.temperature)
        sampled = list(self.model.sample(pdf))
        stroke = decode_stroke(sampled)
        self.state = Ready(recurrent_state=recurrent)
        self.pen_state = sampled
        LOGGER.debug(
            "Sampled stroke dx=%.3f dy=%.3f pen=%s (temperature %.3f, %d seed strokes)",
            stroke.dx,
            stroke.dy,
            stroke.pen or "draw",
            options.temperature,
            len(seed_vectors),
        )
        return stroke

    def reset(self) -> None:
        """Start a fresh sequence.

        The pen vector returns to the model's zero input. Recurrent state is
        replaced with a zero state only if it already exists; the pixel factor is
        not reapplied. Does not wait for the model to load.
        """

        self.pen_state = list(self.model.zero_input())
        if isinstance(self.state, Ready):
            self.state = Ready(recurrent_state=self.model.zero_state())


def _split_generate_args(
    first: Any, second: Any, third: Optional[CompletionCallback]
) -> Tuple[OptionsLike, Sequence[StrokeLike], Optional[CompletionCallback]]:
    if callable(first):
        return {}, [], first
    if _is_stroke_sequence(first):
        return {}, first, second
    if callable(second):
        return first or {}, [], second
    return first or {}, second or [], third


def _is_stroke_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def sketch_rnn(
    model: str,
    callback: Optional[CompletionCallback] = None,
    large: bool = True,
    **kwargs: Any,
) -> SketchRNN:
    """Factory mirroring :class:`SketchRNN`'s constructor."""

    return SketchRNN(model, callback, large, **kwargs)


__all__ = ["SketchModel", "SketchRNN", "sketch_rnn"]
