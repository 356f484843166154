"""Torch implementation of the SketchRNN decoder used as the stepping backend."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import torch

from ..errors import ModelNotReadyError
from ..utils.devices import resolve_device
from ..utils.random import make_generator
from .checkpoint import DecoderCheckpoint, FetchConfig, load_checkpoint

LOGGER = logging.getLogger("sketch rnn stepper.model")

DEFAULT_PIXEL_FACTOR = 2.0
FORGET_BIAS = 1.0


@dataclass(frozen=True, slots=True)
class LSTMState:
    """Cell and hidden tensors of the decoder LSTM, each shaped ``[1, units]``."""

    c: torch.Tensor
    h: torch.Tensor


@dataclass(frozen=True, slots=True)
class MixtureDensity:
    """Temperature-adjusted parameters of the next-stroke distribution."""

    pi: torch.Tensor  # [M]
    mu1: torch.Tensor  # [M]
    mu2: torch.Tensor  # [M]
    sigma1: torch.Tensor  # [M]
    sigma2: torch.Tensor  # [M]
    corr: torch.Tensor  # [M]
    pen: torch.Tensor  # [3]

    @property
    def num_mixtures(self) -> int:
        return int(self.pi.numel())


@dataclass(frozen=True, slots=True)
class _DecoderWeights:
    output_kernel: torch.Tensor  # [units, 3 + 6M]
    output_bias: torch.Tensor  # [3 + 6M]
    lstm_kernel: torch.Tensor  # [5 + units, 4 * units]
    lstm_bias: torch.Tensor  # [4 * units]


class SketchRNNModel:
    """Unconditional SketchRNN decoder stepped one stroke at a time.

    The decoder is a basic LSTM (gate order ``i, j, f, o``, forget bias 1.0)
    feeding a mixture-density output layer: three pen logits followed by six
    ``M``-wide chunks (mixture logits, two means, two log standard deviations and
    a raw correlation). Stroke offsets are divided by ``scale_factor`` on the way
    in and multiplied by it on the way out, where ``scale_factor`` is the
    checkpoint's dataset scale divided by the pixel factor.
    """

    def __init__(
        self,
        location: str,
        *,
        fetch_config: Optional[FetchConfig] = None,
        device: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.location = location
        self.fetch_config = fetch_config or FetchConfig()
        self.device = torch.device(device or resolve_device())
        self._generator = make_generator(seed, device=self.device.type)
        self.info: dict = {}
        self.pixel_factor = DEFAULT_PIXEL_FACTOR
        self.scale_factor = 1.0
        self._weights: Optional[_DecoderWeights] = None

    @classmethod
    def from_checkpoint(
        cls,
        checkpoint: DecoderCheckpoint,
        *,
        location: str = "<memory>",
        device: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> "SketchRNNModel":
        """Build an already-initialised model from decoded parameters."""

        model = cls(location, device=device, seed=seed)
        model.load_checkpoint(checkpoint)
        return model

    async def initialize(self) -> None:
        """Fetch and install the decoder parameters unless already installed."""

        if self.initialized:
            LOGGER.debug("Decoder parameters already installed; skipping fetch of %s", self.location)
            return
        checkpoint = await load_checkpoint(self.location, config=self.fetch_config)
        self.load_checkpoint(checkpoint)

    def load_checkpoint(self, checkpoint: DecoderCheckpoint) -> None:
        def _tensor(name: str) -> torch.Tensor:
            return torch.as_tensor(checkpoint.weights[name], dtype=torch.float32, device=self.device)

        self.info = dict(checkpoint.info)
        self._weights = _DecoderWeights(
            output_kernel=_tensor("output_kernel"),
            output_bias=_tensor("output_bias"),
            lstm_kernel=_tensor("lstm_kernel"),
            lstm_bias=_tensor("lstm_bias"),
        )
        self.set_pixel_factor(DEFAULT_PIXEL_FACTOR)

    @property
    def initialized(self) -> bool:
        return self._weights is not None

    @property
    def num_units(self) -> int:
        weights = self._require_weights()
        return int(weights.output_kernel.size(0))

    @property
    def num_mixtures(self) -> int:
        weights = self._require_weights()
        return (int(weights.output_kernel.size(1)) - 3) // 6

    def zero_input(self) -> List[float]:
        """Start-of-sequence stroke: no offset, pen down."""

        return [0.0, 0.0, 1.0, 0.0, 0.0]

    def zero_state(self) -> LSTMState:
        units = self.num_units
        zeros = torch.zeros(1, units, dtype=torch.float32, device=self.device)
        return LSTMState(c=zeros, h=zeros.clone())

    def set_pixel_factor(self, pixel_factor: float) -> float:
        """Set the output magnitude multiplier and return the resulting scale factor."""

        if pixel_factor <= 0.0:
            raise ValueError("pixel_factor must be positive.")
        self._require_weights()
        self.pixel_factor = float(pixel_factor)
        self.scale_factor = float(self.info["scale_factor"]) / self.pixel_factor
        LOGGER.debug(
            "Pixel factor %.3f -> scale factor %.5f", self.pixel_factor, self.scale_factor
        )
        return self.scale_factor

    @torch.no_grad()
    def update(self, stroke: Sequence[float], state: LSTMState) -> LSTMState:
        """Advance the LSTM by one observed stroke vector."""

        weights = self._require_weights()
        if len(stroke) != 5:
            raise ValueError(f"Stroke vectors must have 5 entries, received {len(stroke)}.")
        x = torch.tensor(
            [
                [
                    float(stroke[0]) / self.scale_factor,
                    float(stroke[1]) / self.scale_factor,
                    float(stroke[2]),
                    float(stroke[3]),
                    float(stroke[4]),
                ]
            ],
            dtype=torch.float32,
            device=self.device,
        )
        gates = torch.cat([x, state.h], dim=1) @ weights.lstm_kernel + weights.lstm_bias
        i, j, f, o = torch.chunk(gates, 4, dim=1)
        c = state.c * torch.sigmoid(f + FORGET_BIAS) + torch.sigmoid(i) * torch.tanh(j)
        h = torch.tanh(c) * torch.sigmoid(o)
        return LSTMState(c=c, h=h)

    def update_strokes(
        self, strokes: Iterable[Sequence[float]], state: LSTMState
    ) -> LSTMState:
        """Fold ``strokes`` into ``state`` in order."""

        for stroke in strokes:
            state = self.update(stroke, state)
        return state

    @torch.no_grad()
    def get_pdf(
        self,
        state: LSTMState,
        temperature: float = 0.65,
        softmax_temperature: Optional[float] = None,
    ) -> MixtureDensity:
        """Project the hidden state to temperature-adjusted mixture parameters.

        The pen distribution uses ``softmax_temperature`` when given, otherwise
        ``0.5 + 0.5 * temperature``.
        """

        weights = self._require_weights()
        if temperature <= 0.0:
            raise ValueError("temperature must be positive.")
        discrete_temperature = softmax_temperature or 0.5 + temperature * 0.5
        z = (state.h @ weights.output_kernel + weights.output_bias)[0]
        pen_logits = z[:3]
        logits, mu1, mu2, log_sigma1, log_sigma2, raw_corr = torch.chunk(z[3:], 6)
        scale = math.sqrt(temperature)
        return MixtureDensity(
            pi=torch.softmax(logits / temperature, dim=0),
            mu1=mu1,
            mu2=mu2,
            sigma1=torch.exp(log_sigma1) * scale,
            sigma2=torch.exp(log_sigma2) * scale,
            corr=torch.tanh(raw_corr),
            pen=torch.softmax(pen_logits / discrete_temperature, dim=0),
        )

    @torch.no_grad()
    def sample(self, pdf: MixtureDensity) -> List[float]:
        """Draw one ``[dx, dy, down, up, end]`` stroke from ``pdf``."""

        idx = int(torch.multinomial(pdf.pi, 1, generator=self._generator).item())
        pen_idx = int(torch.multinomial(pdf.pen, 1, generator=self._generator).item())
        eps = torch.randn(2, generator=self._generator, device=pdf.pi.device)
        rho = pdf.corr[idx]
        dx = pdf.mu1[idx] + pdf.sigma1[idx] * eps[0]
        dy = pdf.mu2[idx] + pdf.sigma2[idx] * (rho * eps[0] + torch.sqrt(1.0 - rho * rho) * eps[1])
        pen = [0.0, 0.0, 0.0]
        pen[pen_idx] = 1.0
        return [float(dx) * self.scale_factor, float(dy) * self.scale_factor, *pen]

    def _require_weights(self) -> _DecoderWeights:
        if self._weights is None:
            raise ModelNotReadyError(
                f"SketchRNN model from {self.location} has not been initialised yet."
            )
        return self._weights


__all__ = ["DEFAULT_PIXEL_FACTOR", "LSTMState", "MixtureDensity", "SketchRNNModel"]
