"""Seed-then-sample protocol tests for SketchRNN sessions."""

from __future__ import annotations

import asyncio

import pytest

from _sketch_test_utils import ZERO_INPUT, RecordingModel
from sketch_rnn_stepper.errors import CheckpointLoadError, InvalidSeedStrokeError
from sketch_rnn_stepper.inference.codec import Stroke
from sketch_rnn_stepper.inference.config import SessionDefaults
from sketch_rnn_stepper.inference.session import SketchRNN, sketch_rnn
from sketch_rnn_stepper.inference.state import Ready, Uninitialized

STROKE_A = {"dx": 1.0, "dy": 2.0, "pen": "down"}
STROKE_B = {"dx": 3.0, "dy": -1.0, "pen": "up"}


def _session(model: RecordingModel, **kwargs) -> SketchRNN:
    return SketchRNN("cat", backend=model, **kwargs)


def test_session_resolves_catalog_name() -> None:
    async def scenario():
        session = _session(RecordingModel())
        await session.ready
        return session

    session = asyncio.run(scenario())
    assert session.checkpoint_url.endswith("/large_models/cat.gen.json")


def test_recurrent_state_is_created_lazily() -> None:
    model = RecordingModel()

    async def scenario():
        session = _session(model)
        await session.ready
        assert isinstance(session.state, Uninitialized)
        assert session.recurrent_state is None
        assert session.pen_state == ZERO_INPUT
        await session.generate()
        assert isinstance(session.state, Ready)
        assert session.recurrent_state is not None

    asyncio.run(scenario())
    assert model.zero_state_calls == 1


def test_generate_returns_one_decoded_stroke() -> None:
    model = RecordingModel(samples=[[4.0, -2.0, 0.0, 1.0, 0.0]])

    async def scenario():
        session = _session(model)
        stroke = await session.generate({})
        return session, stroke

    session, stroke = asyncio.run(scenario())
    assert stroke == Stroke(dx=4.0, dy=-2.0, pen="up")
    assert session.pen_state == [4.0, -2.0, 0.0, 1.0, 0.0]
    # The single step feeds the previous pen vector, not the sample.
    assert model.updates == [tuple(ZERO_INPUT)]


def test_empty_options_use_default_temperature_and_pixel_factor() -> None:
    model = RecordingModel()

    async def scenario():
        await _session(model).generate({})

    asyncio.run(scenario())
    assert model.pdfs[-1]["temperature"] == 0.65
    assert model.pixel_factors == [3.0]


def test_zero_temperature_behaves_like_no_options() -> None:
    zero_model = RecordingModel()
    default_model = RecordingModel()

    async def scenario():
        zero_stroke = await _session(zero_model).generate({"temperature": 0, "pixel_factor": 0})
        default_stroke = await _session(default_model).generate({})
        return zero_stroke, default_stroke

    zero_stroke, default_stroke = asyncio.run(scenario())
    assert zero_stroke == default_stroke
    assert zero_model.pdfs[-1]["temperature"] == 0.65
    assert zero_model.pixel_factors == [3.0]


def test_pixel_factor_is_applied_only_once() -> None:
    model = RecordingModel()

    async def scenario():
        session = _session(model)
        await session.generate({"pixel_factor": 5.0})
        await session.generate({"pixel_factor": 9.0, "temperature": 0.3})
        session.reset()
        await session.generate({"pixel_factor": 7.0})

    asyncio.run(scenario())
    assert model.pixel_factors == [5.0]
    assert [pdf["temperature"] for pdf in model.pdfs] == [0.65, 0.3, 0.65]


def test_seed_strokes_fold_in_order_without_output() -> None:
    model = RecordingModel()

    async def scenario():
        session = _session(model)
        stroke = await session.generate({}, [STROKE_A, STROKE_B])
        return session, stroke

    session, stroke = asyncio.run(scenario())
    assert isinstance(stroke, Stroke)
    assert model.updates == [
        (1.0, 2.0, 1.0, 0.0, 0.0),
        (3.0, -1.0, 0.0, 1.0, 0.0),
        tuple(ZERO_INPUT),
    ]
    assert len(model.pdfs) == 1
    assert session.recurrent_state == tuple(model.updates)


def test_seeding_order_and_count_change_the_result() -> None:
    together = RecordingModel()
    split = RecordingModel()
    reversed_order = RecordingModel()

    async def scenario():
        first = await _session(together).generate({}, [STROKE_A, STROKE_B])
        split_session = _session(split)
        await split_session.generate({}, [STROKE_A])
        second = await split_session.generate({}, [STROKE_B])
        third = await _session(reversed_order).generate({}, [STROKE_B, STROKE_A])
        return first, second, third

    first, second, third = asyncio.run(scenario())
    assert together.pdfs[-1]["state"] != split.pdfs[-1]["state"]
    assert together.pdfs[-1]["state"] != reversed_order.pdfs[-1]["state"]
    assert first != second
    assert first != third


def test_overload_forms() -> None:
    model = RecordingModel()
    received = []

    def callback(err, res):
        received.append((err, res))

    async def scenario():
        session = _session(model)
        await session.generate(callback)
        await session.generate([STROKE_A], callback)
        await session.generate([STROKE_A])
        await session.generate({"temperature": 0.4}, callback)
        await session.generate({"temperature": 0.5}, [STROKE_B], callback)
        await session.generate({"temperature": 0.6}, [STROKE_B])
        await asyncio.sleep(0)

    asyncio.run(scenario())
    assert [pdf["temperature"] for pdf in model.pdfs] == [0.65, 0.65, 0.65, 0.4, 0.5, 0.6]
    assert len(received) == 4
    assert all(err is None and isinstance(res, Stroke) for err, res in received)
    seeded = [update for update in model.updates if update[:2] in {(1.0, 2.0), (3.0, -1.0)}]
    assert len(seeded) == 4


def test_reset_reproduces_first_call_distribution() -> None:
    fresh = RecordingModel()
    reused = RecordingModel()

    async def scenario():
        await _session(fresh).generate({})
        session = _session(reused)
        await session.generate({}, [STROKE_A])
        await session.generate({})
        session.reset()
        assert session.pen_state == ZERO_INPUT
        await session.generate({})

    asyncio.run(scenario())
    assert reused.pdfs[-1] == fresh.pdfs[0]
    assert reused.zero_state_calls == 2


def test_reset_before_generate_does_not_need_model() -> None:
    model = RecordingModel()

    async def scenario():
        model.load_gate = asyncio.Event()
        session = _session(model)
        session.pen_state = [9.0, 9.0, 0.0, 0.0, 1.0]
        session.reset()
        session.reset()
        assert not session.ready.done()
        assert session.pen_state == ZERO_INPUT
        assert isinstance(session.state, Uninitialized)
        model.load_gate.set()
        await session.ready

    asyncio.run(scenario())
    assert model.zero_state_calls == 0


def test_generate_waits_for_readiness() -> None:
    model = RecordingModel()

    async def scenario():
        model.load_gate = asyncio.Event()
        session = _session(model)
        pending = session.generate({})
        await asyncio.sleep(0)
        assert not pending.done()
        assert model.updates == []
        model.load_gate.set()
        return await pending

    assert isinstance(asyncio.run(scenario()), Stroke)


def test_load_failure_surfaces_through_ready_callback_and_generate() -> None:
    failure = CheckpointLoadError("not found", location="cat", status_code=404)
    model = RecordingModel(fail_with=failure)
    received = []

    async def scenario():
        session = _session(model, callback=lambda err, res: received.append((err, res)))
        with pytest.raises(CheckpointLoadError):
            await session.ready
        with pytest.raises(CheckpointLoadError):
            await session.generate({})
        session.reset()

    asyncio.run(scenario())
    assert received == [(failure, None)]
    assert model.initialize_calls == 1


def test_invalid_seed_fails_before_touching_state() -> None:
    model = RecordingModel()

    async def scenario():
        session = _session(model)
        await session.generate({})
        pen_before = list(session.pen_state)
        state_before = session.state
        with pytest.raises(InvalidSeedStrokeError):
            session.generate({}, [STROKE_A, {"dy": 1.0}])
        return session, pen_before, state_before

    session, pen_before, state_before = asyncio.run(scenario())
    assert session.pen_state == pen_before
    assert session.state is state_before
    assert len(model.updates) == 1


def test_sessions_over_one_model_are_independent() -> None:
    model = RecordingModel()

    async def scenario():
        first = _session(model)
        second = _session(model)
        await first.generate({}, [STROKE_A])
        await second.generate({})
        return first, second

    first, second = asyncio.run(scenario())
    assert first.recurrent_state != second.recurrent_state
    assert second.recurrent_state == (tuple(ZERO_INPUT),)


def test_custom_defaults_and_factory() -> None:
    model = RecordingModel()

    async def scenario():
        session = sketch_rnn(
            "https://example.com/custom.gen.json",
            None,
            False,
            backend=model,
            defaults=SessionDefaults(temperature=0.25, pixel_factor=1.0),
        )
        await session.generate()
        return session

    session = asyncio.run(scenario())
    assert session.checkpoint_url == "https://example.com/custom.gen.json"
    assert model.pdfs[-1]["temperature"] == 0.25
    assert model.pixel_factors == [1.0]


def test_seed_strokes_are_folded_as_one_batch() -> None:
    model = RecordingModel()

    async def scenario():
        session = _session(model)
        await session.generate({}, [STROKE_A, STROKE_B])
        await session.generate({})

    asyncio.run(scenario())
    assert model.seed_batches == [2]


@pytest.mark.parametrize(
    "options",
    [{"temperature": -1}, {"pixel_factor": -3}, {"temperature": float("inf")}],
)
def test_invalid_options_fail_before_touching_state(options) -> None:
    model = RecordingModel()

    async def scenario():
        session = _session(model)
        await session.ready
        with pytest.raises(ValueError):
            session.generate(options)
        assert isinstance(session.state, Uninitialized)
        await session.generate({"pixel_factor": 3.0})
        return session

    session = asyncio.run(scenario())
    assert model.pixel_factors == [3.0]
    assert model.updates == [tuple(ZERO_INPUT)]
    assert session.recurrent_state == (tuple(ZERO_INPUT),)


def test_failed_step_keeps_previous_pen_and_recurrent_state() -> None:
    model = RecordingModel(pdf_error=RuntimeError("pdf exploded"))

    async def scenario():
        session = _session(model)
        with pytest.raises(RuntimeError, match="pdf exploded"):
            await session.generate({}, [STROKE_A])
        assert session.pen_state == ZERO_INPUT
        assert session.recurrent_state == ()
        await session.generate({})
        return session

    session = asyncio.run(scenario())
    # The retry feeds the unchanged pen vector once, on top of the zero state.
    assert session.recurrent_state == (tuple(ZERO_INPUT),)
    assert model.pixel_factors == [3.0]
    assert model.zero_state_calls == 1


def test_pixel_factor_failure_leaves_session_uninitialised() -> None:
    model = RecordingModel(pixel_factor_error=ValueError("bad pixel factor"))

    async def scenario():
        session = _session(model)
        with pytest.raises(ValueError, match="bad pixel factor"):
            await session.generate({"pixel_factor": 4.0})
        assert isinstance(session.state, Uninitialized)
        await session.generate({"pixel_factor": 5.0})

    asyncio.run(scenario())
    assert model.pixel_factors == [5.0]
