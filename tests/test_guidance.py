import asyncio

import pytest

from parking_occupancy.guidance.sequencer import (
    DEFAULT_SCRIPT,
    GuidanceSequencer,
    GuidanceState,
    GuidanceStep,
    StepDirection,
)
from parking_occupancy.state.models import Spot


@pytest.fixture
def sequencer() -> GuidanceSequencer:
    return GuidanceSequencer(auto_advance=False)


def test_initial_state(sequencer: GuidanceSequencer):
    assert sequencer.state == GuidanceState(current_step_index=0, is_active=False)
    assert len(sequencer.script) == 5


def test_start_resets_to_first_step(sequencer: GuidanceSequencer):
    sequencer.start()
    sequencer.advance()
    sequencer.advance()

    assert sequencer.start() == GuidanceState(current_step_index=0, is_active=True)



def test_destination_is_kept_until_stop(sequencer: GuidanceSequencer):
    spot = Spot(spot_id=7, name="B3 Zone B1", is_reserved=False)
    assert sequencer.render().destination is None

    sequencer.start(destination=spot)
    sequencer.advance()
    assert sequencer.render().destination == spot

    sequencer.stop()
    assert sequencer.render().destination is None
    assert sequencer.destination is None

def test_advance_reaches_terminal_step_then_deactivates(sequencer: GuidanceSequencer):
    sequencer.start()
    n = len(sequencer.script)

    for _ in range(n - 1):
        sequencer.advance()
    assert sequencer.state == GuidanceState(current_step_index=n - 1, is_active=True)

    sequencer.advance()
    assert sequencer.state == GuidanceState(current_step_index=n - 1, is_active=False)

    sequencer.advance()
    assert sequencer.state.current_step_index == n - 1


def test_advance_while_inactive_is_noop(sequencer: GuidanceSequencer):
    assert sequencer.advance() == GuidanceState()


@pytest.mark.parametrize("steps", [0, 1, 3, 4, 5])
def test_stop_resets_from_any_step(sequencer: GuidanceSequencer, steps: int):
    sequencer.start()
    for _ in range(steps):
        sequencer.advance()

    assert sequencer.stop() == GuidanceState(current_step_index=0, is_active=False)


def test_stop_is_idempotent(sequencer: GuidanceSequencer):
    sequencer.start()
    sequencer.advance()

    first = sequencer.stop()
    second = sequencer.stop()

    assert first == second == GuidanceState()


def test_render_progress_dots(sequencer: GuidanceSequencer):
    sequencer.start()
    sequencer.advance()
    sequencer.advance()

    view = sequencer.render()

    assert view.instruction == DEFAULT_SCRIPT[2].instruction
    assert view.distance == DEFAULT_SCRIPT[2].distance
    assert view.direction == StepDirection.STRAIGHT
    assert view.step_number == 3
    assert view.total_steps == 5
    assert view.progress == [True, True, True, False, False]


def test_default_script_ends_with_arrival():
    assert DEFAULT_SCRIPT[-1].direction == StepDirection.ARRIVE
    assert StepDirection.ARRIVE not in [s.direction for s in DEFAULT_SCRIPT[:-1]]


def test_empty_script_rejected():
    with pytest.raises(ValueError):
        GuidanceSequencer(script=[])


@pytest.mark.asyncio
async def test_automatic_mode_runs_to_terminal_step():
    sequencer = GuidanceSequencer(dwell_seconds=0.01)

    sequencer.start()
    for _ in range(100):
        if not sequencer.state.is_active:
            break
        await asyncio.sleep(0.01)

    assert sequencer.state == GuidanceState(current_step_index=4, is_active=False)
    await sequencer.close()


@pytest.mark.asyncio
async def test_automatic_mode_waits_for_dwell():
    sequencer = GuidanceSequencer(dwell_seconds=0.05)

    sequencer.start()
    await asyncio.sleep(0.02)
    assert sequencer.state.current_step_index == 0

    await asyncio.sleep(0.06)
    assert sequencer.state.current_step_index == 1
    await sequencer.close()


@pytest.mark.asyncio
async def test_stop_cancels_automatic_advance():
    sequencer = GuidanceSequencer(dwell_seconds=0.01)

    sequencer.start()
    sequencer.stop()
    await asyncio.sleep(0.05)

    assert sequencer.state == GuidanceState()


@pytest.mark.asyncio
async def test_close_cancels_pending_advance():
    sequencer = GuidanceSequencer(dwell_seconds=0.01)
    sequencer.start()

    await sequencer.close()
    await asyncio.sleep(0.05)

    assert sequencer.state == GuidanceState(current_step_index=0, is_active=True)


@pytest.mark.asyncio
async def test_custom_script_length():
    script = [
        GuidanceStep("Go straight", StepDirection.STRAIGHT, "5 m"),
        GuidanceStep("Arrive", StepDirection.ARRIVE, "0 m"),
    ]
    sequencer = GuidanceSequencer(script=script, auto_advance=False)

    sequencer.start()
    sequencer.advance()
    sequencer.advance()

    assert sequencer.state == GuidanceState(current_step_index=1, is_active=False)
    assert sequencer.render().progress == [True, True]
