"""Scripted turn-by-turn guidance to a parking spot."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ..metrics import update_guidance_step
from ..state.models import Spot

logger = logging.getLogger(__name__)


class StepDirection(str, Enum):
    """Manoeuvre shown for a guidance step."""

    STRAIGHT = "straight"
    RIGHT = "right"
    LEFT = "left"
    ARRIVE = "arrive"


@dataclass(frozen=True)
class GuidanceStep:
    """One instruction in the guidance script."""

    instruction: str
    direction: StepDirection
    distance: str


@dataclass(frozen=True)
class GuidanceState:
    """Progress through the script."""

    current_step_index: int = 0
    is_active: bool = False


@dataclass(frozen=True)
class GuidanceView:
    """What the navigation screen shows for the current state."""

    instruction: str
    direction: StepDirection
    distance: str
    step_number: int
    total_steps: int
    progress: list[bool]  # One dot per step, True once reached
    is_active: bool
    destination: Optional[Spot] = None


DEFAULT_SCRIPT: tuple[GuidanceStep, ...] = (
    GuidanceStep("Drive straight past the entry barrier", StepDirection.STRAIGHT, "50 m"),
    GuidanceStep("Turn right onto the basement ramp", StepDirection.RIGHT, "20 m"),
    GuidanceStep("Continue straight along the aisle", StepDirection.STRAIGHT, "30 m"),
    GuidanceStep("Turn left into your parking row", StepDirection.LEFT, "10 m"),
    GuidanceStep("You have arrived at your parking spot", StepDirection.ARRIVE, "0 m"),
)


class GuidanceSequencer:
    """
    Steps through a fixed guidance script.

    start() begins at the first step. In automatic mode each step is
    held for dwell_seconds before advancing; on the last step the next
    advance deactivates the sequence but keeps the index. stop() resets
    to the first step and is not a pause.
    """

    def __init__(
        self,
        script: Sequence[GuidanceStep] = DEFAULT_SCRIPT,
        dwell_seconds: float = 3.0,
        auto_advance: bool = True,
    ):
        if not script:
            raise ValueError("Guidance script must contain at least one step")

        self.script = tuple(script)
        self.dwell_seconds = dwell_seconds
        self.auto_advance = auto_advance
        self.state = GuidanceState()
        self.destination: Optional[Spot] = None
        self._advance_task: Optional[asyncio.Task] = None

    @property
    def last_index(self) -> int:
        return len(self.script) - 1

    @property
    def current_step(self) -> GuidanceStep:
        return self.script[self.state.current_step_index]

    def start(self, destination: Optional[Spot] = None) -> GuidanceState:
        """
        Begin guidance from the first step.

        Args:
            destination: Spot being walked to, if one was picked
        """
        self.destination = destination
        self._set_state(GuidanceState(current_step_index=0, is_active=True))
        target = f" to {destination.name}" if destination else ""
        logger.info(f"Guidance started{target} ({len(self.script)} steps)")
        return self.state

    def stop(self) -> GuidanceState:
        """End guidance and reset to the first step."""
        if self.state != GuidanceState():
            logger.info("Guidance stopped")
        self.destination = None
        self._set_state(GuidanceState())
        return self.state

    def advance(self) -> GuidanceState:
        """Move to the next step, or finish when already on the last one."""
        if not self.state.is_active:
            return self.state

        index = self.state.current_step_index
        if index < self.last_index:
            self._set_state(GuidanceState(current_step_index=index + 1, is_active=True))
            logger.debug(f"Guidance step {index + 2}/{len(self.script)}")
        else:
            self._set_state(GuidanceState(current_step_index=index, is_active=False))
            logger.info("Guidance finished")
        return self.state

    def render(self) -> GuidanceView:
        """Render the current step and progress dots."""
        index = self.state.current_step_index
        step = self.script[index]
        return GuidanceView(
            instruction=step.instruction,
            direction=step.direction,
            distance=step.distance,
            step_number=index + 1,
            total_steps=len(self.script),
            progress=[i <= index for i in range(len(self.script))],
            is_active=self.state.is_active,
            destination=self.destination,
        )

    def _set_state(self, state: GuidanceState) -> None:
        self.state = state
        update_guidance_step(state.current_step_index, state.is_active)
        self._cancel_scheduled()
        if state.is_active and self.auto_advance:
            self._schedule_advance()

    def _schedule_advance(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; automatic advance disabled")
            return
        self._advance_task = loop.create_task(self._advance_after_dwell())

    async def _advance_after_dwell(self) -> None:
        await asyncio.sleep(self.dwell_seconds)
        # Detach first so advance() does not cancel the running task
        self._advance_task = None
        self.advance()

    def _cancel_scheduled(self) -> None:
        if self._advance_task is not None and not self._advance_task.done():
            self._advance_task.cancel()
        self._advance_task = None

    async def close(self) -> None:
        """Cancel any scheduled advance."""
        task = self._advance_task
        self._cancel_scheduled()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
