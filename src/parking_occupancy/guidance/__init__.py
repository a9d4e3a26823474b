"""Guidance simulation module."""

from .sequencer import (
    DEFAULT_SCRIPT,
    GuidanceSequencer,
    GuidanceState,
    GuidanceStep,
    GuidanceView,
    StepDirection,
)

__all__ = [
    "DEFAULT_SCRIPT",
    "GuidanceSequencer",
    "GuidanceState",
    "GuidanceStep",
    "GuidanceView",
    "StepDirection",
]
