# Copyright (c) 2026 Chromasight
# SPDX-License-Identifier: MIT

"""
Color-vision calibration as an explicit state machine.

Stages:
    INTRO → GRID_STAGE_1 → GRID_STAGE_2 → GRID_STAGE_3
          → WIDTH_MEASUREMENT → RESULT

1. Grid stages narrow in on the hue pair the viewer confuses most. Each
   stage shows plates for a grid of hue pairs; the viewer picks the plate
   where the digit is least visible. Later stages use a finer step inside
   a window around the previous pick.
2. The width stage shifts the chosen pair by a fixed list of offsets and
   asks, for every offset, whether the two colors can be told apart.
3. The result is the widest offset that could not be distinguished.

transition() is a pure function of (state, event). CVDCalibrator wraps it
with a current state and plate rendering for interactive use. Restart is
accepted in every stage and drops everything not yet finalized.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional, Sequence, Union

import numpy as np
from PIL import Image

from chromasight.schema import (
    DEFAULT_SEVERITY_THRESHOLDS,
    ConfusionPair,
    CVDProfile,
    WidthMeasurement,
    compute_max_width,
    severity_for_width,
)
from chromasight.cvd.pairs import generate_pairs, page_count, paginate
from chromasight.cvd.stimulus import DigitMask, Dot, ShapeMask, Stimulus, generate_dots


logger = logging.getLogger(__name__)

__all__ = [
    "Stage",
    "GridStageSpec",
    "CalibrationConfig",
    "CalibrationState",
    "Start",
    "SelectPair",
    "ChangePage",
    "ToggleBackground",
    "Answer",
    "Restart",
    "InvalidTransition",
    "transition",
    "stage_pairs",
    "current_offset",
    "build_profile",
    "compute_max_width",
    "severity_for_width",
    "CVDCalibrator",
]


class InvalidTransition(ValueError):
    """An event that is not accepted in the current stage."""


class Stage(Enum):
    INTRO = "intro"
    GRID_STAGE_1 = "grid1"
    GRID_STAGE_2 = "grid2"
    GRID_STAGE_3 = "grid3"
    WIDTH_MEASUREMENT = "width"
    RESULT = "result"


_GRID_STAGES = (Stage.GRID_STAGE_1, Stage.GRID_STAGE_2, Stage.GRID_STAGE_3)


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class GridStageSpec:
    """
    One grid stage.

    Attributes:
        step: Hue spacing in degrees
        window: Total window width around the previous pick
            (None = whole hue circle)
    """
    step: float
    window: Optional[float] = None


@dataclass(frozen=True)
class CalibrationConfig:
    """Configuration for a calibration session."""

    # Stimulus colors (HSL)
    saturation: float = 0.7
    lightness: float = 0.5

    # Coarse → fine search: 30° over the circle, 15° within ±45°, 5° within ±15°
    grid_stages: tuple[GridStageSpec, ...] = (
        GridStageSpec(step=30.0),
        GridStageSpec(step=15.0, window=90.0),
        GridStageSpec(step=5.0, window=30.0),
    )

    # Pair filter. Circular distance never exceeds 180°, so the upper
    # bound only matters when set below that.
    min_separation: float = 60.0
    max_separation: float = 300.0

    # Width stage offsets, asked in this order
    offsets: tuple[float, ...] = (0, 1, -1, 2, -2, 3, -3, 5, -5, 8, -8)

    # Tiles per page in grid stages
    page_size: int = 4

    # Upper bounds for mild, mild-moderate, moderate, moderate-severe
    severity_thresholds: tuple[float, float, float, float] = DEFAULT_SEVERITY_THRESHOLDS

    def __post_init__(self) -> None:
        if len(self.grid_stages) != 3:
            raise ValueError(f"Expected 3 grid stages, got {len(self.grid_stages)}")
        if not self.offsets:
            raise ValueError("offsets cannot be empty")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")


# =============================================================================
# State and events
# =============================================================================


@dataclass(frozen=True)
class CalibrationState:
    """
    Snapshot of a calibration session.

    Attributes:
        stage: Current stage
        selections: Pairs picked in the grid stages so far (at most 3)
        measurements: Width answers so far, in offset order
        page: Current tile page in a grid stage
        show_color_a: Width stage toggle; True shows color A as ground
    """
    stage: Stage = Stage.INTRO
    selections: tuple[ConfusionPair, ...] = ()
    measurements: tuple[WidthMeasurement, ...] = ()
    page: int = 0
    show_color_a: bool = True

    @property
    def candidate(self) -> Optional[ConfusionPair]:
        """The pair confirmed by the last grid stage, once chosen."""
        return self.selections[2] if len(self.selections) >= 3 else None


@dataclass(frozen=True)
class Start:
    pass


@dataclass(frozen=True)
class SelectPair:
    pair: ConfusionPair


@dataclass(frozen=True)
class ChangePage:
    page: int


@dataclass(frozen=True)
class ToggleBackground:
    pass


@dataclass(frozen=True)
class Answer:
    can_distinguish: bool


@dataclass(frozen=True)
class Restart:
    pass


Event = Union[Start, SelectPair, ChangePage, ToggleBackground, Answer, Restart]


# =============================================================================
# Pure stage logic
# =============================================================================


def stage_pairs(
    state: CalibrationState,
    config: Optional[CalibrationConfig] = None,
) -> list[ConfusionPair]:
    """Candidate pairs for the current grid stage (empty outside grid stages)."""
    cfg = config or CalibrationConfig()
    if state.stage not in _GRID_STAGES:
        return []

    index = _GRID_STAGES.index(state.stage)
    spec = cfg.grid_stages[index]
    previous = state.selections[index - 1] if index > 0 else None

    return generate_pairs(
        spec.step,
        center_a=previous.hue_a if previous is not None else None,
        center_b=previous.hue_b if previous is not None else None,
        window=spec.window if previous is not None else None,
        min_separation=cfg.min_separation,
        max_separation=cfg.max_separation,
        saturation=cfg.saturation,
        lightness=cfg.lightness,
    )


def current_offset(
    state: CalibrationState,
    config: Optional[CalibrationConfig] = None,
) -> Optional[float]:
    """Offset under test in the width stage, None elsewhere."""
    cfg = config or CalibrationConfig()
    if state.stage is not Stage.WIDTH_MEASUREMENT:
        return None
    return float(cfg.offsets[len(state.measurements)])


def _reject(state: CalibrationState, event: Event) -> InvalidTransition:
    return InvalidTransition(
        f"{type(event).__name__} is not valid in stage {state.stage.value!r}"
    )


def transition(
    state: CalibrationState,
    event: Event,
    config: Optional[CalibrationConfig] = None,
) -> CalibrationState:
    """
    Next state after a viewer action.

    Args:
        state: Current state
        event: Viewer action
        config: Session settings (uses defaults if None)

    Returns:
        New state (the input is never modified)

    Raises:
        InvalidTransition: If the event is not accepted in the current stage,
            or names a pair/page that the stage does not offer
    """
    cfg = config or CalibrationConfig()

    if isinstance(event, Restart):
        return CalibrationState()

    stage = state.stage

    if stage is Stage.INTRO:
        if isinstance(event, Start):
            return CalibrationState(stage=Stage.GRID_STAGE_1)
        raise _reject(state, event)

    if stage in _GRID_STAGES:
        pairs = stage_pairs(state, cfg)

        if isinstance(event, ChangePage):
            pages = page_count(len(pairs), cfg.page_size)
            if not 0 <= event.page < pages:
                raise InvalidTransition(f"Page {event.page} out of range (0-{pages - 1})")
            return replace(state, page=event.page)

        if isinstance(event, SelectPair):
            try:
                chosen = pairs[pairs.index(event.pair)]
            except ValueError:
                raise InvalidTransition(
                    f"Pair {event.pair.hue_a}°/{event.pair.hue_b}° is not offered "
                    f"in stage {stage.value!r}"
                ) from None

            index = _GRID_STAGES.index(stage)
            next_stage = (
                _GRID_STAGES[index + 1] if index + 1 < len(_GRID_STAGES)
                else Stage.WIDTH_MEASUREMENT
            )
            return replace(
                state,
                stage=next_stage,
                selections=state.selections + (chosen,),
                page=0,
            )

        raise _reject(state, event)

    if stage is Stage.WIDTH_MEASUREMENT:
        if isinstance(event, ToggleBackground):
            return replace(state, show_color_a=not state.show_color_a)

        if isinstance(event, Answer):
            offset = current_offset(state, cfg)
            measurements = state.measurements + (
                WidthMeasurement(offset_degrees=offset, can_distinguish=bool(event.can_distinguish)),
            )
            done = len(measurements) >= len(cfg.offsets)
            return replace(
                state,
                stage=Stage.RESULT if done else Stage.WIDTH_MEASUREMENT,
                measurements=measurements,
                show_color_a=True,
            )

        raise _reject(state, event)

    raise _reject(state, event)


def build_profile(
    state: CalibrationState,
    config: Optional[CalibrationConfig] = None,
    timestamp: Optional[str] = None,
) -> CVDProfile:
    """
    Profile for a finished session.

    Raises:
        InvalidTransition: If the session has not reached RESULT
    """
    cfg = config or CalibrationConfig()
    if state.stage is not Stage.RESULT or state.candidate is None:
        raise InvalidTransition(
            f"Cannot finalize in stage {state.stage.value!r}; finish the width stage first"
        )
    return CVDProfile.from_measurements(
        state.candidate,
        state.measurements,
        thresholds=cfg.severity_thresholds,
        timestamp=timestamp,
    )


# =============================================================================
# Interactive wrapper
# =============================================================================


@dataclass
class CVDCalibrator:
    """
    Stateful driver for one viewer's calibration session.

    Example:
        >>> cal = CVDCalibrator(seed=1)
        >>> cal.start()
        >>> tiles = cal.page_pairs()          # show these, viewer picks one
        >>> cal.select(tiles[0])              # ... repeat for stages 2 and 3
        >>> cal.answer(False)                 # ... once per offset
        >>> profile = cal.finalize()
    """
    config: CalibrationConfig = field(default_factory=CalibrationConfig)
    mask: ShapeMask = field(default_factory=DigitMask)
    seed: Optional[int] = None
    plate_size: int = 300
    dot_count: int = 2500
    state: CalibrationState = field(default_factory=CalibrationState)

    def __post_init__(self) -> None:
        self._rng = np.random.default_rng(self.seed)
        # Layout of the width plate for the offset under test
        self._width_dots: Optional[tuple[Dot, ...]] = None

    @property
    def stage(self) -> Stage:
        return self.state.stage

    def dispatch(self, event: Event) -> CalibrationState:
        """Apply an event and return the new state."""
        new_state = transition(self.state, event, self.config)
        if new_state.stage is not self.state.stage:
            logger.debug(
                "Calibration stage %s -> %s", self.state.stage.value, new_state.stage.value
            )
        if (
            new_state.stage is not self.state.stage
            or len(new_state.measurements) != len(self.state.measurements)
            or isinstance(event, Restart)
        ):
            self._width_dots = None
        self.state = new_state
        return new_state

    def start(self) -> CalibrationState:
        return self.dispatch(Start())

    def restart(self) -> CalibrationState:
        return self.dispatch(Restart())

    def select(self, pair: ConfusionPair) -> CalibrationState:
        return self.dispatch(SelectPair(pair))

    def go_to_page(self, page: int) -> CalibrationState:
        return self.dispatch(ChangePage(page))

    def next_page(self) -> CalibrationState:
        return self.go_to_page(min(self.state.page + 1, self.page_count - 1))

    def previous_page(self) -> CalibrationState:
        return self.go_to_page(max(self.state.page - 1, 0))

    def toggle_background(self) -> CalibrationState:
        return self.dispatch(ToggleBackground())

    def answer(self, can_distinguish: bool) -> CalibrationState:
        return self.dispatch(Answer(can_distinguish))

    def stage_pairs(self) -> list[ConfusionPair]:
        """All pairs of the current grid stage."""
        return stage_pairs(self.state, self.config)

    @property
    def page_count(self) -> int:
        return page_count(len(self.stage_pairs()), self.config.page_size)

    def page_pairs(self) -> list[ConfusionPair]:
        """Pairs on the current page of the current grid stage."""
        return paginate(self.stage_pairs(), self.state.page, self.config.page_size)

    @property
    def current_offset(self) -> Optional[float]:
        return current_offset(self.state, self.config)

    def page_plates(self) -> list[tuple[ConfusionPair, Image.Image]]:
        """Rendered tiles for the current page (grid stages)."""
        return [
            (pair, Stimulus(pair).render(
                self.mask, size=self.plate_size, rng=self._rng, dot_count=self.dot_count,
            ))
            for pair in self.page_pairs()
        ]

    def width_stimulus(self) -> Stimulus:
        """Stimulus for the offset under test (width stage)."""
        offset = self.current_offset
        if offset is None or self.state.candidate is None:
            raise InvalidTransition(
                f"No width stimulus in stage {self.state.stage.value!r}"
            )
        return Stimulus(self.state.candidate, offset=offset, show_color_a=self.state.show_color_a)

    def width_plate(self, dots: Optional[Sequence[Dot]] = None) -> Image.Image:
        """
        Rendered plate for the offset under test.

        The dot layout is drawn once per offset and reused until the
        viewer answers, so toggling the ground color only swaps colors.
        """
        if dots is None:
            if self._width_dots is None:
                self._width_dots = generate_dots(
                    self.plate_size, self.plate_size, self.dot_count, self._rng
                )
            dots = self._width_dots
        return self.width_stimulus().render(self.mask, size=self.plate_size, dots=dots)

    def finalize(self, timestamp: Optional[str] = None) -> CVDProfile:
        """Produce the profile for a completed session."""
        profile = build_profile(self.state, self.config, timestamp=timestamp)
        logger.debug(
            "Calibrated %.0f°/%.0f° width ±%g° (%s)",
            profile.confusion_pair.hue_a,
            profile.confusion_pair.hue_b,
            profile.max_width,
            profile.severity_label,
        )
        return profile
