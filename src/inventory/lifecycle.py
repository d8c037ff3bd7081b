"""Vehicle lifecycle stages and progress metrics.

Every bike moves through the same six-stage pipeline:

    Acquisition → Evaluation → Servicing → Media → Listed → Sold

Operators may set any stage at any time; nothing here enforces forward-only
movement. Callers that want a stricter policy can check ``is_forward()``
before calling ``transition()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    """Lifecycle stage of an inventory unit."""
    ACQUISITION = "Acquisition"
    EVALUATION = "Evaluation"
    SERVICING = "Servicing"
    MEDIA = "Media"
    LISTED = "Listed"
    SOLD = "Sold"
    UNKNOWN = "Unknown"


# Canonical order; UNKNOWN is not part of it and maps to index 0.
STAGE_ORDER: tuple[Stage, ...] = (
    Stage.ACQUISITION,
    Stage.EVALUATION,
    Stage.SERVICING,
    Stage.MEDIA,
    Stage.LISTED,
    Stage.SOLD,
)

_BY_VALUE = {stage.value: stage for stage in STAGE_ORDER}


def normalize_stage(value: Any) -> Stage:
    """Map a stored stage value of any casing onto a Stage.

    "sold", "SOLD" and "Sold" all become Stage.SOLD. Anything that is not
    one of the six pipeline stages lands in Stage.UNKNOWN.
    """
    if isinstance(value, Stage):
        return value
    if not isinstance(value, str):
        return Stage.UNKNOWN
    text = value.strip()
    normalized = text[:1].upper() + text[1:].lower()
    stage = _BY_VALUE.get(normalized)
    if stage is None:
        logger.debug("Unrecognized stage value %r", value)
        return Stage.UNKNOWN
    return stage


@dataclass
class StageProgress:
    """Position of a stage within the pipeline, for progress bars."""

    stage: Stage
    current_step: int
    total_steps: int = len(STAGE_ORDER)
    stages: list[str] = field(default_factory=lambda: [s.value for s in STAGE_ORDER])

    @property
    def percentage(self) -> float:
        return self.current_step / self.total_steps * 100

    def to_dict(self) -> dict:
        return {
            "stage": self.stage.value,
            "current_step": self.current_step,
            "total_steps": self.total_steps,
            "percentage": round(self.percentage, 1),
        }


class LifecycleStateMachine:
    """Stage normalization, progress and transitions.

    Usage:
        progress = LifecycleStateMachine.progress("servicing")
        print(f"Step {progress.current_step} of {progress.total_steps}")
    """

    stages = STAGE_ORDER

    @staticmethod
    def normalize(value: Any) -> Stage:
        return normalize_stage(value)

    @staticmethod
    def index(stage: Any) -> int:
        """1-based position in the pipeline, 0 for unknown stages."""
        stage = normalize_stage(stage)
        if stage is Stage.UNKNOWN:
            return 0
        return STAGE_ORDER.index(stage) + 1

    @classmethod
    def progress(cls, stage: Any) -> StageProgress:
        stage = normalize_stage(stage)
        return StageProgress(stage=stage, current_step=cls.index(stage))

    @staticmethod
    def is_active(stage: Any) -> bool:
        """A vehicle is active until it is sold."""
        return normalize_stage(stage) is not Stage.SOLD

    @classmethod
    def is_forward(cls, current: Any, target: Any) -> bool:
        return cls.index(target) > cls.index(current)

    @classmethod
    def transition(cls, vehicle, stage: Any):
        """Return a copy of ``vehicle`` moved to ``stage``.

        Any stage may follow any other. Backward moves are logged but allowed.
        """
        target = normalize_stage(stage)
        if target is Stage.UNKNOWN:
            raise ValueError(f"Cannot move vehicle {vehicle.id} to unknown stage {stage!r}")
        if not cls.is_forward(vehicle.stage, target) and target is not vehicle.stage:
            logger.info(
                "Vehicle %s moved backwards: %s → %s",
                vehicle.id, vehicle.stage.value, target.value,
            )
        return vehicle.model_copy(update={"stage": target})

    @staticmethod
    def count_by_stage(vehicles: Iterable) -> dict[str, int]:
        """Count vehicles per stage, plus a ``total`` key."""
        counts = {stage.value: 0 for stage in STAGE_ORDER}
        counts[Stage.UNKNOWN.value] = 0
        total = 0
        for vehicle in vehicles:
            counts[normalize_stage(vehicle.stage).value] += 1
            total += 1
        counts["total"] = total
        return counts
