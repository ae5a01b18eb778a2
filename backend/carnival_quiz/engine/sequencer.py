from __future__ import annotations

import enum
import logging
from typing import Sequence

logger = logging.getLogger(__name__)


class SequencerTransition(str, enum.Enum):  # outcome of one advance() call
    MOVED = "moved"
    COMPLETED = "completed"
    IGNORED = "ignored"


class StepSequencer:
    """Cursor over a fixed, ordered step sequence.

    States are Active(cursor) and Completed. The cursor only ever moves
    forward by one, and Completed is terminal.
    """

    def __init__(self, step_ids: Sequence[str]) -> None:
        steps = tuple(step_ids)
        if not steps:
            raise ValueError("StepSequencer: at least one step is required.")
        if len(set(steps)) != len(steps):
            raise ValueError("StepSequencer: step ids must be unique.")

        self._steps = steps
        self._cursor = 0
        self._completed = False

    @property
    def steps(self) -> tuple:
        return self._steps

    @property
    def length(self) -> int:
        return len(self._steps)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def completed(self) -> bool:
        return self._completed

    def current_step(self) -> str:
        return self._steps[self._cursor]

    def is_last(self) -> bool:
        return self._cursor == len(self._steps) - 1

    def progress_fraction(self) -> float:
        return (self._cursor + 1) / len(self._steps)

    def advance(self) -> SequencerTransition:
        if self._completed:
            return SequencerTransition.IGNORED

        if self.is_last():
            self._completed = True
            return SequencerTransition.COMPLETED

        self._cursor += 1
        logger.debug("cursor moved to %d (%s)", self._cursor, self.current_step())
        return SequencerTransition.MOVED
