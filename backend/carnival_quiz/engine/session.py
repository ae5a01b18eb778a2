"""One traversal of the quiz.

``QuizSession`` ties a ``StepSequencer`` and an ``AnswerStore`` together and
turns user intents into mutations and advances. Each traversal gets its own
instance. Nothing is shared between sessions.

Intents never raise for user mistakes. They report what happened through
``IntentOutcome``, and a refused intent leaves the session untouched.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Sequence

from carnival_quiz.engine import catalog
from carnival_quiz.engine.answers import AnswerStore, AnswerValue, FreeText, SingleChoice
from carnival_quiz.engine.gating import can_advance, is_gated
from carnival_quiz.engine.metrics import BodyMassIndex, compute_bmi
from carnival_quiz.engine.sequencer import SequencerTransition, StepSequencer

logger = logging.getLogger(__name__)

CompletionReceiver = Callable[[Mapping[str, AnswerValue]], None]


class IntentOutcome(str, enum.Enum):
    ACCEPTED = "accepted"        # answer stored and/or cursor moved
    COMPLETED = "completed"      # this intent finished the quiz
    WRONG_STEP = "wrong_step"    # intent names a step other than the current one
    WRONG_KIND = "wrong_kind"    # e.g. toggling on a single-choice step
    BLOCKED = "blocked"          # gating refused the advance
    INACTIVE = "inactive"        # quiz already completed

    @property
    def accepted(self) -> bool:
        return self in (IntentOutcome.ACCEPTED, IntentOutcome.COMPLETED)


@dataclass(frozen=True)
class QuizView:
    """Read-only projection handed to presentation."""
    current_step: str
    cursor: int
    step_count: int
    progress_fraction: float
    is_step_gated: bool
    can_advance: bool
    derived_metric: Optional[BodyMassIndex]
    completed: bool


class QuizSession:

    def __init__(
        self,
        on_complete: CompletionReceiver,
        step_ids: Sequence[str] = catalog.STEP_IDS,
        definition: Optional[dict] = None,
    ) -> None:
        self._definition = catalog.STEP_DEFINITION if definition is None else definition
        catalog.validate_definition(step_ids, self._definition)

        self._sequencer = StepSequencer(step_ids)
        self._answers = AnswerStore()
        self._on_complete = on_complete
        self._bmi: Optional[BodyMassIndex] = None

    # ---- reads ----

    @property
    def completed(self) -> bool:
        return self._sequencer.completed

    @property
    def answers(self) -> AnswerStore:
        return self._answers

    @property
    def derived_metric(self) -> Optional[BodyMassIndex]:
        return self._bmi

    def current_step(self) -> str:
        return self._sequencer.current_step()

    def current_node(self) -> dict:
        return catalog.get_step(self._sequencer.current_step(), self._definition)

    def view(self) -> QuizView:
        node = self.current_node()
        return QuizView(
            current_step=node["id"],
            cursor=self._sequencer.cursor,
            step_count=self._sequencer.length,
            progress_fraction=self._sequencer.progress_fraction(),
            is_step_gated=is_gated(node),
            can_advance=not self.completed and can_advance(node, self._answers.get(node["id"])),
            derived_metric=self._bmi,
            completed=self.completed,
        )

    # ---- intents ----

    def select_single(self, step_id: str, label: str) -> IntentOutcome:
        """Record a single-choice answer and move on straight away."""
        refused = self._check_intent(step_id, ("single_choice",))
        if refused:
            return refused

        self._answers.set(step_id, SingleChoice(label))
        return self._advance()

    def toggle_multi(self, step_id: str, token: str) -> IntentOutcome:
        refused = self._check_intent(step_id, ("multi_choice",))
        if refused:
            return refused

        self._answers.toggle(step_id, token)
        return IntentOutcome.ACCEPTED

    def set_text(self, step_id: str, raw_text: str) -> IntentOutcome:
        refused = self._check_intent(step_id, ("numeric", "free_text"))
        if refused:
            return refused

        self._answers.set(step_id, FreeText(raw_text))
        if step_id == catalog.HEIGHT_STEP:
            self._recompute_bmi(raw_text)
        return IntentOutcome.ACCEPTED

    def request_advance(self) -> IntentOutcome:
        if self.completed:
            return IntentOutcome.INACTIVE

        node = self.current_node()
        if not can_advance(node, self._answers.get(node["id"])):
            logger.debug("advance blocked on gated step %s", node["id"])
            return IntentOutcome.BLOCKED

        return self._advance()

    # ---- internals ----

    def _check_intent(self, step_id: str, kinds: tuple) -> Optional[IntentOutcome]:
        if self.completed:
            logger.debug("quiz completed; refusing intent on %s", step_id)
            return IntentOutcome.INACTIVE
        if step_id != self._sequencer.current_step():
            return IntentOutcome.WRONG_STEP
        if self.current_node()["type"] not in kinds:
            return IntentOutcome.WRONG_KIND
        return None

    def _recompute_bmi(self, height_raw: str) -> None:
        # only a height update with a weight already present triggers this
        weight = self._answers.get(catalog.WEIGHT_STEP)
        if not isinstance(weight, FreeText) or not weight.text:
            return
        self._bmi = compute_bmi(weight.text, height_raw)

    def _advance(self) -> IntentOutcome:
        if self._sequencer.is_last() and not self.completed:
            return self._complete()

        transition = self._sequencer.advance()
        if transition is SequencerTransition.IGNORED:
            return IntentOutcome.INACTIVE
        return IntentOutcome.ACCEPTED

    def _complete(self) -> IntentOutcome:
        # The session only turns Completed once the receiver has accepted the
        # snapshot. If it raises, the session stays on the last step and the
        # final intent can be retried.
        snapshot = self._answers.snapshot()
        self._on_complete(snapshot)

        self._answers.freeze()
        self._sequencer.advance()
        logger.info("quiz completed with %d answered steps", len(snapshot))
        return IntentOutcome.COMPLETED
