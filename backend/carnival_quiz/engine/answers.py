"""Answer values and the per-session answer store.

An answer is one of three tagged variants. "Not answered yet" is not a
variant: it is the absence of the step id from the store.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Literal, Mapping, Optional, Tuple, TypedDict, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SingleChoice:
    token: str
    kind: Literal["single_choice"] = "single_choice"

    def to_payload(self) -> str:
        return self.token


@dataclass(frozen=True)
class MultiChoice:
    # stored in selection order, but only membership is meaningful
    tokens: Tuple[str, ...] = ()
    kind: Literal["multi_choice"] = "multi_choice"

    def __contains__(self, token: str) -> bool:
        return token in self.tokens

    def __len__(self) -> int:
        return len(self.tokens)

    def toggled(self, token: str) -> "MultiChoice":
        """Return a new value with ``token`` removed if present, appended otherwise."""
        if token in self.tokens:
            return MultiChoice(tuple(t for t in self.tokens if t != token))
        return MultiChoice(self.tokens + (token,))

    def to_payload(self) -> List[str]:
        return list(self.tokens)


@dataclass(frozen=True)
class FreeText:
    text: str
    kind: Literal["free_text"] = "free_text"

    def to_payload(self) -> str:
        return self.text


AnswerValue = Union[SingleChoice, MultiChoice, FreeText]


class QuizAnswers(TypedDict, total=False):
    """Shape of the completion snapshot: one optional entry per step id."""
    gender: SingleChoice
    age: SingleChoice
    goal: SingleChoice
    obstacle: SingleChoice
    experience: SingleChoice
    motivation: SingleChoice
    time: SingleChoice
    environment: SingleChoice
    frequency: SingleChoice
    weight_goal: SingleChoice
    current_weight: FreeText
    height: FreeText
    social_proof: AnswerValue  # informational step, normally absent
    injury: SingleChoice
    visualization: SingleChoice
    format: SingleChoice
    focus_areas: MultiChoice
    commitment: SingleChoice


class AnswerStore:
    """Owns the partial answers of a single quiz session."""

    def __init__(self) -> None:
        self._answers: Dict[str, AnswerValue] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        self._frozen = True

    def set(self, step_id: str, value: AnswerValue) -> bool:
        if self._frozen:
            logger.debug("answer store frozen; refusing set on %s", step_id)
            return False
        self._answers[step_id] = value
        return True

    def toggle(self, step_id: str, token: str) -> bool:
        if self._frozen:
            logger.debug("answer store frozen; refusing toggle on %s", step_id)
            return False
        current = self._answers.get(step_id)
        if not isinstance(current, MultiChoice):
            current = MultiChoice()
        # always a fresh value, so holders of the previous one see no change
        self._answers[step_id] = current.toggled(token)
        return True

    def get(self, step_id: str) -> Optional[AnswerValue]:
        return self._answers.get(step_id)

    def __contains__(self, step_id: str) -> bool:
        return step_id in self._answers

    def snapshot(self) -> Mapping[str, AnswerValue]:
        """Read-only copy of the answers; later mutations do not show through."""
        return MappingProxyType(dict(self._answers))


def answers_to_payload(answers: Mapping[str, AnswerValue]) -> dict:
    """Plain JSON-friendly form: str for single/text answers, list for multi."""
    return {step_id: value.to_payload() for step_id, value in answers.items()}
