# Advance gating: decides from the stored answer alone whether "next" is allowed.
from __future__ import annotations

from typing import Optional

from carnival_quiz.engine.answers import AnswerValue, FreeText
from carnival_quiz.engine.metrics import parse_decimal


def is_gated(step: dict) -> bool:
    """Only entry steps with a required field hold the user back."""
    required = step.get("constraints", {}).get("required", False)
    return step["type"] == "numeric" or (step["type"] == "free_text" and required)


def can_advance(step: dict, answer: Optional[AnswerValue]) -> bool:
    if not is_gated(step):
        return True

    if not isinstance(answer, FreeText) or not answer.text.strip():
        return False

    if step["type"] == "numeric":
        value = parse_decimal(answer.text)
        return value is not None and value > 0

    return True
