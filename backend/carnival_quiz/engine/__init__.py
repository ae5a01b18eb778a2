"""Step sequencing and answer aggregation for the quiz.

Pure, synchronous and free of I/O; the HTTP layer drives it.
"""
from carnival_quiz.engine.answers import (
    AnswerStore,
    AnswerValue,
    FreeText,
    MultiChoice,
    QuizAnswers,
    SingleChoice,
    answers_to_payload,
)
from carnival_quiz.engine.metrics import BodyMassIndex, compute_bmi, parse_decimal
from carnival_quiz.engine.sequencer import SequencerTransition, StepSequencer
from carnival_quiz.engine.session import IntentOutcome, QuizSession, QuizView

__all__ = [
    "AnswerStore",
    "AnswerValue",
    "BodyMassIndex",
    "FreeText",
    "IntentOutcome",
    "MultiChoice",
    "QuizAnswers",
    "QuizSession",
    "QuizView",
    "SequencerTransition",
    "SingleChoice",
    "StepSequencer",
    "answers_to_payload",
    "compute_bmi",
    "parse_decimal",
]
