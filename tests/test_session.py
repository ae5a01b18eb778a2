"""Tests for QuizSession: intents, gating, BMI trigger and completion hand-off."""

import pytest

from carnival_quiz.engine import FreeText, IntentOutcome, MultiChoice, QuizSession, SingleChoice
from carnival_quiz.engine.catalog import STEP_DEFINITION, STEP_IDS

N_STEPS = len(STEP_IDS)


def _answer_current(quiz):
    """Give the current step a valid answer without advancing, where possible."""
    node = quiz.current_node()
    if node["type"] == "numeric":
        value = "70" if node["id"] == "current_weight" else "1.75"
        quiz.set_text(node["id"], value)
    elif node["type"] == "multi_choice":
        quiz.toggle_multi(node["id"], node["options"][0]["label"])


def _walk_to(quiz, step_id):
    while quiz.current_step() != step_id:
        node = quiz.current_node()
        if node["type"] == "single_choice":
            assert quiz.select_single(node["id"], node["options"][0]["label"]) is IntentOutcome.ACCEPTED
        else:
            _answer_current(quiz)
            assert quiz.request_advance() is IntentOutcome.ACCEPTED


@pytest.fixture
def quiz(completions):
    return QuizSession(on_complete=completions.append)


def test_fresh_session(quiz):
    view = quiz.view()

    assert view.current_step == "gender"
    assert view.cursor == 0
    assert view.step_count == N_STEPS
    assert view.progress_fraction == 1 / N_STEPS
    assert view.derived_metric is None
    assert not view.completed
    assert dict(quiz.answers.snapshot()) == {}


def test_select_single_stores_and_advances(quiz):
    outcome = quiz.select_single("gender", "MULHER")

    assert outcome is IntentOutcome.ACCEPTED
    assert quiz.answers.get("gender") == SingleChoice("MULHER")
    assert quiz.current_step() == "age"


def test_intent_for_other_step_is_refused(quiz):
    assert quiz.select_single("age", "50+ anos") is IntentOutcome.WRONG_STEP
    assert quiz.current_step() == "gender"
    assert quiz.answers.get("age") is None


def test_intent_of_wrong_kind_is_refused(quiz):
    assert quiz.toggle_multi("gender", "HOMEM") is IntentOutcome.WRONG_KIND
    assert quiz.set_text("gender", "HOMEM") is IntentOutcome.WRONG_KIND
    assert "gender" not in quiz.answers


def test_progress_fraction_follows_advances(quiz):
    for k in range(N_STEPS - 1):
        assert quiz.view().progress_fraction == (k + 1) / N_STEPS
        _answer_current(quiz)
        assert quiz.request_advance() is IntentOutcome.ACCEPTED

    assert quiz.view().progress_fraction == 1.0


def test_gated_step_blocks_until_valid(quiz):
    _walk_to(quiz, "current_weight")
    cursor = quiz.view().cursor

    assert quiz.view().is_step_gated
    assert not quiz.view().can_advance
    assert quiz.request_advance() is IntentOutcome.BLOCKED
    assert quiz.view().cursor == cursor

    quiz.set_text("current_weight", "72,5")
    assert quiz.view().can_advance
    assert quiz.request_advance() is IntentOutcome.ACCEPTED
    assert quiz.view().cursor == cursor + 1


def test_clearing_gated_field_blocks_again(quiz):
    _walk_to(quiz, "current_weight")

    quiz.set_text("current_weight", "70")
    assert quiz.view().can_advance

    quiz.set_text("current_weight", "")
    assert not quiz.view().can_advance
    assert quiz.answers.get("current_weight") == FreeText("")
    assert quiz.request_advance() is IntentOutcome.BLOCKED


def test_informational_step_advances_without_answer(quiz):
    _walk_to(quiz, "social_proof")

    assert quiz.request_advance() is IntentOutcome.ACCEPTED
    assert quiz.current_step() == "injury"
    assert "social_proof" not in quiz.answers


def test_multi_select_toggle_and_empty_advance(quiz):
    _walk_to(quiz, "focus_areas")

    quiz.toggle_multi("focus_areas", "Costas")
    quiz.toggle_multi("focus_areas", "Glúteos")
    quiz.toggle_multi("focus_areas", "Costas")
    assert quiz.answers.get("focus_areas") == MultiChoice(("Glúteos",))

    quiz.toggle_multi("focus_areas", "Glúteos")
    assert len(quiz.answers.get("focus_areas")) == 0
    assert quiz.request_advance() is IntentOutcome.ACCEPTED
    assert quiz.current_step() == "commitment"


def test_bmi_computed_when_height_set_after_weight(quiz):
    _walk_to(quiz, "current_weight")
    quiz.set_text("current_weight", "70")
    assert quiz.view().derived_metric is None

    quiz.request_advance()
    quiz.set_text("height", "1.75")
    assert quiz.view().derived_metric.value == 22.9

    quiz.set_text("height", "abc")
    assert quiz.view().derived_metric is None

    quiz.set_text("height", "175")
    assert quiz.view().derived_metric.display == "22.9"


def test_bmi_needs_weight_before_height(completions):
    quiz = QuizSession(on_complete=completions.append, step_ids=("height", "current_weight", "commitment"))

    quiz.set_text("height", "1.75")
    assert quiz.derived_metric is None

    quiz.request_advance()
    quiz.set_text("current_weight", "70")
    # a weight update alone never recomputes
    assert quiz.derived_metric is None


def test_completion_fires_once_with_all_answers(quiz, completions):
    for _ in range(N_STEPS - 1):
        _answer_current(quiz)
        quiz.request_advance()

    assert quiz.current_step() == "commitment"
    assert completions == []

    assert quiz.select_single("commitment", "yes") is IntentOutcome.COMPLETED
    assert len(completions) == 1

    snapshot = completions[0]
    assert snapshot["current_weight"] == FreeText("70")
    assert snapshot["height"] == FreeText("1.75")
    assert snapshot["focus_areas"] == MultiChoice((STEP_DEFINITION["focus_areas"]["options"][0]["label"],))
    assert snapshot["commitment"] == SingleChoice("yes")
    # skipped single-choice steps leave gaps
    assert "gender" not in snapshot


def test_completed_session_refuses_everything(quiz, completions):
    _walk_to(quiz, "commitment")
    quiz.request_advance()
    assert quiz.completed
    answered = dict(completions[0])

    assert quiz.request_advance() is IntentOutcome.INACTIVE
    assert quiz.select_single("commitment", "yes") is IntentOutcome.INACTIVE
    assert quiz.set_text("height", "2") is IntentOutcome.INACTIVE
    assert quiz.toggle_multi("focus_areas", "Costas") is IntentOutcome.INACTIVE

    assert len(completions) == 1
    assert dict(quiz.answers.snapshot()) == answered
    assert quiz.view().completed
    assert not quiz.view().can_advance


def test_snapshot_cannot_be_modified_by_receiver(quiz, completions):
    _walk_to(quiz, "commitment")
    quiz.select_single("commitment", "yes")

    with pytest.raises(TypeError):
        completions[0]["commitment"] = SingleChoice("no")


def test_sessions_are_isolated(completions):
    first = QuizSession(on_complete=completions.append)
    second = QuizSession(on_complete=completions.append)

    first.select_single("gender", "HOMEM")

    assert second.current_step() == "gender"
    assert "gender" not in second.answers


def test_unknown_step_in_sequence_rejected(completions):
    with pytest.raises(KeyError):
        QuizSession(on_complete=completions.append, step_ids=("gender", "shoe_size"))


def test_extreme_measurements_clear_bmi_without_raising(completions):
    quiz = QuizSession(on_complete=completions.append, step_ids=("current_weight", "height", "commitment"))
    quiz.set_text("current_weight", "1" + "0" * 300)
    assert quiz.request_advance() is IntentOutcome.ACCEPTED

    assert quiz.set_text("height", "0.0000000001") is IntentOutcome.ACCEPTED
    assert quiz.derived_metric is None

    assert quiz.set_text("height", "0." + "0" * 199 + "1") is IntentOutcome.ACCEPTED
    assert quiz.derived_metric is None


def test_overflowing_weight_stays_gated(quiz):
    _walk_to(quiz, "current_weight")

    assert quiz.set_text("current_weight", "9" * 400) is IntentOutcome.ACCEPTED
    assert not quiz.view().can_advance
    assert quiz.request_advance() is IntentOutcome.BLOCKED


def test_failing_receiver_leaves_final_step_retryable():
    attempts, delivered = [], []

    def flaky_receiver(snapshot):
        attempts.append(snapshot)
        if len(attempts) == 1:
            raise RuntimeError("db down")
        delivered.append(snapshot)

    quiz = QuizSession(on_complete=flaky_receiver)
    _walk_to(quiz, "commitment")

    with pytest.raises(RuntimeError):
        quiz.select_single("commitment", "yes")

    assert not quiz.completed
    assert quiz.current_step() == "commitment"
    assert delivered == []

    assert quiz.select_single("commitment", "yes") is IntentOutcome.COMPLETED
    assert quiz.completed
    assert len(delivered) == 1
    assert delivered[0]["commitment"] == SingleChoice("yes")
    assert quiz.request_advance() is IntentOutcome.INACTIVE
    assert len(delivered) == 1
