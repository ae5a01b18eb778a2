"""Tests for recording completed answer sets."""

import pytest

from carnival_quiz.db.models import EventType, Submission, SubmissionEventLog, SubmissionStatus
from carnival_quiz.services.submissions import append_event, create_submission


def test_create_submission_writes_row_and_events(db):
    answers = {"gender": "MULHER", "height": "1,65", "focus_areas": ["Glúteos"]}

    submission = create_submission(db, session_id="sess-create", answers=answers, quiz_version="test")
    db.flush()

    stored = db.query(Submission).filter(Submission.session_id == "sess-create").one()
    assert stored.id == submission.id
    assert stored.status is SubmissionStatus.RECEIVED
    assert stored.answers == answers

    events = (
        db.query(SubmissionEventLog)
        .filter(SubmissionEventLog.submission_id == submission.id)
        .all()
    )
    kinds = sorted(e.event_type.value for e in events)
    assert kinds == ["answers.received", "submission.created"]

    created = next(e for e in events if e.event_type is EventType.SUBMISSION_CREATED)
    assert created.payload["answered_steps"] == 3
    assert created.payload["session_id"] == "sess-create"


def test_non_serializable_answers_rejected(db):
    with pytest.raises(ValueError):
        create_submission(db, session_id="sess-bad", answers={"gender": object()}, quiz_version="test")


def test_append_event_rejects_non_string_keys(db):
    submission = create_submission(db, session_id="sess-keys", answers={}, quiz_version="test")

    with pytest.raises(ValueError):
        append_event(db, submission.id, EventType.ANSWERS_RECEIVED, payload={1: "x"})
