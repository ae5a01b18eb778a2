import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from carnival_quiz.db.models import (
    ActorType,
    EventType,
    Submission,
    SubmissionEventLog,
    SubmissionStatus,
)

logger = logging.getLogger(__name__)

# Every completed quiz lands here: one Submission row plus its append-only event log.


def utc_now():
    return datetime.now(timezone.utc)


def _check_payload(payload: Dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise ValueError("payload must be a dict")
    if any(not isinstance(k, str) for k in payload.keys()):
        raise ValueError("payload keys must be strings")
    try:
        json.dumps(payload)
    except TypeError as e:
        raise ValueError(f"payload is not JSON-serializable: {e}") from e


def build_submission_created_payload(session_id: str, quiz_version: str, answered_steps: int) -> dict:
    return {
        "schema_version": "submission.created.v1",
        "session_id": session_id,
        "quiz_version": quiz_version,
        "answered_steps": answered_steps,
    }


def append_event(
    db: Session,
    submission_id: uuid.UUID,
    event_type: EventType,
    payload: Optional[Dict[str, Any]] = None,
    actor_type: ActorType = ActorType.SYSTEM,
    actor_id: Optional[str] = None,
    reason: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
) -> SubmissionEventLog:
    """Write one immutable event row for ``submission_id`` (flushed, not committed)."""
    if payload is None:
        payload = {}
    _check_payload(payload)

    event = SubmissionEventLog(
        submission_id=submission_id,
        event_type=event_type,
        occurred_at=occurred_at or utc_now(),
        actor_type=actor_type,
        actor_id=actor_id,
        reason=reason,
        payload=payload,
    )
    db.add(event)
    db.flush()
    return event


def create_submission(
    db: Session,
    session_id: str,
    answers: Dict[str, Any],
    quiz_version: str,
    actor_type: ActorType = ActorType.API,
    actor_id: Optional[str] = None,
    received_at: Optional[datetime] = None,
) -> Submission:
    """Record a finished answer set together with the events that explain it."""
    _check_payload(answers)

    submission = Submission(
        id=uuid.uuid4(),
        session_id=session_id,
        quiz_version=quiz_version,
        received_at=received_at or utc_now(),
        status=SubmissionStatus.RECEIVED,
        answers=answers,
    )
    db.add(submission)
    db.flush()  # ensure submission.id is usable by the events

    append_event(
        db=db,
        submission_id=submission.id,
        event_type=EventType.SUBMISSION_CREATED,
        payload=build_submission_created_payload(session_id, quiz_version, len(answers)),
        actor_type=actor_type,
        actor_id=actor_id,
    )
    append_event(
        db=db,
        submission_id=submission.id,
        event_type=EventType.ANSWERS_RECEIVED,
        payload={"schema_version": "answers.received.v1", "raw": answers},
        actor_type=actor_type,
        actor_id=actor_id,
    )

    logger.info("submission %s recorded for session %s", submission.id, session_id)
    return submission


def latest_submission(db: Session) -> Optional[Submission]:
    return db.query(Submission).order_by(Submission.received_at.desc()).first()


def submission_for_session(db: Session, session_id: str) -> Optional[Submission]:
    return db.query(Submission).filter(Submission.session_id == session_id).first()
