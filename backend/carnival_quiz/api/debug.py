from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from carnival_quiz.db.models import SubmissionEventLog
from carnival_quiz.db.session import get_db
from carnival_quiz.services.submissions import latest_submission

router = APIRouter(prefix="/debug", tags=["debug"])


@router.get("/latest")
def latest(db: Session = Depends(get_db)):
    submission = latest_submission(db)
    if not submission:
        return {"submission": None, "events": []}

    events = (
        db.query(SubmissionEventLog)
        .filter(SubmissionEventLog.submission_id == submission.id)
        .order_by(SubmissionEventLog.occurred_at.asc())
        .all()
    )

    return {
        "submission": {
            "id": str(submission.id),
            "session_id": submission.session_id,
            "quiz_version": submission.quiz_version,
            "received_at": submission.received_at,
            "status": submission.status.value,
            "answers": submission.answers,
        },
        "events": [
            {
                "id": str(e.id),
                "event_type": e.event_type.value,
                "occurred_at": e.occurred_at,
                "actor_type": e.actor_type.value,
                "actor_id": e.actor_id,
                "reason": e.reason,
                "payload": e.payload,
            }
            for e in events
        ],
    }
