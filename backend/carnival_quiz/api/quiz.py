# HTTP routes for quiz sessions: request/response shapes around the engine.
# Every rule about steps, answers and gating lives in carnival_quiz.engine;
# this module only translates intents in and projections out.
import base64
import logging
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from carnival_quiz.core import config
from carnival_quiz.db.session import get_db, session_scope
from carnival_quiz.engine import IntentOutcome, QuizSession, QuizView, answers_to_payload
from carnival_quiz.engine.catalog import STEP_DEFINITION, STEP_IDS
from carnival_quiz.services.storage import InMemorySessionStore, SessionNotFound, SessionRecord
from carnival_quiz.services.submissions import create_submission, submission_for_session

logger = logging.getLogger(__name__)

router = APIRouter()

# One store instance per process
STORE = InMemorySessionStore()

# refused intents -> (status, code, message)
_REFUSALS = {
    IntentOutcome.INACTIVE: (409, "STATUS_INACTIVE", "Quiz is already completed."),
    IntentOutcome.WRONG_STEP: (400, "FLOW_DIVERGENCE", "Intent does not target the current step."),
    IntentOutcome.WRONG_KIND: (400, "INVALID_INTENT", "Intent does not match the current step type."),
    IntentOutcome.BLOCKED: (400, "ADVANCE_BLOCKED", "Current step needs a valid value first."),
}


# ---------- helpers ----------

def build_meta() -> dict:  # server-authored metadata with an ISO-8601 UTC timestamp
    now_utc = datetime.now(timezone.utc)
    ts = now_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return {"version": config.QUIZ_VERSION, "server_time": ts}


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={"error": {"code": code, "message": message}, "meta": build_meta()},
    )


def show_step(node: dict) -> dict:
    """Format a catalog node into the client-facing step payload."""
    payload = {
        "id": node["id"],
        "text": node["text"],
        "type": node["type"],
    }
    # Only choice steps carry options
    if node.get("options"):
        payload["options"] = [dict(option) for option in node["options"]]
    if "hints" in node:
        payload["hints"] = node["hints"]
    if "constraints" in node:
        payload["constraints"] = node["constraints"]
    return payload


def show_view(view: QuizView) -> dict:
    bmi = view.derived_metric
    return {
        "current_step": view.current_step,
        "cursor": view.cursor,
        "step_count": view.step_count,
        "progress_fraction": view.progress_fraction,
        "is_step_gated": view.is_step_gated,
        "can_advance": view.can_advance,
        "derived_metric": None if bmi is None else {"value": bmi.value, "display": bmi.display},
        "completed": view.completed,
    }


def _new_session_id() -> str:
    """URL-safe short id from 16 random bytes (~22 chars)."""
    return base64.urlsafe_b64encode(uuid4().bytes).rstrip(b"=").decode("ascii")


def _record_completion(session_id: str):
    """Completion receiver: store the finished answer set as a submission."""
    def receive(answers) -> None:
        with session_scope() as db:
            submission = create_submission(
                db,
                session_id=session_id,
                answers=answers_to_payload(answers),
                quiz_version=config.QUIZ_VERSION,
            )
            submission_id = str(submission.id)

        record = STORE.get(session_id)
        if record is not None:
            record.submission_id = submission_id

    return receive


def _unknown_session(session_id: str) -> HTTPException:
    return _error(404, "UNKNOWN_SESSION", f"Session '{session_id}' not found.")


def _require_session(session_id: str) -> SessionRecord:
    record = STORE.get(session_id)
    if record is None:
        raise _unknown_session(session_id)
    return record


def _session_payload(record: SessionRecord) -> dict:
    quiz = record.quiz
    if quiz is None:    # completed and released: only the submission id is left
        return {
            "session_id": record.session_id,
            "done": True,
            "step": None,
            "view": None,
            "submission_id": record.submission_id,
            "version": record.version,
            "meta": build_meta(),
        }
    return {
        "session_id": record.session_id,
        "done": quiz.completed,
        "step": None if quiz.completed else show_step(quiz.current_node()),
        "view": show_view(quiz.view()),
        "submission_id": record.submission_id,
        "version": record.version,
        "meta": build_meta(),
    }


def _apply(session_id: str, intent: Callable[[QuizSession], IntentOutcome]) -> dict:
    """Run one intent against a session and return the updated projection."""
    try:
        with STORE.checkout(session_id) as record:
            if record.quiz is None:
                raise _error(*_REFUSALS[IntentOutcome.INACTIVE])

            try:
                outcome = intent(record.quiz)
            except SQLAlchemyError:
                # the session stays on its last step, so the final intent can be resent
                logger.exception("recording submission for session %s failed", session_id)
                raise _error(503, "SUBMISSION_FAILED", "Could not record the completed quiz; retry the last step.")

            if not outcome.accepted:
                status_code, code, message = _REFUSALS[outcome]
                raise _error(status_code, code, message)

            payload = _session_payload(record)
            if outcome is IntentOutcome.COMPLETED:
                record.release()
            return payload
    except SessionNotFound:
        raise _unknown_session(session_id) from None


# ---------- request models ----------

class SessionRequest(BaseModel):
    session_id: str


class SelectRequest(BaseModel):
    session_id: str
    step_id: str
    label: str


class ToggleRequest(BaseModel):
    session_id: str
    step_id: str
    token: str


class TextRequest(BaseModel):
    session_id: str
    step_id: str
    # raw text as typed; blank is allowed and simply keeps the step gated
    text: Optional[str] = ""


# ---------- endpoints ----------

@router.get("/quiz/steps")
def list_steps():
    return {
        "steps": [show_step(STEP_DEFINITION[step_id]) for step_id in STEP_IDS],
        "version": config.QUIZ_VERSION,
        "meta": build_meta(),
    }


@router.post("/quiz/begin")
def begin_session():
    """Create a fresh session at the first step and return it."""
    swept = STORE.sweep_idle(config.SESSION_IDLE_TTL_SECONDS)
    if swept:
        logger.info("dropped %d idle quiz sessions", swept)

    session_id = _new_session_id()
    record = SessionRecord(
        session_id=session_id,
        version=config.QUIZ_VERSION,
        quiz=QuizSession(on_complete=_record_completion(session_id)),
    )
    STORE.create(record)
    logger.info("quiz session %s begun", session_id)

    return _session_payload(record)


@router.post("/quiz/resume")
def resume_session(req: SessionRequest):
    """Reattach to a session: current step if active, done (+ submission id) if completed."""
    record = _require_session(req.session_id)
    return _session_payload(record)


@router.post("/quiz/select")
def select_option(req: SelectRequest):
    return _apply(req.session_id, lambda quiz: quiz.select_single(req.step_id, req.label))


@router.post("/quiz/toggle")
def toggle_option(req: ToggleRequest):
    return _apply(req.session_id, lambda quiz: quiz.toggle_multi(req.step_id, req.token))


@router.post("/quiz/text")
def set_text(req: TextRequest):
    return _apply(req.session_id, lambda quiz: quiz.set_text(req.step_id, req.text or ""))


@router.post("/quiz/advance")
def advance(req: SessionRequest):
    return _apply(req.session_id, lambda quiz: quiz.request_advance())


@router.get("/quiz/sessions/{session_id}/answers")
def show_answers(session_id: str, db: Session = Depends(get_db)):
    record = _require_session(session_id)
    if record.quiz is not None:
        answers = answers_to_payload(record.quiz.answers.snapshot())
    else:
        # engine state is gone after completion; the recorded submission is the source
        submission = submission_for_session(db, session_id)
        answers = submission.answers if submission else {}

    return {
        "session_id": record.session_id,
        "done": record.completed,
        "answers": answers,
        "meta": build_meta(),
    }


@router.delete("/quiz/sessions/{session_id}")
def abandon_session(session_id: str):
    if not STORE.discard(session_id):
        raise _unknown_session(session_id)
    logger.info("quiz session %s abandoned", session_id)
    return {"session_id": session_id, "discarded": True, "meta": build_meta()}
