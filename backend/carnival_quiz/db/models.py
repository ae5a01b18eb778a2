import enum
import uuid

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from carnival_quiz.db.base import Base


class SubmissionStatus(str, enum.Enum):  # current status snapshot
    RECEIVED = "received"


class EventType(str, enum.Enum):  # what happened
    SUBMISSION_CREATED = "submission.created"
    ANSWERS_RECEIVED = "answers.received"


class ActorType(str, enum.Enum):  # who caused it
    SYSTEM = "system"
    API = "api"


class Submission(Base):  # the "current state" record of one completed quiz
    __tablename__ = "submissions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # quiz session that produced this answer set; one submission per session
    session_id = Column(String, nullable=False, unique=True, index=True)
    quiz_version = Column(String, nullable=False)

    received_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    status = Column(Enum(SubmissionStatus), nullable=False, default=SubmissionStatus.RECEIVED)

    # plain JSON answers: str for single choice / typed text, list for multi choice
    answers = Column(JSON, nullable=False, default=dict)

    events = relationship(
        "SubmissionEventLog",
        back_populates="submission",
        order_by="SubmissionEventLog.occurred_at.asc()",
        cascade="all, delete-orphan",
    )


class SubmissionEventLog(Base):  # the "history" record, append-only
    __tablename__ = "submission_event_log"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    submission_id = Column(Uuid(as_uuid=True), ForeignKey("submissions.id"), nullable=False, index=True)

    event_type = Column(Enum(EventType), nullable=False)
    occurred_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    actor_type = Column(Enum(ActorType), nullable=False, default=ActorType.SYSTEM)
    actor_id = Column(String, nullable=True)

    # JSON payload should always include what changed and where it came from
    payload = Column(JSON, nullable=False, default=dict)
    reason = Column(Text, nullable=True)

    submission = relationship("Submission", back_populates="events")
