"""Pipeline stage definitions.

A pipeline is an ordered tuple of stages. Stages are plain data; the
PipelineExecutor interprets them. Message builders receive the running
PipelineContext and return the user message for that turn.
"""

from collections.abc import Callable
from dataclasses import dataclass, field

from app.database.models import CollectionRecord
from app.generation.conversation import Conversation
from app.jobs.models import (
    BulletRewritePayload,
    DocType,
    DocumentRef,
    DraftPayload,
    JobPayload,
    JobType,
    RewritePayload,
)


@dataclass(slots=True)
class PipelineContext:
    job_id: str
    job_type: JobType
    user_id: int
    values: dict[str, str] = field(default_factory=dict)
    lists: dict[str, list[str]] = field(default_factory=dict)
    conversation: Conversation | None = None
    collection: CollectionRecord | None = None
    documents: list[DocumentRef] = field(default_factory=list)

    @classmethod
    def from_payload(cls, job_id: str, payload: JobPayload) -> "PipelineContext":
        context = cls(job_id=job_id, job_type=payload.job_type, user_id=payload.user_id)
        if isinstance(payload, RewritePayload):
            context.values.update(user_resume=payload.user_resume, jd=payload.jd)
        elif isinstance(payload, DraftPayload):
            context.lists["jds"] = list(payload.jds)
        elif isinstance(payload, BulletRewritePayload):
            context.values.update(bullet=payload.bullet, jd=payload.jd)
        return context


MessageBuilder = Callable[[PipelineContext], str]


@dataclass(frozen=True)
class CollectionStage:
    """Create the document collection and its two input documents."""

    user_resume: MessageBuilder
    jd: MessageBuilder


@dataclass(frozen=True)
class TurnStage:
    """One conversation turn; the reply is stored under `output`.

    With `fresh_conversation` the turn starts a new transcript seeded with
    the system prompt, otherwise it continues the running one. With
    `doc_type` the reply is persisted into the collection.
    """

    output: str
    message: MessageBuilder
    doc_type: DocType | None = None
    fresh_conversation: bool = False


@dataclass(frozen=True)
class FanOutStage:
    """Run one independent single-turn conversation per item of `source`, concurrently.

    All turns must succeed; replies are stored in order under `output`.
    """

    source: str
    output: str
    message: Callable[[str], str]


Stage = CollectionStage | TurnStage | FanOutStage
Pipeline = tuple[Stage, ...]
