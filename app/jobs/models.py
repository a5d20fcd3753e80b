from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from app.jobs.exceptions import MissingInputError

MAX_JOB_DESCRIPTIONS = 3


class JobType(str, Enum):
    REWRITE = "REWRITE"
    DRAFT = "DRAFT"
    BULLET_REWRITE = "BULLET_REWRITE"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class JobStatus(str, Enum):
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class DocType(str, Enum):
    USER_RESUME = "USER_RESUME"
    JD = "JD"
    ANALYSIS = "ANALYSIS"
    REWRITE_RESUME = "REWRITE_RESUME"
    COVER_LETTER = "COVER_LETTER"
    BULLET_REWRITE = "BULLET_REWRITE"


def _present(value: str | None) -> bool:
    return bool(value and value.strip())


@dataclass(frozen=True)
class RewritePayload:
    """Resume + job description pair for the analyze/rewrite/cover-letter chain."""

    job_type: ClassVar[JobType] = JobType.REWRITE

    user_id: int
    user_resume: str
    jd: str

    def validate(self) -> None:
        if not _present(self.user_resume) or not _present(self.jd):
            raise MissingInputError("Resume and JD required.")


@dataclass(frozen=True)
class DraftPayload:
    """Up to three job descriptions a resume is drafted from."""

    job_type: ClassVar[JobType] = JobType.DRAFT

    user_id: int
    jds: tuple[str, ...]

    def validate(self) -> None:
        if not self.jds or not all(_present(jd) for jd in self.jds):
            raise MissingInputError("Job descriptions are required.")
        if len(self.jds) > MAX_JOB_DESCRIPTIONS:
            raise MissingInputError(
                f"At most {MAX_JOB_DESCRIPTIONS} job descriptions are accepted."
            )


@dataclass(frozen=True)
class BulletRewritePayload:
    """A single resume bullet to tailor against a job description."""

    job_type: ClassVar[JobType] = JobType.BULLET_REWRITE

    user_id: int
    bullet: str
    jd: str

    def validate(self) -> None:
        if not _present(self.bullet) or not _present(self.jd):
            raise MissingInputError("Bullet and JD required.")


JobPayload = RewritePayload | DraftPayload | BulletRewritePayload


@dataclass(frozen=True)
class DocumentRef:
    id: int
    doc_type: DocType


@dataclass
class JobResult:
    """Client-visible result of a completed job."""

    job_id: str
    collection_id: int
    docs: list[DocumentRef] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "collectionId": self.collection_id,
            "jobId": self.job_id,
            "docs": [{"id": d.id, "docType": d.doc_type.value} for d in self.docs],
        }
