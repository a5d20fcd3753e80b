import itertools
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from app.credits.exceptions import UserNotFoundError
from app.credits.ledger import CreditLedger
from app.database.models import CollectionRecord, DocumentRecord, JobRecord, UserRecord
from app.database.repositories.job_repository import INTERRUPTED_JOB_MESSAGE
from app.generation.client_base import BaseChatClient, ChatMessage
from app.generation.conversation import ConversationDriver
from app.generation.exceptions import UpstreamError
from app.generation.prompt_loader import PromptSet
from app.jobs.exceptions import JobNotFoundError
from app.jobs.executor import PipelineExecutor
from app.jobs.job_runner import JobRunner
from app.jobs.models import JobStatus, JobType
from app.jobs.pipelines import build_pipelines


class InMemoryJobRepository:
    """JobRepository stand-in with the same terminal-status guard."""

    def __init__(self) -> None:
        self.jobs: dict[str, JobRecord] = {}
        self.transitions: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def create(self, job_id: str, job_type: str, user_id: int | None = None) -> JobRecord:
        with self._lock:
            if job_id in self.jobs:
                raise ValueError(f"duplicate job id {job_id}")
            record = JobRecord(
                job_id=job_id,
                job_type=job_type,
                user_id=user_id,
                status=JobStatus.PROCESSING.value,
                created_at=datetime.now(timezone.utc),
            )
            self.jobs[job_id] = record
            return record

    def find_by_id(self, job_id: str) -> JobRecord | None:
        return self.jobs.get(job_id)

    def get(self, job_id: str) -> JobRecord:
        job = self.find_by_id(job_id)
        if job is None:
            raise JobNotFoundError(f"Job {job_id} not found")
        return job

    def set_status(
        self,
        job_id: str,
        status: JobStatus,
        *,
        completed_on: datetime | None = None,
        error_message: str | None = None,
        result: dict[str, Any] | None = None,
    ) -> bool:
        with self._lock:
            job = self.jobs.get(job_id)
            if job is None or job.status != JobStatus.PROCESSING.value:
                return False
            job.status = status.value
            job.completed_on = completed_on
            job.error_message = error_message
            job.result = result
            self.transitions.append((job_id, status.value))
            return True

    def mark_completed(self, job_id: str, result: dict[str, Any]) -> bool:
        return self.set_status(
            job_id, JobStatus.COMPLETED, completed_on=datetime.now(timezone.utc), result=result
        )

    def mark_failed(self, job_id: str, error: str) -> bool:
        return self.set_status(
            job_id, JobStatus.FAILED, completed_on=datetime.now(timezone.utc), error_message=error
        )

    def fail_interrupted_jobs(self) -> int:
        processing = [
            job.job_id for job in self.jobs.values() if job.status == JobStatus.PROCESSING.value
        ]
        return sum(self.mark_failed(job_id, INTERRUPTED_JOB_MESSAGE) for job_id in processing)


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.users: dict[int, UserRecord] = {}
        self.activity: list[tuple[int, str, int | None]] = []
        self._lock = threading.Lock()

    def add_user(self, user_id: int, balance: int, is_admin: bool = False) -> UserRecord:
        user = UserRecord(
            id=user_id,
            email=f"user{user_id}@example.com",
            credit_balance=balance,
            is_admin=is_admin,
        )
        self.users[user_id] = user
        return user

    def find_by_id(self, user_id: int) -> UserRecord | None:
        return self.users.get(user_id)

    def get_balance(self, user_id: int) -> int:
        user = self.users.get(user_id)
        if user is None:
            raise UserNotFoundError(f"User {user_id} not found")
        return user.credit_balance

    def increment_credits(
        self, user_id: int, amount: int, action: str, actor_id: int | None = None
    ) -> int:
        return self._apply(user_id, amount, action, actor_id)

    def decrement_credits(
        self, user_id: int, amount: int, action: str, actor_id: int | None = None
    ) -> int:
        return self._apply(user_id, -amount, action, actor_id)

    def _apply(self, user_id: int, delta: int, action: str, actor_id: int | None) -> int:
        with self._lock:
            user = self.users.get(user_id)
            if user is None:
                raise UserNotFoundError(f"User {user_id} not found")
            user.credit_balance += delta
            self.activity.append((user_id, action, actor_id))
            return user.credit_balance


class InMemoryDocumentRepository:
    def __init__(self) -> None:
        self.collections: list[CollectionRecord] = []
        self.documents: list[DocumentRecord] = []
        self._ids = itertools.count(1)
        self._lock = threading.Lock()
        self._last_created_at = datetime.min.replace(tzinfo=timezone.utc)

    def _now(self) -> datetime:
        now = datetime.now(timezone.utc)
        if now <= self._last_created_at:
            now = self._last_created_at + timedelta(microseconds=1)
        self._last_created_at = now
        return now

    def create_collection(
        self, collection_name: str, user_resume: str, jd: str
    ) -> CollectionRecord:
        with self._lock:
            collection = CollectionRecord(
                id=next(self._ids),
                collection_name=collection_name,
                user_resume=user_resume,
                jd=jd,
                created_at=self._now(),
            )
            self.collections.append(collection)
            return collection

    def create_document(
        self, user_id: int, doc_type: str, content: str, collection_id: int
    ) -> DocumentRecord:
        with self._lock:
            document = DocumentRecord(
                id=next(self._ids),
                user_id=user_id,
                doc_type=doc_type,
                content=content,
                collection_id=collection_id,
                created_at=self._now(),
            )
            self.documents.append(document)
            for collection in self.collections:
                if collection.id == collection_id:
                    collection.docs.append(document)
            return document

    def find_collections_for_user(self, user_id: int) -> list[CollectionRecord]:
        owned = {d.collection_id for d in self.documents if d.user_id == user_id}
        return [c for c in reversed(self.collections) if c.id in owned]


class ScriptedChatClient(BaseChatClient):
    """Records every transcript and replies with fenced markdown.

    `fail_when` receives the last user message; returning True raises UpstreamError.
    `on_call` runs before replying, e.g. to block or to observe concurrency.
    """

    def __init__(
        self,
        fail_when: Callable[[str], bool] | None = None,
        on_call: Callable[[list[ChatMessage]], None] | None = None,
    ) -> None:
        self.calls: list[list[ChatMessage]] = []
        self.fail_when = fail_when
        self.on_call = on_call
        self._lock = threading.Lock()

    def create_chat_completion(self, *, model: str, messages: list[ChatMessage]) -> str:
        with self._lock:
            self.calls.append([dict(m) for m in messages])
            number = len(self.calls)
        if self.on_call is not None:
            self.on_call(messages)
        last = messages[-1]["content"]
        if self.fail_when is not None and self.fail_when(last):
            raise UpstreamError("OpenAI API Error: Response is missing choices.")
        return f"```markdown\nreply {number}\n```"


@pytest.fixture
def prompts() -> PromptSet:
    return PromptSet(
        system_fragments=("SYSTEM.", "GUARD1.", "GUARD2.", "GUARD3."),
        analysis="ANALYZE:",
        compare="COMPARE:",
        cover_letter="COVER LETTER",
        tokenize=":TOKENIZE",
        draft="DRAFT",
        bullet="BULLET:",
    )


@pytest.fixture
def job_repo() -> InMemoryJobRepository:
    return InMemoryJobRepository()


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def doc_repo() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture
def chat_client() -> ScriptedChatClient:
    return ScriptedChatClient()


@pytest.fixture
def ledger(user_repo: InMemoryUserRepository) -> CreditLedger:
    return CreditLedger(user_repo)  # type: ignore[arg-type]


@pytest.fixture
def costs() -> dict[JobType, int]:
    return {JobType.REWRITE: 3, JobType.DRAFT: 5, JobType.BULLET_REWRITE: 1}


@pytest.fixture
def driver(chat_client: ScriptedChatClient, prompts: PromptSet) -> ConversationDriver:
    return ConversationDriver(
        client=chat_client, model="test-model", system_prompt=prompts.system_prompt
    )


@pytest.fixture
def executor(driver: ConversationDriver, doc_repo: InMemoryDocumentRepository) -> PipelineExecutor:
    return PipelineExecutor(driver, doc_repo, fan_out_max_workers=3)  # type: ignore[arg-type]


@pytest.fixture
def runner(
    prompts: PromptSet,
    executor: PipelineExecutor,
    ledger: CreditLedger,
    job_repo: InMemoryJobRepository,
    costs: dict[JobType, int],
) -> JobRunner:
    return JobRunner(
        pipelines=build_pipelines(prompts),
        executor=executor,
        ledger=ledger,
        job_repo=job_repo,  # type: ignore[arg-type]
        costs=costs,
    )
