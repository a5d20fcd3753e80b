import threading
import uuid
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass, field

from app.database.repositories.job_repository import JobRepository
from app.jobs.job_runner import JobRunner
from app.jobs.models import JobPayload, JobResult, JobType
from app.logging.logger import Log

CANCELLED_MESSAGE = "Job cancelled before it started"


def new_job_id() -> str:
    return str(uuid.uuid4())


@dataclass
class QueueEntry:
    """A job waiting in, or taken from, a JobQueue."""

    job_id: str
    payload: JobPayload
    future: "Future[JobResult | None]" = field(default_factory=Future)


class JobQueue:
    """In-process FIFO queue with a single consumer thread.

    The consumer thread is started by `submit` when the queue is idle and
    exits once the queue is empty, so at most one job of this queue runs at
    any time and jobs finish in submission order.
    """

    def __init__(
        self,
        job_type: JobType,
        runner: JobRunner,
        job_repo: JobRepository,
        id_factory: Callable[[], str] = new_job_id,
    ) -> None:
        self._job_type = job_type
        self._runner = runner
        self._job_repo = job_repo
        self._id_factory = id_factory
        self._entries: deque[QueueEntry] = deque()
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        self._busy = False

    @property
    def job_type(self) -> JobType:
        return self._job_type

    def enqueue(self, payload: JobPayload) -> str:
        """Persist a PROCESSING job record, queue the work and return the job ID."""
        return self.submit(payload).job_id

    def submit(self, payload: JobPayload) -> QueueEntry:
        """Like enqueue, but returns the entry whose future resolves when the job ends."""
        if payload.job_type is not self._job_type:
            raise ValueError(
                f"{payload.job_type.value} payload submitted to {self._job_type.value} queue"
            )
        entry = QueueEntry(job_id=self._id_factory(), payload=payload)
        self._job_repo.create(entry.job_id, self._job_type.value, payload.user_id)

        with self._lock:
            self._entries.append(entry)
            start_consumer = not self._busy
            self._busy = True
        Log.info(f"Queued {self._job_type.value} job {entry.job_id} for user {payload.user_id}")

        if start_consumer:
            threading.Thread(
                target=self._consume,
                name=f"{self._job_type.value.lower()}-queue",
                daemon=True,
            ).start()
        return entry

    def cancel(self, job_id: str) -> bool:
        """Cancel a job that has not started yet. Running jobs are not interrupted."""
        with self._lock:
            for entry in self._entries:
                if entry.job_id == job_id:
                    return entry.future.cancel()
        return False

    def pending_count(self) -> int:
        with self._lock:
            return len(self._entries)

    def is_busy(self) -> bool:
        with self._lock:
            return self._busy

    def join(self, timeout: float | None = None) -> bool:
        """Block until the consumer has drained the queue. Returns False on timeout."""
        with self._idle:
            return self._idle.wait_for(lambda: not self._busy, timeout)

    def _consume(self) -> None:
        Log.debug(f"{self._job_type.value} queue consumer started")
        while True:
            with self._lock:
                if not self._entries:
                    self._busy = False
                    self._idle.notify_all()
                    Log.debug(f"{self._job_type.value} queue drained, consumer exiting")
                    return
                entry = self._entries.popleft()
            self._process(entry)

    def _process(self, entry: QueueEntry) -> None:
        with Log.job_context(entry.job_id):
            if not entry.future.set_running_or_notify_cancel():
                self._runner.fail(entry.job_id, CANCELLED_MESSAGE)
                return
            try:
                result = self._runner.run(entry.job_id, entry.payload)
            except Exception as exc:
                Log.exception(f"Unexpected error while processing job {entry.job_id}: {exc}")
                entry.future.set_exception(exc)
            else:
                entry.future.set_result(result)
