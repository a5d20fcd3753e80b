from app.database.repositories.job_repository import JobRepository
from app.jobs.job_runner import JobRunner
from app.jobs.models import JobPayload, JobType
from app.jobs.queue import JobQueue


class JobScheduler:
    """Owns one independent JobQueue per job type."""

    def __init__(self, queues: dict[JobType, JobQueue]) -> None:
        self._queues = queues

    @classmethod
    def create(cls, runner: JobRunner, job_repo: JobRepository) -> "JobScheduler":
        return cls({job_type: JobQueue(job_type, runner, job_repo) for job_type in JobType})

    def queue_for(self, job_type: JobType) -> JobQueue:
        return self._queues[job_type]

    def enqueue(self, payload: JobPayload) -> str:
        return self.queue_for(payload.job_type).enqueue(payload)

    def cancel(self, job_id: str) -> bool:
        return any(queue.cancel(job_id) for queue in self._queues.values())

    def join(self, timeout: float | None = None) -> bool:
        """Wait for every queue to drain; `timeout` applies per queue."""
        return all([queue.join(timeout) for queue in self._queues.values()])
