from dataclasses import dataclass
from typing import Any

from app.credits.ledger import CreditLedger
from app.database.repositories.job_repository import JobRepository
from app.jobs.exceptions import JobNotFoundError
from app.jobs.models import JobPayload, JobStatus
from app.jobs.scheduler import JobScheduler
from app.logging.logger import Log


@dataclass(frozen=True)
class JobStatusView:
    """What a polling client sees for one job."""

    status: JobStatus
    result: dict[str, Any] | None = None
    error: str | None = None


class JobService:
    """Submission and status polling on top of the scheduler and job store."""

    def __init__(
        self,
        scheduler: JobScheduler,
        ledger: CreditLedger,
        job_repo: JobRepository,
    ) -> None:
        self._scheduler = scheduler
        self._ledger = ledger
        self._job_repo = job_repo

    def submit(self, payload: JobPayload) -> str:
        """Validate synchronously, then enqueue. Returns the job ID.

        Raises:
            MissingInputError: if required inputs are absent.
            InsufficientCreditsError: if the user's balance is not above zero.
            UserNotFoundError: if the user does not exist.
        """
        payload.validate()
        self._ledger.ensure_positive_balance(payload.user_id)
        job_id = self._scheduler.enqueue(payload)
        Log.info(f"Accepted {payload.job_type.value} job {job_id}")
        return job_id

    def get_status(self, job_id: str, user_id: int | None = None) -> JobStatusView:
        """Translate the stored job record into a client view.

        Jobs owned by a different user are reported as not found.
        """
        job = self._job_repo.get(job_id)
        if user_id is not None and job.user_id is not None and job.user_id != user_id:
            raise JobNotFoundError(f"Job {job_id} not found")

        status = JobStatus(job.status)
        if status is JobStatus.COMPLETED:
            return JobStatusView(status=status, result=job.result)
        if status is JobStatus.FAILED:
            return JobStatusView(
                status=status,
                error=job.error_message or "An error occurred while processing the request",
            )
        return JobStatusView(status=status)
