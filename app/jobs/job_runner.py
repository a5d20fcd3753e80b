from app.config.settings import Settings
from app.credits.ledger import CreditLedger
from app.database.repositories.job_repository import JobRepository
from app.jobs.executor import PipelineExecutor
from app.jobs.models import JobPayload, JobResult, JobType
from app.jobs.pipeline import Pipeline, PipelineContext
from app.logging.logger import Log


def credit_costs(settings: Settings) -> dict[JobType, int]:
    return {
        JobType.REWRITE: settings.rewrite_credit_cost,
        JobType.DRAFT: settings.draft_credit_cost,
        JobType.BULLET_REWRITE: settings.bullet_rewrite_credit_cost,
    }


class JobRunner:
    """Run one job to a terminal status.

    Credits are checked before any generation and debited only after the
    whole pipeline succeeded. Every failure becomes a FAILED job record.
    """

    def __init__(
        self,
        pipelines: dict[JobType, Pipeline],
        executor: PipelineExecutor,
        ledger: CreditLedger,
        job_repo: JobRepository,
        costs: dict[JobType, int],
    ) -> None:
        self._pipelines = pipelines
        self._executor = executor
        self._ledger = ledger
        self._job_repo = job_repo
        self._costs = costs

    def run(self, job_id: str, payload: JobPayload) -> JobResult | None:
        """Execute a single job with error handling. Returns the result on success."""
        Log.info(f"Running {payload.job_type.value} job {job_id} for user {payload.user_id}")
        try:
            result = self._process(job_id, payload)
        except Exception as exc:
            self.fail(job_id, str(exc) or type(exc).__name__)
            return None

        try:
            self._job_repo.mark_completed(job_id, result.to_dict())
        except Exception as exc:
            Log.exception(f"Job {job_id} completed but its status could not be saved: {exc}")
        else:
            Log.info(f"Job {job_id} completed successfully")
        return result

    def fail(self, job_id: str, error: str) -> None:
        """Record a terminal FAILED status; store errors are logged only."""
        Log.error(f"Job {job_id} failed: {error}")
        try:
            self._job_repo.mark_failed(job_id, error)
        except Exception as exc:
            Log.exception(f"Job {job_id} failure could not be saved: {exc}")

    def _process(self, job_id: str, payload: JobPayload) -> JobResult:
        self._ledger.ensure_positive_balance(payload.user_id)
        payload.validate()

        context = PipelineContext.from_payload(job_id, payload)
        self._executor.execute(self._pipelines[payload.job_type], context)
        if context.collection is None:
            raise RuntimeError(f"Pipeline for {payload.job_type.value} created no collection")

        cost = self._costs[payload.job_type]
        self._ledger.debit(
            payload.user_id, cost, f"Used {cost} credits for {payload.job_type.label} job {job_id}."
        )
        return JobResult(
            job_id=job_id,
            collection_id=context.collection.id,
            docs=list(context.documents),
        )
