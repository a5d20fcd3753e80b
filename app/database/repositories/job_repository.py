from datetime import datetime, timezone
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.exceptions import PersistenceError, translate_db_errors
from app.database.models import JobRecord
from app.jobs.exceptions import JobNotFoundError
from app.jobs.models import JobStatus

INTERRUPTED_JOB_MESSAGE = "Job interrupted before completion"


class JobRepository:
    """Database operations for the jobs table.

    Status updates only ever move a job out of PROCESSING, so a terminal
    status written once is never overwritten.
    """

    def create(self, job_id: str, job_type: str, user_id: int | None = None) -> JobRecord:
        """Insert a new job record with status PROCESSING."""
        with translate_db_errors(f"create job {job_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO jobs (job_id, job_type, user_id, status)
                    VALUES (%s, %s, %s, %s)
                    RETURNING job_id, job_type, user_id, status, created_at
                    """,
                    (job_id, job_type, user_id, JobStatus.PROCESSING.value),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise PersistenceError(f"Job {job_id} was not created")
        return JobRecord(
            job_id=row["job_id"],
            job_type=row["job_type"],
            user_id=row["user_id"],
            status=row["status"],
            created_at=row["created_at"],
        )

    def find_by_id(self, job_id: str) -> JobRecord | None:
        """Find a job by ID."""
        with translate_db_errors(f"read job {job_id}"), get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT job_id, job_type, user_id, status, result,
                           error_message, created_at, completed_on
                    FROM jobs
                    WHERE job_id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return self._to_record(row)

    def get(self, job_id: str) -> JobRecord:
        """Find a job by ID.

        Raises:
            JobNotFoundError: if no job with this ID exists.
        """
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
        """Move a PROCESSING job into a terminal status.

        Returns False when the job was already terminal or does not exist.
        """
        with translate_db_errors(f"update job {job_id}"), get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE jobs
                    SET status = %s, completed_on = %s, error_message = %s, result = %s
                    WHERE job_id = %s AND status = %s
                    """,
                    (
                        status.value,
                        completed_on,
                        error_message,
                        Jsonb(result) if result is not None else None,
                        job_id,
                        JobStatus.PROCESSING.value,
                    ),
                )
                updated = cur.rowcount == 1
            conn.commit()
        return updated

    def mark_completed(self, job_id: str, result: dict[str, Any]) -> bool:
        return self.set_status(
            job_id,
            JobStatus.COMPLETED,
            completed_on=datetime.now(timezone.utc),
            result=result,
        )

    def mark_failed(self, job_id: str, error: str) -> bool:
        return self.set_status(
            job_id,
            JobStatus.FAILED,
            completed_on=datetime.now(timezone.utc),
            error_message=error,
        )

    def fail_interrupted_jobs(self) -> int:
        """Fail every PROCESSING job. Returns the number swept.

        Queues live in process memory, so at startup any PROCESSING record was
        left behind by a previous process and will never be picked up.
        """
        with translate_db_errors("sweep interrupted jobs"), get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE jobs
                    SET status = %s, error_message = %s, completed_on = NOW()
                    WHERE status = %s
                    """,
                    (
                        JobStatus.FAILED.value,
                        INTERRUPTED_JOB_MESSAGE,
                        JobStatus.PROCESSING.value,
                    ),
                )
                swept = cur.rowcount
            conn.commit()
        return swept

    @staticmethod
    def _to_record(row: dict[str, Any]) -> JobRecord:
        return JobRecord(
            job_id=row["job_id"],
            job_type=row["job_type"],
            user_id=row["user_id"],
            status=row["status"],
            result=row["result"],
            error_message=row["error_message"],
            created_at=row["created_at"],
            completed_on=row["completed_on"],
        )
