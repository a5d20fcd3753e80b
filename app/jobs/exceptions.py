class JobError(Exception):
    """Base exception for all job-related errors."""


class MissingInputError(JobError):
    """Raised when a job payload lacks required text fields."""


class JobNotFoundError(JobError):
    """Raised when no job record exists for the requested ID."""
