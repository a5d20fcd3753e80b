from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class UserRecord:
    """Represents a row from the users table."""

    id: int
    email: str
    credit_balance: int
    is_admin: bool = False
    stripe_customer_id: str | None = None
    created_at: datetime | None = None


@dataclass
class JobRecord:
    """Represents a row from the jobs table."""

    job_id: str
    job_type: str
    status: str
    user_id: int | None = None
    result: dict[str, Any] | None = None
    error_message: str | None = None
    created_at: datetime | None = None
    completed_on: datetime | None = None


@dataclass
class DocumentRecord:
    """Represents a row from the docs table."""

    id: int
    user_id: int
    doc_type: str
    content: str
    collection_id: int
    created_at: datetime | None = None


@dataclass
class CollectionRecord:
    """Represents a row from the doc_collections table."""

    id: int
    collection_name: str
    user_resume: str
    jd: str
    created_at: datetime | None = None
    docs: list[DocumentRecord] = field(default_factory=list)
