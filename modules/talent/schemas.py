"""Pydantic models shared by the talent services, the API and the CLI."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class SyncItemStatus(str, Enum):
    """Per-submission outcome of a reconciliation run."""

    SYNCED = "synced"  # directory entry created, submission marked synced
    ALREADY_EXISTS = "already_exists"  # directory already had this email
    PARTIAL_SUCCESS = "partial_success"  # entry created, submission still pending
    ERROR = "error"  # nothing created, safe to retry


class SyncItemResult(BaseModel):
    id: str
    email: str
    status: SyncItemStatus
    error: Optional[str] = None
    talent_application_id: Optional[str] = None


class SyncSummary(BaseModel):
    """What a talent-sync invocation returns to its caller."""

    success: bool = True
    processed: int = 0
    results: list[SyncItemResult] = []
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def counts(self) -> dict[str, int]:
        """Number of results per status (all statuses present, zero-filled)."""
        counts = {s.value: 0 for s in SyncItemStatus}
        for r in self.results:
            counts[r.status.value] += 1
        return counts

    @property
    def needs_attention(self) -> list[SyncItemResult]:
        """Items a re-run will not resolve on its own, or that failed."""
        return [
            r for r in self.results
            if r.status in (SyncItemStatus.ERROR, SyncItemStatus.PARTIAL_SUCCESS)
        ]


class MigrationItemStatus(str, Enum):
    """Per-application outcome of a roster migration."""

    MIGRATED = "migrated"
    SKIPPED = "skipped"  # roster already has this email
    ERROR = "error"


class MigrationItemResult(BaseModel):
    id: str
    email: str
    status: MigrationItemStatus
    error: Optional[str] = None
    talent_id: Optional[str] = None


class MigrationSummary(BaseModel):
    """What a talent-migration invocation returns to its caller."""

    success: bool = True
    processed: int = 0
    migrated_count: int = 0
    skipped_count: int = 0
    error_count: int = 0
    results: list[MigrationItemResult] = []
    message: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_results(cls, results: list[MigrationItemResult]) -> "MigrationSummary":
        migrated = sum(r.status is MigrationItemStatus.MIGRATED for r in results)
        skipped = sum(r.status is MigrationItemStatus.SKIPPED for r in results)
        errors = sum(r.status is MigrationItemStatus.ERROR for r in results)
        return cls(
            success=errors == 0,
            processed=len(results),
            migrated_count=migrated,
            skipped_count=skipped,
            error_count=errors,
            results=results,
            message=f"Migrated {migrated} approved applications "
                    f"({skipped} already on the roster, {errors} failed)",
        )


class SubmissionCreate(BaseModel):
    """Payload of the public talent registration form."""

    full_name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    phone_number: Optional[str] = None
    age: Optional[int] = Field(None, ge=0, le=120)
    country: Optional[str] = None
    category: str = Field(..., min_length=1)
    gender: str = Field(..., min_length=1)
    instagram: Optional[str] = None
    tiktok: Optional[str] = None
    telegram: Optional[str] = None
    portfolio_url: Optional[str] = None
    measurements: Optional[dict] = None
    talent_description: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def _strip_email(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("full_name", "category", "gender")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v
