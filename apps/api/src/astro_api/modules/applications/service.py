"""
Membership Applications Service Layer

Business logic for membership application submission.
Orchestrates validation, CV storage, persistence and the confirmation email.

Submission Flow:
1. Validate the coerced form (all failing fields reported together)
2. Store the CV, if one was supplied, under a collision-resistant path
3. Insert the application record (store assigns id and created_at)
4. Send a confirmation email (failures logged, never fatal)

Failure behaviour:
- Validation failures happen before any write
- A failed CV upload aborts before the record is written, so no record
  ever references a missing object
- A failed insert after a successful upload leaves the object orphaned;
  there is no transaction spanning both stores
- Store failures are logged with detail but reported to the client as a
  generic server error
"""

import logging
import re
from datetime import UTC, datetime

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from astro_api.core.email import send_application_received
from astro_api.core.storage import ObjectStore, ObjectStoreError
from astro_api.modules.applications import repository
from astro_api.modules.applications.schemas import (
    ApplicationCreate,
    ApplicationForm,
    ApplyResponse,
    CVFile,
    FieldError,
)

logger = logging.getLogger(__name__)

CV_PATH_PREFIX = "applications/cv"
SUCCESS_MESSAGE = "Application received successfully."
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class ApplicationServiceError(Exception):
    """Base exception for application service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)

    @property
    def details(self) -> list[dict] | None:
        return None

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class ApplicationValidationError(ApplicationServiceError):
    """Raised when submitted fields fail validation."""

    def __init__(self, errors: list[FieldError]):
        self.errors = errors
        fields = ", ".join(dict.fromkeys(e.field for e in errors))
        super().__init__(
            message=f"Invalid application: {fields}." if fields else "Invalid application.",
            error_code="VALIDATION_ERROR",
            status_code=400,
        )

    @property
    def details(self) -> list[dict]:
        return [e.model_dump() for e in self.errors]


class FileTooLargeError(ApplicationServiceError):
    """Raised when an uploaded CV exceeds the size ceiling."""

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        super().__init__(
            message=f"CV must be at most {max_bytes // (1024 * 1024)} MB.",
            error_code="FILE_TOO_LARGE",
            status_code=413,
        )


class UnsupportedFileTypeError(ApplicationServiceError):
    """Raised when an uploaded CV is not a PDF or Word document."""

    def __init__(self, content_type: str | None):
        self.content_type = content_type
        super().__init__(
            message="CV must be a PDF or Word document.",
            error_code="UNSUPPORTED_FILE_TYPE",
            status_code=415,
        )


class RateLimitExceededError(ApplicationServiceError):
    """Raised when a client submits too many applications in one window."""

    def __init__(self, retry_after_seconds: int):
        self.retry_after_seconds = retry_after_seconds
        super().__init__(
            message="Too many applications submitted, please try again later.",
            error_code="RATE_LIMIT_EXCEEDED",
            status_code=429,
        )

    @property
    def details(self) -> dict:
        return {"retryAfterSeconds": self.retry_after_seconds}

    @property
    def headers(self) -> dict[str, str]:
        return {"Retry-After": str(self.retry_after_seconds)}


class StoreError(ApplicationServiceError):
    """Raised when the document or object store fails. Never carries internal detail."""

    def __init__(self):
        super().__init__(
            message="Failed to process application.",
            error_code="SERVER_ERROR",
            status_code=500,
        )


def sanitize_filename(filename: str) -> str:
    """
    Make an uploaded filename safe for use in an object key.

    Every character outside [A-Za-z0-9._-] becomes "_". Directory parts
    are discarded first.
    """
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    cleaned = _UNSAFE_FILENAME_CHARS.sub("_", base)
    if not cleaned.strip("._"):
        return "cv"
    return cleaned


def build_cv_path(filename: str, now: datetime | None = None) -> str:
    """Object key for a CV: submission time in milliseconds plus the sanitized name."""
    now = now or datetime.now(UTC)
    timestamp_ms = int(now.timestamp() * 1000)
    return f"{CV_PATH_PREFIX}/{timestamp_ms}-{sanitize_filename(filename)}"


def validate_application(form: ApplicationForm) -> ApplicationCreate:
    """
    Validate a coerced form.

    Raises:
        ApplicationValidationError: Listing every failing field in field order
    """
    try:
        return ApplicationCreate.model_validate(form.to_payload())
    except ValidationError as e:
        errors = [
            FieldError(
                field=".".join(str(part) for part in err["loc"]) or "body",
                reason=err["msg"],
                type=err["type"],
            )
            for err in e.errors()
        ]
        raise ApplicationValidationError(errors) from e


async def _store_cv(object_store: ObjectStore | None, cv: CVFile) -> str:
    if object_store is None:
        logger.error("CV supplied but the object store is not available")
        raise StoreError()

    path = build_cv_path(cv.filename)
    try:
        await object_store.save(path, cv.data, cv.content_type)
    except ObjectStoreError as e:
        logger.error(f"CV upload failed for {path}: {e}")
        raise StoreError() from e
    logger.info(f"Stored CV at {path} ({cv.size} bytes)")
    return path


async def submit_application(
    db: AsyncSession,
    object_store: ObjectStore | None,
    form: ApplicationForm,
    cv: CVFile | None = None,
) -> ApplyResponse:
    """
    Submit a new membership application.

    Args:
        db: Database session
        object_store: Where CVs are kept (may be None when no CV is sent)
        form: Raw fields picked out of the request body
        cv: CV that already passed intake checks, if any

    Returns:
        ApplyResponse with the generated application id

    Raises:
        ApplicationValidationError: If any field fails validation
        StoreError: If the CV upload or the insert fails
    """
    data = validate_application(form)

    cv_path = await _store_cv(object_store, cv) if cv is not None else None

    try:
        application = await repository.create(db, data, cv_path=cv_path)
    except SQLAlchemyError as e:
        if cv_path:
            logger.error(f"Insert failed after CV upload; object {cv_path} is orphaned: {e}")
        else:
            logger.error(f"Insert failed for application: {e}")
        raise StoreError() from e

    logger.info(f"Created application {application.id}")

    # Non-blocking - log error but don't fail the request
    try:
        email_sent = await send_application_received(
            to_email=application.email,
            full_name=application.full_name,
        )
        if not email_sent:
            logger.error(f"Failed to send confirmation email for application {application.id}")
    except Exception as e:
        logger.error(f"Exception sending confirmation email for application {application.id}: {e}")

    return ApplyResponse(id=str(application.id), message=SUCCESS_MESSAGE)
