"""
Membership Applications Router

Public endpoint for submitting a membership application.

Endpoints:
- POST /apply - Submit an application (JSON or multipart with optional CV)

Security:
- Per-IP rate limiting, checked before the body is read
- CV type and size policy enforced before anything is stored
- Input validation via Pydantic schemas
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from astro_api.core.database import get_db
from astro_api.core.rate_limit import SlidingWindowRateLimiter, client_identity, get_rate_limiter
from astro_api.core.schemas import ErrorResponse
from astro_api.core.storage import ObjectStore, get_object_store
from astro_api.modules.applications import service
from astro_api.modules.applications.intake import CV_FIELD_NAME, read_cv_upload
from astro_api.modules.applications.schemas import (
    ApplicationForm,
    ApplyResponse,
    CVFile,
    FieldError,
)
from astro_api.modules.applications.service import (
    ApplicationValidationError,
    RateLimitExceededError,
)

logger = logging.getLogger(__name__)

router = APIRouter()

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def enforce_apply_rate_limit(
    request: Request,
    limiter: SlidingWindowRateLimiter = Depends(get_rate_limiter),
) -> None:
    """Count this submission against the caller's window; reject past the ceiling."""
    trust_proxy_headers = request.app.state.settings.trust_proxy_headers
    identity = client_identity(request, trust_proxy_headers)
    decision = await limiter.hit(f"apply:{identity}")
    if not decision.allowed:
        logger.warning(
            f"Rate limit exceeded on {request.url.path}: "
            f"{decision.limit}/{limiter.window_seconds}s"
        )
        raise RateLimitExceededError(decision.retry_after_seconds)


async def _read_json_object(request: Request) -> dict:
    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = await request.json()
    except ValueError as e:
        raise ApplicationValidationError(
            [FieldError(field="body", reason="Malformed JSON body", type="json_invalid")]
        ) from e
    if not isinstance(payload, dict):
        raise ApplicationValidationError(
            [FieldError(field="body", reason="Expected a JSON object", type="model_type")]
        )
    return payload


async def parse_submission(request: Request) -> tuple[ApplicationForm, CVFile | None]:
    """
    Turn a JSON, urlencoded or multipart body into a form and an optional CV.

    A multipart body may carry at most one file part; the CV is read from
    the ``cv`` field.
    """
    content_type = request.headers.get("content-type", "").lower()

    if not content_type.startswith(FORM_CONTENT_TYPES):
        return ApplicationForm.from_mapping(await _read_json_object(request)), None

    async with request.form(max_files=1) as form:
        upload = form.get(CV_FIELD_NAME)
        cv = await read_cv_upload(upload if isinstance(upload, UploadFile) else None)
        fields = {key: value for key, value in form.items() if isinstance(value, str)}

    return ApplicationForm.from_mapping(fields), cv


@router.post(
    "/apply",
    response_model=ApplyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit Membership Application",
    description="""
Submit a membership application.

Accepts a JSON body or a multipart form. A CV (PDF or Word, at most 5 MB)
can be attached under the `cv` field of a multipart form.

**Required fields:** `fullName`, `email`, `reason`, `consent`.
**Optional fields:** `phone`, `department`, `skills`.

`consent` must be `true`, `"true"`, `"on"` or `"1"`.
""",
    responses={
        201: {"description": "Application stored", "model": ApplyResponse},
        400: {"description": "Validation error", "model": ErrorResponse},
        413: {"description": "CV or request body too large", "model": ErrorResponse},
        415: {"description": "CV is not a PDF or Word document", "model": ErrorResponse},
        429: {"description": "Too many submissions from this client", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    dependencies=[Depends(enforce_apply_rate_limit)],
)
async def submit_application(
    request: Request,
    db: AsyncSession = Depends(get_db),
    object_store: ObjectStore | None = Depends(get_object_store),
) -> ApplyResponse:
    """
    Submit a new membership application.

    Raises:
        ApplicationServiceError subclasses, rendered by the global handler
    """
    form, cv = await parse_submission(request)
    response = await service.submit_application(db, object_store, form, cv)
    logger.info(f"Application submitted successfully: id={response.id}")
    return response
