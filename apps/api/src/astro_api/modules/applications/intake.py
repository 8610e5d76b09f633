"""
CV Intake

Checks an uploaded CV against the upload policy and buffers it in memory.
Nothing is persisted here.

Checks run cheapest first: the declared size, then the declared content
type, then a chunked read that stops once the ceiling is passed.
"""

import logging

from starlette.datastructures import UploadFile

from astro_api.modules.applications.schemas import CVFile
from astro_api.modules.applications.service import FileTooLargeError, UnsupportedFileTypeError

logger = logging.getLogger(__name__)

CV_FIELD_NAME = "cv"
MAX_CV_SIZE_BYTES = 5 * 1024 * 1024
READ_CHUNK_BYTES = 64 * 1024

ALLOWED_CV_CONTENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)


def _normalize_content_type(content_type: str | None) -> str | None:
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def check_cv_policy(content_type: str | None, declared_size: int | None) -> str:
    """
    Apply the upload policy to what the client declared about a file.

    Returns:
        The normalized content type

    Raises:
        FileTooLargeError: Declared size above the ceiling
        UnsupportedFileTypeError: Type outside the allow-list
    """
    if declared_size is not None and declared_size > MAX_CV_SIZE_BYTES:
        raise FileTooLargeError(MAX_CV_SIZE_BYTES)
    normalized = _normalize_content_type(content_type)
    if normalized not in ALLOWED_CV_CONTENT_TYPES:
        raise UnsupportedFileTypeError(content_type)
    return normalized


async def read_cv_upload(upload: UploadFile | None) -> CVFile | None:
    """
    Validate and buffer a CV upload.

    An empty file part (a form submitted with no file chosen) counts as
    no upload.

    Returns:
        CVFile, or None if no file was supplied

    Raises:
        UnsupportedFileTypeError: Type outside the allow-list
        FileTooLargeError: More than MAX_CV_SIZE_BYTES declared or read
    """
    if upload is None or not upload.filename:
        return None

    content_type = check_cv_policy(upload.content_type, upload.size)

    chunks: list[bytes] = []
    total = 0
    while chunk := await upload.read(READ_CHUNK_BYTES):
        total += len(chunk)
        if total > MAX_CV_SIZE_BYTES:
            logger.info(f"Rejected CV upload after reading {total} bytes")
            raise FileTooLargeError(MAX_CV_SIZE_BYTES)
        chunks.append(chunk)

    if total == 0:
        return None

    return CVFile(filename=upload.filename, content_type=content_type, data=b"".join(chunks))
