"""
Unit tests for membership applications service layer.

These tests cover:
- Filename sanitization and CV path building
- Application submission with and without a CV
- Store failures and what they leave behind
- Confirmation email behaviour
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from astro_api.modules.applications.schemas import ApplicationForm, CVFile
from astro_api.modules.applications.service import (
    SUCCESS_MESSAGE,
    ApplicationServiceError,
    ApplicationValidationError,
    StoreError,
    build_cv_path,
    sanitize_filename,
    submit_application,
)

from .conftest import PDF_CONTENT_TYPE, FakeObjectStore


@pytest.fixture
def sample_cv() -> CVFile:
    return CVFile(filename="Ada CV (final).pdf", content_type=PDF_CONTENT_TYPE, data=b"%PDF-1.7 data")


class TestSanitizeFilename:
    """Tests for sanitize_filename."""

    def test_keeps_safe_characters(self):
        assert sanitize_filename("ada_lovelace-cv.v2.pdf") == "ada_lovelace-cv.v2.pdf"

    def test_replaces_unsafe_characters(self):
        assert sanitize_filename("Ada CV (final).pdf") == "Ada_CV__final_.pdf"

    def test_drops_directory_parts(self):
        assert sanitize_filename("../../etc/passwd") == "passwd"
        assert sanitize_filename("C:\\Users\\ada\\cv.pdf") == "cv.pdf"

    def test_non_ascii_is_replaced(self):
        assert sanitize_filename("r\u00e9sum\u00e9.pdf") == "r_sum_.pdf"

    def test_empty_result_falls_back(self):
        assert sanitize_filename("") == "cv"
        assert sanitize_filename("..") == "cv"


class TestBuildCvPath:
    """Tests for build_cv_path."""

    def test_path_uses_timestamp_and_sanitized_name(self):
        now = datetime(2026, 3, 1, 12, 0, 0, tzinfo=UTC)
        path = build_cv_path("my cv.pdf", now)
        assert path == f"applications/cv/{int(now.timestamp() * 1000)}-my_cv.pdf"

    def test_path_only_contains_safe_characters(self):
        path = build_cv_path("<script>alert(1)</script>.docx")
        name = path.rsplit("/", 1)[-1]
        assert all(c.isalnum() or c in "._-" for c in name)


class TestSubmitApplication:
    """Tests for submit_application function."""

    @pytest.mark.asyncio
    async def test_submit_without_cv(self, mock_db, valid_form, sample_application_model):
        """Valid submission with no CV persists a record with no cv_path."""
        object_store = FakeObjectStore()
        with (
            patch("astro_api.modules.applications.service.repository") as mock_repo,
            patch(
                "astro_api.modules.applications.service.send_application_received"
            ) as mock_email,
        ):
            mock_repo.create = AsyncMock(return_value=sample_application_model)
            mock_email.return_value = True

            result = await submit_application(mock_db, object_store, valid_form)

            assert result.id == str(sample_application_model.id)
            assert result.message == SUCCESS_MESSAGE
            mock_repo.create.assert_awaited_once()
            assert mock_repo.create.await_args.kwargs["cv_path"] is None
            assert object_store.save_calls == 0
            mock_email.assert_awaited_once_with(
                to_email="ada@alu.edu", full_name="Ada Lovelace"
            )

    @pytest.mark.asyncio
    async def test_submit_with_cv(self, mock_db, valid_form, sample_application_model, sample_cv):
        """The CV is stored first and its path is written on the record."""
        object_store = FakeObjectStore()
        with (
            patch("astro_api.modules.applications.service.repository") as mock_repo,
            patch(
                "astro_api.modules.applications.service.send_application_received"
            ) as mock_email,
        ):
            mock_repo.create = AsyncMock(return_value=sample_application_model)
            mock_email.return_value = True

            await submit_application(mock_db, object_store, valid_form, sample_cv)

            assert len(object_store.objects) == 1
            path, (data, content_type) = next(iter(object_store.objects.items()))
            assert path.startswith("applications/cv/")
            assert path.endswith("-Ada_CV__final_.pdf")
            assert data == sample_cv.data
            assert content_type == PDF_CONTENT_TYPE
            assert mock_repo.create.await_args.kwargs["cv_path"] == path

    @pytest.mark.asyncio
    async def test_validation_failure_makes_no_store_calls(self, mock_db, sample_cv):
        """Invalid input never reaches either store."""
        object_store = FakeObjectStore()
        with patch("astro_api.modules.applications.service.repository") as mock_repo:
            mock_repo.create = AsyncMock()

            with pytest.raises(ApplicationValidationError) as exc_info:
                await submit_application(
                    mock_db, object_store, ApplicationForm.from_mapping({}), sample_cv
                )

            assert {e.field for e in exc_info.value.errors} == {
                "fullName",
                "email",
                "reason",
                "consent",
            }
            assert object_store.save_calls == 0
            mock_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_cv_upload_failure_skips_record(self, mock_db, valid_form, sample_cv):
        """A failed upload aborts before any record is written."""
        object_store = FakeObjectStore(fail=True)
        with patch("astro_api.modules.applications.service.repository") as mock_repo:
            mock_repo.create = AsyncMock()

            with pytest.raises(StoreError) as exc_info:
                await submit_application(mock_db, object_store, valid_form, sample_cv)

            assert exc_info.value.status_code == 500
            assert exc_info.value.error_code == "SERVER_ERROR"
            assert "bucket" not in exc_info.value.message
            mock_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_cv_without_object_store_is_store_error(self, mock_db, valid_form, sample_cv):
        with patch("astro_api.modules.applications.service.repository") as mock_repo:
            mock_repo.create = AsyncMock()

            with pytest.raises(StoreError):
                await submit_application(mock_db, None, valid_form, sample_cv)

            mock_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_cv_does_not_need_object_store(
        self, mock_db, valid_form, sample_application_model
    ):
        with (
            patch("astro_api.modules.applications.service.repository") as mock_repo,
            patch("astro_api.modules.applications.service.send_application_received"),
        ):
            mock_repo.create = AsyncMock(return_value=sample_application_model)

            result = await submit_application(mock_db, None, valid_form)

            assert result.id == str(sample_application_model.id)

    @pytest.mark.asyncio
    async def test_insert_failure_after_upload(self, mock_db, valid_form, sample_cv):
        """An insert failure is a generic server error; the uploaded object stays behind."""
        object_store = FakeObjectStore()
        with patch("astro_api.modules.applications.service.repository") as mock_repo:
            mock_repo.create = AsyncMock(
                side_effect=OperationalError("INSERT", {}, Exception("connection refused"))
            )

            with pytest.raises(StoreError) as exc_info:
                await submit_application(mock_db, object_store, valid_form, sample_cv)

            assert "connection refused" not in exc_info.value.message
            assert len(object_store.objects) == 1

    @pytest.mark.asyncio
    async def test_email_failure_still_succeeds(
        self, mock_db, valid_form, sample_application_model
    ):
        """Application submission succeeds even if the email fails."""
        with (
            patch("astro_api.modules.applications.service.repository") as mock_repo,
            patch(
                "astro_api.modules.applications.service.send_application_received"
            ) as mock_email,
        ):
            mock_repo.create = AsyncMock(return_value=sample_application_model)
            mock_email.side_effect = RuntimeError("resend down")

            result = await submit_application(mock_db, FakeObjectStore(), valid_form)
            assert result.id == str(sample_application_model.id)


class TestServiceErrors:
    """Tests for the service error hierarchy."""

    def test_store_error_is_service_error(self):
        error = StoreError()
        assert isinstance(error, ApplicationServiceError)
        assert error.details is None
        assert error.headers is None
