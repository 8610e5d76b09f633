"""
Membership Application Schemas

Two stages keep "parse an untrusted shape" apart from "enforce the rules":

1. ``ApplicationForm.from_mapping`` picks the known fields out of a raw
   JSON or form body and drops everything else. No rules are applied.
2. ``ApplicationCreate`` validates the form and produces the typed value
   that gets persisted. Every failing field is reported at once.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import Field, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

from astro_api.core.schemas import ApiModel

# HTML forms send checkboxes as "on"; JS clients send true / "true" / 1
CONSENT_TOKENS = frozenset({"true", "on", "1"})

FULL_NAME_MIN_LENGTH = 2
FULL_NAME_MAX_LENGTH = 100
REASON_MIN_LENGTH = 10
REASON_MAX_LENGTH = 1000
SKILLS_MAX_LENGTH = 500


@dataclass(frozen=True)
class ApplicationForm:
    """Raw application fields exactly as the client sent them."""

    full_name: Any = None
    email: Any = None
    phone: Any = None
    department: Any = None
    reason: Any = None
    skills: Any = None
    consent: Any = None

    # wire name -> attribute
    FIELD_NAMES = {
        "fullName": "full_name",
        "email": "email",
        "phone": "phone",
        "department": "department",
        "reason": "reason",
        "skills": "skills",
        "consent": "consent",
    }

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "ApplicationForm":
        """
        Pick the known fields out of a request body.

        Accepts camelCase wire names and their snake_case equivalents.
        Unknown keys (including csrfToken and file parts) are dropped.
        """
        values: dict[str, Any] = {}
        for wire_name, attr in cls.FIELD_NAMES.items():
            if wire_name in raw:
                values[attr] = raw[wire_name]
            elif attr in raw:
                values[attr] = raw[attr]
        return cls(**values)

    def to_payload(self) -> dict[str, Any]:
        """Keyed by wire name so validation errors point at wire fields."""
        return {wire: getattr(self, attr) for wire, attr in self.FIELD_NAMES.items()}


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_consent(value: Any) -> bool:
    """
    Interpret a consent value from JSON or a form encoding.

    Only True and the tokens "true", "on", "1" (or the number 1) count as
    consent. Everything else, including False, does not.
    """
    if value is True:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in CONSENT_TOKENS
    return False


class ApplicationCreate(ApiModel):
    """A validated membership application, ready to persist."""

    full_name: str = Field(..., min_length=FULL_NAME_MIN_LENGTH, max_length=FULL_NAME_MAX_LENGTH)
    email: str
    phone: str | None = None
    department: str | None = None
    reason: str = Field(..., min_length=REASON_MIN_LENGTH, max_length=REASON_MAX_LENGTH)
    skills: str | None = Field(None, max_length=SKILLS_MAX_LENGTH)
    consent: bool

    @field_validator("full_name", "email", "reason", mode="before")
    @classmethod
    def require_non_blank(cls, v: Any) -> Any:
        if _is_blank(v):
            raise PydanticCustomError("missing", "Field required")
        return v.strip() if isinstance(v, str) else v

    @field_validator("phone", "department", "skills", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if _is_blank(v):
            return None
        return v.strip() if isinstance(v, str) else v

    @field_validator("consent", mode="before")
    @classmethod
    def require_consent(cls, v: Any) -> bool:
        if _is_blank(v):
            raise PydanticCustomError("missing", "Field required")
        if not coerce_consent(v):
            raise PydanticCustomError("consent_required", "You must consent to proceed")
        return True

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        """Reject malformed addresses but keep the address exactly as typed."""
        _, normalized = validate_email(v)
        # "Name <addr>" forms parse, but only a bare address is accepted
        if normalized.lower() != v.lower():
            raise PydanticCustomError("value_error", "value is not a valid email address")
        return v


class FieldError(ApiModel):
    """One failing field and why it failed."""

    field: str
    reason: str
    type: str


@dataclass(frozen=True)
class CVFile:
    """An uploaded CV that passed intake, held in memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class ApplyResponse(ApiModel):
    """Successful submission."""

    id: str
    message: str
