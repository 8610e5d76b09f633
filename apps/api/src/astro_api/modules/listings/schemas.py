"""
Listing Schemas

Display entities returned by the project and inspiration listings.
"""

import enum
from datetime import datetime

from pydantic import Field, HttpUrl

from astro_api.core.schemas import ApiModel, Page


class ProjectStatus(str, enum.Enum):
    ONGOING = "ongoing"
    COMPLETED = "completed"


class ProjectType(str, enum.Enum):
    RESEARCH = "research"
    EVENT = "event"
    SOFTWARE = "software"
    OTHER = "other"


class MediaKind(str, enum.Enum):
    IMAGE = "image"
    GIF = "gif"
    VIDEO = "video"


class TeamMember(ApiModel):
    name: str
    role: str | None = None
    avatar: HttpUrl | None = None
    social: str | None = None


class ProjectLink(ApiModel):
    label: str
    url: HttpUrl


class Project(ApiModel):
    """A club project shown on the projects page."""

    id: str
    title: str
    summary: str
    description: str
    image: HttpUrl
    gallery: list[HttpUrl] | None = None
    status: ProjectStatus
    year: int = Field(..., ge=2000, le=2100)
    type: ProjectType | None = None
    tags: list[str] = Field(default_factory=list)
    team: list[TeamMember] | None = None
    links: list[ProjectLink] | None = None
    created_at: datetime
    updated_at: datetime


class InspirationMedia(ApiModel):
    """An image, gif or video on the inspiration wall."""

    id: str
    kind: MediaKind
    src: HttpUrl
    thumb: HttpUrl | None = None
    caption: str | None = None
    author: str | None = None
    width: int | None = None
    height: int | None = None
    created_at: datetime


ProjectPage = Page[Project]
InspirationPage = Page[InspirationMedia]
