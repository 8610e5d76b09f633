"""
Listings Router

Read-only project and inspiration listings.
Both return empty pages until content is backed by a store.
"""

from fastapi import APIRouter

from astro_api.modules.listings.schemas import InspirationPage, ProjectPage

router = APIRouter()

PROJECTS_PAGE_SIZE = 12
INSPIRATION_PAGE_SIZE = 24


@router.get("/projects", response_model=ProjectPage, summary="List Projects")
async def list_projects() -> ProjectPage:
    return ProjectPage(items=[], page=1, page_size=PROJECTS_PAGE_SIZE, total=0)


@router.get("/inspiration", response_model=InspirationPage, summary="List Inspiration Media")
async def list_inspiration() -> InspirationPage:
    return InspirationPage(items=[], page=1, page_size=INSPIRATION_PAGE_SIZE, total=0)
