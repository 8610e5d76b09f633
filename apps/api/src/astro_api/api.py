from fastapi import APIRouter

from astro_api.modules.applications import router as applications_router
from astro_api.modules.listings import router as listings_router

api_router = APIRouter()

api_router.include_router(applications_router, tags=["Applications"])

api_router.include_router(listings_router, tags=["Listings"])
