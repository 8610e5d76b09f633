"""
Core module - Configuration, database, storage, rate limiting and utilities.
"""

from astro_api.core.config import get_settings, settings
from astro_api.core.database import Base, close_db, get_db, init_db
from astro_api.core.rate_limit import SlidingWindowRateLimiter, client_identity
from astro_api.core.storage import ObjectStore, ObjectStoreError, get_object_store

__all__ = [
    # Config
    "settings",
    "get_settings",
    # Database
    "Base",
    "get_db",
    "init_db",
    "close_db",
    # Storage
    "ObjectStore",
    "ObjectStoreError",
    "get_object_store",
    # Rate limiting
    "SlidingWindowRateLimiter",
    "client_identity",
]
