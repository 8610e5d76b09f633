"""
Listings Module

Placeholder project and inspiration listings:
- GET /projects - Paginated projects (page size 12)
- GET /inspiration - Paginated inspiration media (page size 24)
"""

from .router import router

__all__ = ["router"]
