"""
Membership Applications Module

Handles prospective member applications:
1. Per-IP rate limiting on submission
2. Optional CV intake (PDF/Word, 5 MB max)
3. Field validation with every failing field reported together
4. CV upload to the object store, then the record insert
5. Confirmation email to the applicant

API Endpoints:
- POST /apply - Submit an application
"""

from .router import router

__all__ = ["router"]
