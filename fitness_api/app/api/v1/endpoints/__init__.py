"""
Endpoint subpackage for API v1.

Each module in this package defines an APIRouter for a single domain
(auth, users, profiles, fitness progress, workout preferences).  The
routers are aggregated in ``router.py`` at the package level.
"""
