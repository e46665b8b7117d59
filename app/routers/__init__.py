# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - superheroes.py: Superhero CRUD and image removal endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import superheroes

__all__ = [
    "health",
    "superheroes",
]
