"""API route modules."""

from .branch_office_routes import router as branch_office_router
from .health_routes import router as health_router

__all__ = [
    "branch_office_router",
    "health_router",
]
