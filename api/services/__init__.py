"""Service layer for business logic.

Services keep routes thin: they normalize request filters, orchestrate
repository calls and log domain events.

Layer hierarchy:
    Routes (HTTP) -> Validators -> Services (Business Logic) -> Repositories (Database)

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
"""

from services.branch_office_service import (
    BranchOfficeService,
    ExistsBranchOfficeByFieldInput,
)

__all__ = [
    "BranchOfficeService",
    "ExistsBranchOfficeByFieldInput",
]
