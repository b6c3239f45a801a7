"""Repository layer for database operations.

Repositories own every query against the branch_offices table, so services
can be tested against a mocked repository.
"""

from repositories.branch_office_repository import (
    BranchOfficeListFilter,
    BranchOfficeNotFoundError,
    BranchOfficeRepository,
)
from repositories.utils import log_slow_query

__all__ = [
    "BranchOfficeListFilter",
    "BranchOfficeNotFoundError",
    "BranchOfficeRepository",
    "log_slow_query",
]
