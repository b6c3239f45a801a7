"""FastAPI dependencies wiring repositories into services per request."""

from typing import Annotated

from fastapi import Depends

from core.database import DbSession
from repositories.branch_office_repository import BranchOfficeRepository
from services.branch_office_service import BranchOfficeService


def get_branch_office_service(db: DbSession) -> BranchOfficeService:
    return BranchOfficeService(BranchOfficeRepository(db))


BranchOfficeServiceDep = Annotated[
    BranchOfficeService, Depends(get_branch_office_service)
]
