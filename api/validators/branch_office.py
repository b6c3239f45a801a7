"""Request validators for branch office endpoints."""

from typing import Annotated

from fastapi import Depends, Query

from core import get_logger
from core.config import get_settings
from core.errors import FieldValidationError
from core.sanitize import ensure_status_allowed
from dependencies import BranchOfficeServiceDep
from models import ListStatus
from schemas import (
    CreateBranchOfficeRequest,
    GetBranchOfficeRequest,
    GetSimpleBranchOfficeRequest,
    UpdateBranchOfficeRequest,
)
from services.branch_office_service import ExistsBranchOfficeByFieldInput

logger = get_logger(__name__)

ALLOWED_LIST_STATUSES = (ListStatus.DELETED.value,)


def _split_fields(fields: list[str] | None) -> list[str] | None:
    """Accept both ?fields=name&fields=address and ?fields=name,address."""
    if fields is None:
        return None
    return [part.strip() for item in fields for part in item.split(",") if part.strip()]


async def validate_get_branch_office_request(
    fields: Annotated[list[str] | None, Query()] = None,
    keyword: str | None = None,
    limit: Annotated[int | None, Query(ge=1)] = None,
    page: Annotated[int | None, Query(ge=1)] = None,
    status: str | None = None,
) -> GetBranchOfficeRequest:
    """Bind list query params, default page/limit and check status."""
    settings = get_settings()

    ensure_status_allowed(status, ALLOWED_LIST_STATUSES)

    return GetBranchOfficeRequest(
        fields=_split_fields(fields),
        keyword=keyword,
        limit=limit if limit is not None else settings.default_page_limit,
        page=page if page is not None else settings.default_page,
        status=status or None,
    )


async def validate_create_branch_office_request(
    body: CreateBranchOfficeRequest,
    service: BranchOfficeServiceDep,
) -> CreateBranchOfficeRequest:
    """Reject a name already used by a live branch office.

    Trashed offices do not count, so a deleted office's name can be reused.
    """
    try:
        name_taken = await service.exists_by_field(
            ExistsBranchOfficeByFieldInput(field="name", value=body.name)
        )
    except Exception:
        logger.exception("branch_office.name_check.failed", name=body.name)
        raise

    if name_taken:
        raise FieldValidationError("name", "exists")

    return body


async def validate_update_branch_office_request(
    body: UpdateBranchOfficeRequest,
) -> UpdateBranchOfficeRequest:
    # Name uniqueness is not re-checked on update
    return body


async def validate_get_simple_branch_office_request(
    keyword: str | None = None,
) -> GetSimpleBranchOfficeRequest:
    return GetSimpleBranchOfficeRequest(keyword=keyword)


ValidatedGetBranchOfficeRequest = Annotated[
    GetBranchOfficeRequest, Depends(validate_get_branch_office_request)
]
ValidatedCreateBranchOfficeRequest = Annotated[
    CreateBranchOfficeRequest, Depends(validate_create_branch_office_request)
]
ValidatedUpdateBranchOfficeRequest = Annotated[
    UpdateBranchOfficeRequest, Depends(validate_update_branch_office_request)
]
ValidatedGetSimpleBranchOfficeRequest = Annotated[
    GetSimpleBranchOfficeRequest, Depends(validate_get_simple_branch_office_request)
]
