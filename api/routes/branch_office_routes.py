"""Branch office endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from core.errors import NotFoundError, response_message
from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from dependencies import BranchOfficeServiceDep
from schemas import (
    BranchOfficeMeta,
    BranchOfficeResource,
    CreateBranchOfficeResponse,
    ErrorResponse,
    GetBranchOfficeResponse,
    GetSimpleBranchOfficeResponse,
    MessageResponse,
    Pagination,
    ShowBranchOfficeResponse,
    SimpleBranchOfficeResource,
    UpdateBranchOfficeResponse,
)
from validators.branch_office import (
    ValidatedCreateBranchOfficeRequest,
    ValidatedGetBranchOfficeRequest,
    ValidatedGetSimpleBranchOfficeRequest,
    ValidatedUpdateBranchOfficeRequest,
)

router = APIRouter(tags=["branch offices"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Branch office not found"}}
_INVALID = {
    400: {"model": ErrorResponse, "description": "Malformed JSON body"},
    422: {"model": ErrorResponse, "description": "Validation failed"},
}


async def _require_live(
    branch_office_id: str, service: BranchOfficeServiceDep
) -> str:
    if not await service.exists_by_id(branch_office_id, with_trash=False):
        raise NotFoundError("BranchOffice", branch_office_id)
    return branch_office_id


async def _require_any(
    branch_office_id: str, service: BranchOfficeServiceDep
) -> str:
    if not await service.exists_by_id(branch_office_id, with_trash=True):
        raise NotFoundError("BranchOffice", branch_office_id)
    return branch_office_id


# Resolved before the request body, so a missing office is a 404 even when
# the body is also invalid.
LiveBranchOfficeId = Annotated[str, Depends(_require_live)]
AnyBranchOfficeId = Annotated[str, Depends(_require_any)]


@router.get(
    "/branch-offices",
    response_model=GetBranchOfficeResponse,
    responses={422: _INVALID[422]},
)
@limiter.limit(READ_LIMIT)
async def get_branch_offices(
    request: Request,
    req: ValidatedGetBranchOfficeRequest,
    service: BranchOfficeServiceDep,
) -> GetBranchOfficeResponse:
    """List branch offices filtered by keyword and status, paginated by name."""
    total_rows, total_pages = await service.get_total_rows_and_pages(req)
    branch_offices = await service.get_list(req)

    return GetBranchOfficeResponse(
        data=[BranchOfficeResource.from_model(item) for item in branch_offices],
        meta=BranchOfficeMeta(
            pagination=Pagination(
                limit=req.limit,
                page=req.page,
                total_rows=total_rows,
                total_pages=total_pages,
            )
        ),
        message=response_message(200),
    )


@router.get(
    "/branch-offices/simple",
    response_model=GetSimpleBranchOfficeResponse,
    responses=_INVALID,
)
@limiter.limit(READ_LIMIT)
async def get_simple_branch_offices(
    request: Request,
    req: ValidatedGetSimpleBranchOfficeRequest,
    service: BranchOfficeServiceDep,
) -> GetSimpleBranchOfficeResponse:
    """List live branch offices (id and name only) matching a name keyword."""
    branch_offices = await service.get_simple_list(req)
    return GetSimpleBranchOfficeResponse(
        data=[SimpleBranchOfficeResource.model_validate(item) for item in branch_offices],
        message=response_message(200),
    )


@router.get(
    "/branch-office/{branch_office_id}",
    response_model=ShowBranchOfficeResponse,
    responses=_NOT_FOUND,
)
@limiter.limit(READ_LIMIT)
async def show_branch_office(
    request: Request,
    branch_office_id: LiveBranchOfficeId,
    service: BranchOfficeServiceDep,
) -> ShowBranchOfficeResponse:
    branch_office = await service.get_by_id(branch_office_id)
    return ShowBranchOfficeResponse(
        data=BranchOfficeResource.from_model(branch_office),
        message=response_message(200),
    )


@router.post(
    "/branch-office",
    response_model=CreateBranchOfficeResponse,
    status_code=201,
    responses=_INVALID,
)
@limiter.limit(WRITE_LIMIT)
async def create_branch_office(
    request: Request,
    req: ValidatedCreateBranchOfficeRequest,
    service: BranchOfficeServiceDep,
) -> CreateBranchOfficeResponse:
    """Create a branch office. The name must not be used by a live office."""
    branch_office = await service.create(req)
    return CreateBranchOfficeResponse(
        data=BranchOfficeResource.from_model(branch_office),
        message=response_message(201),
    )


@router.put(
    "/branch-office/{branch_office_id}",
    response_model=UpdateBranchOfficeResponse,
    responses={**_NOT_FOUND, **_INVALID},
)
@limiter.limit(WRITE_LIMIT)
async def update_branch_office(
    request: Request,
    branch_office_id: LiveBranchOfficeId,
    req: ValidatedUpdateBranchOfficeRequest,
    service: BranchOfficeServiceDep,
) -> UpdateBranchOfficeResponse:
    """Partially update a live branch office; omitted fields are unchanged."""
    branch_office = await service.update_by_id(branch_office_id, req)
    return UpdateBranchOfficeResponse(
        data=BranchOfficeResource.from_model(branch_office),
        message=response_message(200),
    )


@router.delete(
    "/branch-office/hard-delete/{branch_office_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
)
@limiter.limit(WRITE_LIMIT)
async def hard_delete_branch_office(
    request: Request,
    branch_office_id: AnyBranchOfficeId,
    service: BranchOfficeServiceDep,
) -> MessageResponse:
    """Permanently delete a branch office, including a trashed one."""
    await service.hard_delete_by_id(branch_office_id)
    return MessageResponse(message=response_message(200))


@router.delete(
    "/branch-office/{branch_office_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
)
@limiter.limit(WRITE_LIMIT)
async def soft_delete_branch_office(
    request: Request,
    branch_office_id: LiveBranchOfficeId,
    service: BranchOfficeServiceDep,
) -> MessageResponse:
    """Move a branch office to trash."""
    await service.soft_delete_by_id(branch_office_id)
    return MessageResponse(message=response_message(200))


@router.patch(
    "/branch-office/{branch_office_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
)
@limiter.limit(WRITE_LIMIT)
async def restore_branch_office(
    request: Request,
    branch_office_id: AnyBranchOfficeId,
    service: BranchOfficeServiceDep,
) -> MessageResponse:
    """Restore a trashed branch office."""
    await service.restore_by_id(branch_office_id)
    return MessageResponse(message=response_message(200))
