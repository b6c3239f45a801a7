"""Branch office service: filter normalization, existence checks, CRUD."""

from dataclasses import dataclass

from core import get_logger, set_wide_event_fields
from core.pagination import calculate_total_pages
from core.sanitize import clear_invalid_fields, clear_invalid_keyword
from models import BranchOffice
from repositories.branch_office_repository import (
    BranchOfficeListFilter,
    BranchOfficeNotFoundError,
    BranchOfficeRepository,
)
from schemas import (
    CreateBranchOfficeRequest,
    GetBranchOfficeRequest,
    GetSimpleBranchOfficeRequest,
    UpdateBranchOfficeRequest,
)

logger = get_logger(__name__)

# Fields a list keyword may search, and the default when none are requested
SEARCHABLE_FIELDS = ("name", "address")
DEFAULT_SEARCH_FIELDS = ("name",)


@dataclass
class ExistsBranchOfficeByFieldInput:
    """Does any branch office other than ``except_id`` have ``field == value``?"""

    field: str
    value: str
    except_id: str | None = None
    with_trash: bool | None = None


def to_list_filter(req: GetBranchOfficeRequest) -> BranchOfficeListFilter:
    """Restrict requested fields to the searchable set and sanitize the keyword."""
    if req.fields is not None:
        fields = clear_invalid_fields(req.fields, SEARCHABLE_FIELDS)
    else:
        fields = list(DEFAULT_SEARCH_FIELDS)

    keyword = clear_invalid_keyword(req.keyword) if req.keyword is not None else None

    return BranchOfficeListFilter(
        fields=fields,
        keyword=keyword,
        limit=req.limit,
        page=req.page,
        status=req.status,
    )


class BranchOfficeService:
    """Business operations over branch offices.

    Takes its repository at construction; routes get an instance through
    dependencies.get_branch_office_service.
    """

    def __init__(self, repository: BranchOfficeRepository):
        self.repository = repository

    async def exists_by_id(self, branch_office_id: str, with_trash: bool) -> bool:
        try:
            await self.repository.get_by_id(branch_office_id, with_trash)
        except BranchOfficeNotFoundError:
            return False
        return True

    async def exists_by_field(self, params: ExistsBranchOfficeByFieldInput) -> bool:
        """True only when a match exists and it is not ``except_id`` itself."""
        try:
            branch_office = await self.repository.get_by_field(
                params.field, params.value, bool(params.with_trash)
            )
        except BranchOfficeNotFoundError:
            return False
        return params.except_id is None or params.except_id != branch_office.id

    async def get_list(self, req: GetBranchOfficeRequest) -> list[BranchOffice]:
        return await self.repository.get_list(to_list_filter(req))

    async def get_total_rows_and_pages(
        self, req: GetBranchOfficeRequest
    ) -> tuple[int, int]:
        """Count matching rows and derive the page count.

        ``req.limit`` must be set; the list validator always applies a default.
        """
        if req.limit is None:
            raise ValueError("limit is required to compute total pages")

        total_rows = await self.repository.count(to_list_filter(req))
        return total_rows, calculate_total_pages(total_rows, req.limit)

    async def get_by_id(self, branch_office_id: str) -> BranchOffice:
        return await self.repository.get_by_id(branch_office_id, with_trash=False)

    async def create(self, req: CreateBranchOfficeRequest) -> BranchOffice:
        branch_office = await self.repository.create(
            BranchOffice(
                id=req.id,
                name=req.name,
                address=req.address,
                phone_number=req.phone_number,
                fax_number=req.fax_number,
                city=req.city,
            )
        )
        logger.info("branch_office.created", branch_office_id=branch_office.id)
        set_wide_event_fields(branch_office_id=branch_office.id)
        return branch_office

    async def update_by_id(
        self, branch_office_id: str, req: UpdateBranchOfficeRequest
    ) -> BranchOffice:
        """Overwrite only the fields the request carries.

        Absent, null and empty-string fields are left untouched, so an update
        never clears a value.
        """
        values = {
            field: value
            for field, value in req.model_dump(exclude_unset=True).items()
            if value
        }
        branch_office = await self.repository.update_by_id(branch_office_id, values)
        logger.info(
            "branch_office.updated",
            branch_office_id=branch_office_id,
            fields=sorted(values),
        )
        set_wide_event_fields(branch_office_id=branch_office_id)
        return branch_office

    async def soft_delete_by_id(self, branch_office_id: str) -> None:
        await self.repository.soft_delete_by_id(branch_office_id)
        logger.info("branch_office.soft_deleted", branch_office_id=branch_office_id)
        set_wide_event_fields(branch_office_id=branch_office_id)

    async def hard_delete_by_id(self, branch_office_id: str) -> None:
        await self.repository.hard_delete_by_id(branch_office_id)
        logger.info("branch_office.hard_deleted", branch_office_id=branch_office_id)
        set_wide_event_fields(branch_office_id=branch_office_id)

    async def restore_by_id(self, branch_office_id: str) -> None:
        await self.repository.restore_by_id(branch_office_id)
        logger.info("branch_office.restored", branch_office_id=branch_office_id)
        set_wide_event_fields(branch_office_id=branch_office_id)

    async def get_simple_list(
        self, req: GetSimpleBranchOfficeRequest
    ) -> list[BranchOffice]:
        """Live branch offices matching the keyword by name, unpaginated."""
        keyword = clear_invalid_keyword(req.keyword) if req.keyword is not None else None
        return await self.repository.get_list(
            BranchOfficeListFilter(fields=list(DEFAULT_SEARCH_FIELDS), keyword=keyword)
        )
