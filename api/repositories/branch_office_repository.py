"""Branch office repository for database operations."""

from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from core.errors import NotFoundError
from core.pagination import paginate
from models import BranchOffice, ListStatus, utcnow
from repositories.utils import log_slow_query

# Columns callers may filter, look up or update by name
_FIELD_COLUMNS: dict[str, InstrumentedAttribute] = {
    "id": BranchOffice.id,
    "name": BranchOffice.name,
    "address": BranchOffice.address,
    "phone_number": BranchOffice.phone_number,
    "fax_number": BranchOffice.fax_number,
    "city": BranchOffice.city,
}

_UPDATABLE_FIELDS = frozenset(_FIELD_COLUMNS) - {"id"}


class BranchOfficeNotFoundError(NotFoundError):
    """No branch office matched a point lookup or mutation."""

    def __init__(self, identifier: object) -> None:
        super().__init__("BranchOffice", identifier)


@dataclass
class BranchOfficeListFilter:
    """Criteria for get_list/count.

    The keyword is matched (ILIKE, substring) against every column in
    ``fields``; it only applies when both are non-empty. ``limit`` and ``page``
    paginate only when both are set.
    """

    fields: list[str] | None = None
    keyword: str | None = None
    limit: int | None = None
    page: int | None = None
    status: str | None = None


def _column(field: str) -> InstrumentedAttribute:
    try:
        return _FIELD_COLUMNS[field]
    except KeyError:
        raise ValueError(f"Unknown branch office field: {field!r}") from None


def _select(with_trash: bool = False) -> Select[tuple[BranchOffice]]:
    # populate_existing: bulk UPDATE/DELETE below bypass the identity map
    stmt = select(BranchOffice).execution_options(populate_existing=True)
    if not with_trash:
        stmt = stmt.where(BranchOffice.deleted_at.is_(None))
    return stmt


def _apply_filter[S: Select](stmt: S, list_filter: BranchOfficeListFilter) -> S:
    if list_filter.fields and list_filter.keyword:
        keyword = list_filter.keyword
        # autoescape: %, _ and / in the keyword match literally
        stmt = stmt.where(
            or_(
                *(
                    _column(field).icontains(keyword, autoescape=True)
                    for field in list_filter.fields
                )
            )
        )

    if list_filter.status == ListStatus.DELETED:
        stmt = stmt.where(BranchOffice.deleted_at.is_not(None))
    else:
        stmt = stmt.where(BranchOffice.deleted_at.is_(None))
    return stmt


class BranchOfficeRepository:
    """Repository for BranchOffice database operations.

    Rows with ``deleted_at`` set are excluded unless a method is asked to
    include trash. Lookups and mutations that match nothing raise
    BranchOfficeNotFoundError; other database failures propagate as-is.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    @log_slow_query("branch_office.get_list")
    async def get_list(self, list_filter: BranchOfficeListFilter) -> list[BranchOffice]:
        """Get branch offices matching the filter, ordered by name."""
        stmt = _apply_filter(
            select(BranchOffice).execution_options(populate_existing=True),
            list_filter,
        )
        if list_filter.limit is not None and list_filter.page is not None:
            stmt = paginate(stmt, list_filter.limit, list_filter.page)

        result = await self.db.execute(stmt.order_by(BranchOffice.name.asc()))
        return list(result.scalars().all())

    @log_slow_query("branch_office.count")
    async def count(self, list_filter: BranchOfficeListFilter) -> int:
        """Count rows matching the filter, ignoring pagination."""
        stmt = _apply_filter(
            select(func.count()).select_from(BranchOffice), list_filter
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

    @log_slow_query("branch_office.get_by_id")
    async def get_by_id(
        self, branch_office_id: str, with_trash: bool = False
    ) -> BranchOffice:
        result = await self.db.execute(
            _select(with_trash).where(BranchOffice.id == branch_office_id)
        )
        branch_office = result.scalar_one_or_none()
        if branch_office is None:
            raise BranchOfficeNotFoundError(branch_office_id)
        return branch_office

    @log_slow_query("branch_office.get_by_field")
    async def get_by_field(
        self, field: str, value: str, with_trash: bool = False
    ) -> BranchOffice:
        """Get the first branch office whose ``field`` equals ``value``.

        Several rows can match (e.g. a live and a trashed office sharing a
        name); the first by id is returned.
        """
        result = await self.db.execute(
            _select(with_trash)
            .where(_column(field) == value)
            .order_by(BranchOffice.id)
            .limit(1)
        )
        branch_office = result.scalar_one_or_none()
        if branch_office is None:
            raise BranchOfficeNotFoundError(f"{field}={value}")
        return branch_office

    @log_slow_query("branch_office.create")
    async def create(self, branch_office: BranchOffice) -> BranchOffice:
        """Insert a new branch office.

        Flushes immediately so a duplicate id fails here (IntegrityError)
        rather than at commit.
        """
        self.db.add(branch_office)
        await self.db.flush()
        await self.db.refresh(branch_office)
        return branch_office

    @log_slow_query("branch_office.update_by_id")
    async def update_by_id(
        self, branch_office_id: str, values: dict[str, Any]
    ) -> BranchOffice:
        """Apply ``values`` to a live branch office and return the updated row.

        The row is read with FOR UPDATE (where the dialect supports it) in the
        request's transaction, so the returned state is the one written.
        """
        unknown = set(values) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update branch office fields: {sorted(unknown)}")

        result = await self.db.execute(
            _select()
            .where(BranchOffice.id == branch_office_id)
            .with_for_update()
        )
        branch_office = result.scalar_one_or_none()
        if branch_office is None:
            raise BranchOfficeNotFoundError(branch_office_id)

        for field, value in values.items():
            setattr(branch_office, field, value)
        await self.db.flush()
        return branch_office

    @log_slow_query("branch_office.soft_delete_by_id")
    async def soft_delete_by_id(self, branch_office_id: str) -> None:
        """Mark a live branch office deleted."""
        result = await self.db.execute(
            update(BranchOffice)
            .where(
                BranchOffice.id == branch_office_id,
                BranchOffice.deleted_at.is_(None),
            )
            .values(deleted_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise BranchOfficeNotFoundError(branch_office_id)

    @log_slow_query("branch_office.hard_delete_by_id")
    async def hard_delete_by_id(self, branch_office_id: str) -> None:
        """Permanently remove a branch office, trashed or not."""
        result = await self.db.execute(
            delete(BranchOffice)
            .where(BranchOffice.id == branch_office_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise BranchOfficeNotFoundError(branch_office_id)

    @log_slow_query("branch_office.restore_by_id")
    async def restore_by_id(self, branch_office_id: str) -> None:
        """Clear deleted_at. Restoring a live branch office is a no-op."""
        result = await self.db.execute(
            update(BranchOffice)
            .where(BranchOffice.id == branch_office_id)
            .values(deleted_at=None)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise BranchOfficeNotFoundError(branch_office_id)
