"""Pydantic schemas for API request/response validation."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Shared
# =============================================================================


class Pagination(BaseModel):
    """Pagination metadata for list responses."""

    limit: int
    page: int
    total_rows: int
    total_pages: int


class MessageResponse(BaseModel):
    """Envelope for operations that return no data."""

    message: str


class ErrorResponse(BaseModel):
    """Envelope for every failure. ``error`` maps field -> failed rule, or null."""

    error: dict[str, str] | None = None
    message: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str


class PoolStatusResponse(BaseModel):
    """Connection pool status for monitoring."""

    pool_size: int
    checked_out: int
    overflow: int
    checked_in: int


class DetailedHealthResponse(BaseModel):
    """Detailed health check response with component status."""

    status: str
    service: str
    database: bool
    pool: PoolStatusResponse | None = None


# =============================================================================
# Branch offices
# =============================================================================


class BranchOfficeResource(BaseModel):
    """Branch office as returned by the API. created_at is a Unix timestamp."""

    id: str
    name: str
    address: str
    phone_number: str
    fax_number: str
    city: str
    created_at: int

    @classmethod
    def from_model(cls, branch_office) -> "BranchOfficeResource":
        created_at: datetime = branch_office.created_at
        # SQLite drops tzinfo; stored values are always UTC
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return cls(
            id=branch_office.id,
            name=branch_office.name,
            address=branch_office.address,
            phone_number=branch_office.phone_number,
            fax_number=branch_office.fax_number,
            city=branch_office.city,
            created_at=int(created_at.timestamp()),
        )


class SimpleBranchOfficeResource(BaseModel):
    """Lightweight branch office for dropdowns."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class BranchOfficeMeta(BaseModel):
    pagination: Pagination


class GetBranchOfficeRequest(BaseModel):
    """List filter after query binding and defaults."""

    fields: list[str] | None = None
    keyword: str | None = None
    limit: int | None = Field(default=None, ge=1)
    page: int | None = Field(default=None, ge=1)
    status: str | None = None


class GetBranchOfficeResponse(BaseModel):
    data: list[BranchOfficeResource]
    meta: BranchOfficeMeta
    message: str


class ShowBranchOfficeResponse(BaseModel):
    data: BranchOfficeResource
    message: str


class CreateBranchOfficeRequest(BaseModel):
    """All fields required and non-empty; id is chosen by the caller."""

    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    address: str = Field(min_length=1, max_length=100)
    phone_number: str = Field(min_length=1, max_length=100)
    city: str = Field(min_length=1, max_length=100)
    fax_number: str = Field(min_length=1, max_length=100)


class CreateBranchOfficeResponse(BaseModel):
    data: BranchOfficeResource
    message: str


class UpdateBranchOfficeRequest(BaseModel):
    """Partial update; omitted (or empty) fields keep their current value."""

    name: str | None = Field(default=None, max_length=100)
    address: str | None = Field(default=None, max_length=100)
    phone_number: str | None = Field(default=None, max_length=100)
    city: str | None = Field(default=None, max_length=100)
    fax_number: str | None = Field(default=None, max_length=100)


class UpdateBranchOfficeResponse(BaseModel):
    data: BranchOfficeResource
    message: str


class GetSimpleBranchOfficeRequest(BaseModel):
    keyword: str | None = None


class GetSimpleBranchOfficeResponse(BaseModel):
    data: list[SimpleBranchOfficeResource]
    message: str
