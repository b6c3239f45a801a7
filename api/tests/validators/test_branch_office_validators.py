"""Tests for branch office request validators, called directly."""

from unittest.mock import AsyncMock

import pytest

from core.errors import FieldValidationError
from schemas import CreateBranchOfficeRequest, UpdateBranchOfficeRequest
from services.branch_office_service import (
    BranchOfficeService,
    ExistsBranchOfficeByFieldInput,
)
from validators.branch_office import (
    _split_fields,
    validate_create_branch_office_request,
    validate_get_branch_office_request,
    validate_get_simple_branch_office_request,
    validate_update_branch_office_request,
)


def _create_body(**overrides) -> CreateBranchOfficeRequest:
    data = {
        "id": "b1",
        "name": "North",
        "address": "1 Elm St",
        "phone_number": "021-1",
        "city": "Jakarta",
        "fax_number": "021-2",
    }
    data.update(overrides)
    return CreateBranchOfficeRequest(**data)


@pytest.mark.unit
class TestValidateGetBranchOfficeRequest:
    async def test_applies_default_page_and_limit(self):
        req = await validate_get_branch_office_request()

        assert req.page == 1
        assert req.limit == 10
        assert req.fields is None
        assert req.status is None

    async def test_defaults_come_from_settings(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_PAGE_LIMIT", "25")

        req = await validate_get_branch_office_request()

        assert req.limit == 25

    async def test_keeps_explicit_values(self):
        req = await validate_get_branch_office_request(
            fields=["name,address"], keyword="north", limit=5, page=3, status="deleted"
        )

        assert req.fields == ["name", "address"]
        assert req.keyword == "north"
        assert req.limit == 5
        assert req.page == 3
        assert req.status == "deleted"

    async def test_rejects_unknown_status(self):
        with pytest.raises(FieldValidationError) as exc_info:
            await validate_get_branch_office_request(status="archived")

        assert exc_info.value.field == "status"
        assert exc_info.value.tag == "oneof"

    async def test_empty_status_means_live_rows(self):
        req = await validate_get_branch_office_request(status="")

        assert req.status is None


@pytest.mark.unit
class TestSplitFields:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, None),
            (["name"], ["name"]),
            (["name", "address"], ["name", "address"]),
            (["name, address"], ["name", "address"]),
            (["", " , "], []),
        ],
    )
    def test_split(self, raw, expected):
        assert _split_fields(raw) == expected


@pytest.mark.unit
class TestValidateCreateBranchOfficeRequest:
    async def test_passes_when_name_free(self):
        service = AsyncMock(spec=BranchOfficeService)
        service.exists_by_field.return_value = False
        body = _create_body()

        result = await validate_create_branch_office_request(body, service)

        assert result is body
        service.exists_by_field.assert_awaited_once_with(
            ExistsBranchOfficeByFieldInput(field="name", value="North")
        )

    async def test_rejects_taken_name(self):
        service = AsyncMock(spec=BranchOfficeService)
        service.exists_by_field.return_value = True

        with pytest.raises(FieldValidationError) as exc_info:
            await validate_create_branch_office_request(_create_body(), service)

        assert exc_info.value.field == "name"
        assert exc_info.value.tag == "exists"

    async def test_lookup_failure_propagates(self):
        service = AsyncMock(spec=BranchOfficeService)
        service.exists_by_field.side_effect = ConnectionError("db down")

        with pytest.raises(ConnectionError):
            await validate_create_branch_office_request(_create_body(), service)


@pytest.mark.unit
class TestOtherValidators:
    async def test_update_passes_body_through(self):
        body = UpdateBranchOfficeRequest(name="South")

        assert await validate_update_branch_office_request(body) is body

    async def test_simple_list_has_no_defaults(self):
        req = await validate_get_simple_branch_office_request()

        assert req.keyword is None

        req = await validate_get_simple_branch_office_request(keyword="nor")
        assert req.keyword == "nor"
