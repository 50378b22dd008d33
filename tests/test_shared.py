# tests/test_shared.py

from datetime import datetime, timedelta, timezone

import pytest
from fastapi import HTTPException

from techflow.shared.pagination import pagination_meta, parse_pagination
from techflow.shared.validators import slugify, to_naive_utc, validate_email, validate_phone


def test_parse_pagination_defaults():
    pagination = parse_pagination()
    assert pagination.page == 1
    assert pagination.limit == 10
    assert pagination.offset == 0
    assert pagination.sort_by == "created_at"
    assert pagination.sort_order == "ASC"


def test_parse_pagination_clamps_limit_and_offsets():
    pagination = parse_pagination(page=3, limit=500, sort_order="desc")
    assert pagination.limit == 100
    assert pagination.offset == 200
    assert pagination.sort_order == "DESC"


def test_parse_pagination_rejects_unknown_sort_field():
    with pytest.raises(HTTPException) as exc_info:
        parse_pagination(sort_by="password", valid_sort_fields=["id", "name"])
    assert exc_info.value.status_code == 400
    assert "password" in exc_info.value.detail


def test_pagination_meta_rounds_pages_up():
    pagination = parse_pagination(page=1, limit=10)
    assert pagination_meta(21, pagination) == {
        "total": 21,
        "page": 1,
        "limit": 10,
        "total_pages": 3,
    }
    assert pagination_meta(0, pagination)["total_pages"] == 0


def test_validate_email_normalizes_case():
    assert validate_email("  Jane.Doe@Example.COM ") == "jane.doe@example.com"
    assert validate_email(None) is None


def test_validate_email_rejects_garbage():
    with pytest.raises(ValueError):
        validate_email("not-an-email")


def test_validate_phone_strips_separators():
    assert validate_phone("+251 (911) 123-456") == "+251911123456"
    assert validate_phone("0911.123.456") == "0911123456"


@pytest.mark.parametrize("phone", ["12345", "+251-abc-1234", "1234567890123456"])
def test_validate_phone_rejects_invalid(phone):
    with pytest.raises(ValueError):
        validate_phone(phone)


def test_slugify():
    assert slugify("  Network & Cabling  ") == "network-cabling"
    assert slugify("CCTV Installation") == "cctv-installation"


def test_to_naive_utc_converts_offsets():
    aware = datetime(2030, 2, 1, 12, 0, tzinfo=timezone(timedelta(hours=3)))
    assert to_naive_utc(aware) == datetime(2030, 2, 1, 9, 0)
    assert to_naive_utc(datetime(2030, 2, 1, 9, 0)) == datetime(2030, 2, 1, 9, 0)
    assert to_naive_utc(None) is None
