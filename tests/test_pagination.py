import pytest

from library_api.app.core import db
from library_api.app.core.errors import ValidationFailed
from library_api.app.core.pagination import build_meta, listing, paginated, validate_page
from library_api.app.core.query import Predicate


def test_meta_for_a_middle_page():
    meta = build_meta(total=20, page=2, size=5, count=5)
    assert meta == {"total": 20, "current_page": 2, "per_page": 5, "last_page": 4, "from": 6, "to": 10}


def test_meta_for_an_empty_result():
    meta = build_meta(total=0, page=1, size=10, count=0)
    assert meta["last_page"] == 1
    assert meta["from"] is None and meta["to"] is None


def test_meta_for_a_partial_last_page():
    meta = build_meta(total=11, page=2, size=10, count=1)
    assert meta["last_page"] == 2
    assert (meta["from"], meta["to"]) == (11, 11)


def test_validate_page_defaults():
    assert validate_page(None, None) == (1, 10)


@pytest.mark.parametrize(
    "page,size,field",
    [(0, 10, "page"), (1, 0, "size"), (1, 101, "size")],
)
def test_validate_page_rejects_out_of_bounds(page, size, field):
    with pytest.raises(ValidationFailed) as exc:
        validate_page(page, size)
    assert field in exc.value.errors


def test_validate_page_reports_custom_size_param():
    with pytest.raises(ValidationFailed) as exc:
        validate_page(1, 0, size_param="page_size")
    assert exc.value.errors["page_size"] == ["The page size field must be between 1 and 100."]


def test_paginated_total_reflects_predicate_not_table():
    for i in range(7):
        db.insert("user_categories", {"name": f"Alpha{i}" if i < 5 else f"Beta{i}"})
    page = paginated(
        "user_categories",
        Predicate.contains("name", "alpha"),
        page=2,
        size=2,
        serialize=lambda rows: [r["name"] for r in rows],
    )
    assert page["data"] == ["Alpha2", "Alpha3"]
    assert page["meta"]["total"] == 5
    assert page["meta"]["current_page"] == 2


def test_page_past_the_end_is_empty_not_an_error():
    db.insert("user_categories", {"name": "Only"})
    page = paginated("user_categories", None, page=5, size=10, serialize=list)
    assert page["data"] == []
    assert page["meta"]["total"] == 1


def test_listing_has_no_meta():
    assert listing(iter([1, 2])) == {"data": [1, 2]}
