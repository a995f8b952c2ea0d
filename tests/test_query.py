from library_api.app.core import db
from library_api.app.core.query import (
    FALSE,
    TRUE,
    Predicate,
    RangeFilter,
    all_of,
    any_of,
    build_predicate,
    where_clause,
)
from library_api.app.services.contact_service import SEARCH as CONTACT_SEARCH


def _user(username="owner"):
    return db.insert(
        "users",
        {"name": "Owner", "email": f"{username}@mail.com", "username": username, "password": "x$y"},
    )


def test_contains_escapes_like_wildcards():
    p = Predicate.contains("name", "50%_OFF\\")
    assert p.sql == "casefold(name) LIKE ? ESCAPE '\\'"
    assert p.params == ("%50\\%\\_off\\\\%",)


def test_any_of_skips_missing_and_returns_none_when_empty():
    assert any_of(None, None) is None
    single = Predicate.equals("a", 1)
    assert any_of(None, single) is single


def test_all_of_without_members_is_true():
    assert all_of() is TRUE
    assert all_of(None, TRUE) is TRUE
    assert where_clause(TRUE) == ("", ())


def test_combinators_nest_parentheses():
    p = all_of(Predicate.equals("a", 1), any_of(Predicate.equals("b", 2), Predicate.equals("c", 3)))
    assert p.sql == "(a = ?) AND ((b = ?) OR (c = ?))"
    assert p.params == (1, 2, 3)


def test_one_of_with_no_values_matches_nothing():
    assert Predicate.one_of("id", []).sql == "1 = 0"
    assert Predicate.one_of("id", [4, 5]).params == (4, 5)


def test_unsupplied_filters_add_no_constraint():
    base = Predicate.equals("user_id", 7)
    p = build_predicate(CONTACT_SEARCH, {"name": None, "phone": "", "email": "   "}, base=base)
    assert p is base


def test_multi_column_filter_is_ored_and_fields_are_anded():
    p = build_predicate(CONTACT_SEARCH, {"name": "jo", "phone": "08"}, base=Predicate.equals("user_id", 1))
    assert p.sql.count(" AND ") == 2
    assert " OR " in p.sql
    assert p.params == (1, "%jo%", "%jo%", "%08%")


def test_range_filter_needs_both_bounds():
    rng = RangeFilter("from", "to", "created_at")
    assert rng.build("2024-01-01", None) is None
    assert rng.build(None, "2024-01-01") is None
    assert rng.build("2024-01-01", "2024-02-01").params == ("2024-01-01", "2024-02-01")


def test_contains_is_case_insensitive_against_sqlite():
    owner = _user()
    for first, last in (("John", "Doe"), ("Mary", "JOHNSON"), ("Peter", "Pan")):
        db.insert("contacts", {"first_name": first, "last_name": last, "user_id": owner["id"]})
    rows = db.find_by_predicate("contacts", build_predicate(CONTACT_SEARCH, {"name": "john"}))
    assert [r["first_name"] for r in rows] == ["John", "Mary"]


def test_percent_in_search_value_is_literal():
    owner = _user()
    db.insert("contacts", {"first_name": "100% real", "user_id": owner["id"]})
    db.insert("contacts", {"first_name": "1000 fake", "user_id": owner["id"]})
    rows = db.find_by_predicate("contacts", build_predicate(CONTACT_SEARCH, {"name": "100%"}))
    assert [r["first_name"] for r in rows] == ["100% real"]


def test_contains_folds_non_ascii_case():
    owner = _user()
    db.insert("contacts", {"first_name": "ÉMILE", "last_name": "Zola", "user_id": owner["id"]})
    db.insert("contacts", {"first_name": "Straße", "user_id": owner["id"]})
    db.insert("contacts", {"first_name": "Emile", "user_id": owner["id"]})
    rows = db.find_by_predicate("contacts", build_predicate(CONTACT_SEARCH, {"name": "émile"}))
    assert [r["first_name"] for r in rows] == ["ÉMILE"]
    rows = db.find_by_predicate("contacts", build_predicate(CONTACT_SEARCH, {"name": "STRASSE"}))
    assert [r["first_name"] for r in rows] == ["Straße"]


def test_integers_beyond_sqlite_range_match_nothing():
    assert Predicate.equals("id", 2 ** 63) is FALSE
    assert Predicate.equals("id", -(2 ** 63) - 1) is FALSE
    assert Predicate.equals("id", 2 ** 63 - 1).params == (2 ** 63 - 1,)
    assert Predicate.one_of("id", [10 ** 20, 3]).params == (3,)
    owner = _user()
    assert db.find_one("users", Predicate.equals("id", 10 ** 20)) is None
    assert db.find_by_id("users", 10 ** 20) is None
    assert db.find_by_ids("users", [owner["id"], 10 ** 20]) == {owner["id"]: owner}
    assert db.update("users", 10 ** 20, {"name": "x"}) is None
    assert db.delete("users", 10 ** 20) is False
