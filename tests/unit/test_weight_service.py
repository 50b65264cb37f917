from __future__ import annotations

import datetime as dt

import pytest

from src.healthlog.api.schemas.weights import WeightPayload
from src.healthlog.auth import Caller
from src.healthlog.db.session import db_connection
from src.healthlog.errors import InvalidSearchQuery, OwnerNotFound, WeightIdExists, WeightNotFound
from src.healthlog.search.weight_index import WeightSearchIndex, to_match_expression, weight_search_index
from src.healthlog.services.weight_service import WeightService, page_meta, weight_service

NOW = dt.datetime(2026, 10, 18, 12, 0, tzinfo=dt.timezone.utc)


class _BrokenIndex(WeightSearchIndex):
    def save(self, record: dict) -> None:
        raise RuntimeError("index unavailable")


def _payload(**overrides) -> WeightPayload:
    fields = {"date_time": NOW, "value": 80.0}
    fields.update(overrides)
    return WeightPayload(**fields)


def _weight_rows() -> int:
    from sqlalchemy import text

    with db_connection() as connection:
        return connection.execute(text("SELECT COUNT(*) FROM weights")).scalar_one()


def test_create_with_id_is_rejected_without_writes(stores, user):
    with pytest.raises(WeightIdExists):
        weight_service.create(_payload(id=7), caller=user)

    assert _weight_rows() == 0
    assert weight_search_index.count() == 0


def test_create_assigns_id_and_forces_caller_as_owner(stores, user):
    record = weight_service.create(_payload(owner="bob"), caller=user)

    assert record["id"] == 1
    assert record["owner"] == "alice"
    assert record["value"] == 80.0
    assert record["date_time"] == "2026-10-18T12:00:00.000000Z"
    assert weight_service.get(1) == record


def test_create_normalizes_offsets_and_naive_times_to_utc(stores, user):
    offset = dt.datetime(2026, 10, 18, 14, 30, tzinfo=dt.timezone(dt.timedelta(hours=2)))
    first = weight_service.create(_payload(date_time=offset), caller=user)
    second = weight_service.create(_payload(date_time=dt.datetime(2026, 10, 18, 12, 30)), caller=user)

    assert first["date_time"] == "2026-10-18T12:30:00.000000Z"
    assert second["date_time"] == first["date_time"]


def test_admin_keeps_submitted_owner(stores, user, admin):
    weight_service.create(_payload(), caller=user)

    owned = weight_service.create(_payload(owner="alice", value=70.5), caller=admin)
    unowned = weight_service.create(_payload(value=71.0), caller=admin)

    assert owned["owner"] == "alice"
    assert unowned["owner"] is None


def test_admin_with_unknown_owner_fails(stores, admin):
    with pytest.raises(OwnerNotFound):
        weight_service.create(_payload(owner="nobody"), caller=admin)
    assert _weight_rows() == 0


def test_created_record_is_searchable(stores, user):
    record = weight_service.create(_payload(), caller=user)

    result = weight_service.search("alice", page=0, size=10)
    assert result["items"] == [record]
    assert result["page"]["total"] == 1

    by_value = weight_service.search("value:80", page=0, size=10)
    assert [item["id"] for item in by_value["items"]] == [record["id"]]


def test_search_ignores_ownership(stores):
    weight_service.create(_payload(), caller=Caller(login="bob"))

    result = weight_service.search("bob", page=0, size=10)
    assert result["page"]["total"] == 1
    assert result["items"][0]["owner"] == "bob"


def test_unparseable_search_query(stores):
    with pytest.raises(InvalidSearchQuery):
        weight_service.search('"unterminated', page=0, size=10)


def test_delete_removes_from_both_stores(stores, user):
    record = weight_service.create(_payload(), caller=user)

    weight_service.delete(record["id"])

    with pytest.raises(WeightNotFound):
        weight_service.get(record["id"])
    assert weight_service.search("alice", page=0, size=10)["items"] == []


def test_delete_unknown_id_succeeds(stores):
    weight_service.delete(999)


def test_update_without_id_creates(stores, user):
    record, created = weight_service.update(_payload(owner="mallory"), caller=user)

    assert created is True
    assert record["id"] == 1
    assert record["owner"] == "alice"
    assert weight_search_index.count() == 1


def test_update_replaces_record_and_index(stores, user):
    record = weight_service.create(_payload(), caller=user)

    updated, created = weight_service.update(
        _payload(id=record["id"], value=78.25, owner="alice", date_time=NOW - dt.timedelta(hours=1)),
        caller=user,
    )

    assert created is False
    assert updated["value"] == 78.25
    assert updated["date_time"] == "2026-10-18T11:00:00.000000Z"
    assert weight_service.search("value:78", page=0, size=10)["items"] == [updated]
    assert weight_service.search("value:80", page=0, size=10)["items"] == []


def test_update_is_wholesale_and_skips_ownership_checks(stores, user):
    record = weight_service.create(_payload(), caller=user)

    updated, _ = weight_service.update(_payload(id=record["id"]), caller=Caller(login="bob"))

    assert updated["owner"] is None


def test_update_unknown_id(stores, user):
    with pytest.raises(WeightNotFound):
        weight_service.update(_payload(id=42), caller=user)


def test_list_scopes_non_admins_to_their_records(stores, user, admin):
    bob = Caller(login="bob")
    weight_service.create(_payload(date_time=NOW - dt.timedelta(days=2)), caller=user)
    weight_service.create(_payload(date_time=NOW), caller=user)
    weight_service.create(_payload(date_time=NOW - dt.timedelta(days=1)), caller=bob)

    own = weight_service.list_page(caller=user, page=0, size=10)
    assert [item["owner"] for item in own["items"]] == ["alice", "alice"]
    assert [item["date_time"][:10] for item in own["items"]] == ["2026-10-18", "2026-10-16"]

    everything = weight_service.list_page(caller=admin, page=0, size=10)
    assert [item["date_time"][:10] for item in everything["items"]] == ["2026-10-18", "2026-10-17", "2026-10-16"]
    assert everything["page"]["total"] == 3


def test_list_paginates(stores, admin, user):
    for day in range(5):
        weight_service.create(_payload(date_time=NOW - dt.timedelta(days=day)), caller=user)

    second = weight_service.list_page(caller=admin, page=1, size=2)

    assert [item["id"] for item in second["items"]] == [3, 4]
    assert second["page"] == {"page": 1, "size": 2, "total": 5, "total_pages": 3, "has_next": True}


def test_readings_in_last_days_window(stores, user):
    inside = [
        weight_service.create(_payload(date_time=NOW - dt.timedelta(days=1)), caller=user),
        weight_service.create(_payload(date_time=NOW - dt.timedelta(days=6, hours=23)), caller=user),
        weight_service.create(_payload(date_time=NOW - dt.timedelta(days=7)), caller=user),
    ]
    weight_service.create(_payload(date_time=NOW - dt.timedelta(days=8)), caller=user)
    weight_service.create(_payload(date_time=NOW + dt.timedelta(hours=1)), caller=user)
    weight_service.create(_payload(date_time=NOW - dt.timedelta(days=2)), caller=Caller(login="bob"))

    result = weight_service.readings_in_last_days(7, caller=user, now=NOW)

    assert result["label"] == "Last 7 Days"
    assert result["readings"] == inside


def test_readings_in_last_days_ignores_admin_role(stores, user, admin):
    weight_service.create(_payload(date_time=NOW - dt.timedelta(days=1)), caller=user)

    result = weight_service.readings_in_last_days(7, caller=admin, now=NOW)

    assert result["readings"] == []


def test_index_failure_leaves_primary_write_in_place(stores, user):
    service = WeightService(_BrokenIndex())

    with pytest.raises(RuntimeError):
        service.create(_payload(), caller=user)

    assert _weight_rows() == 1
    assert weight_search_index.count() == 0


def test_page_meta_last_page():
    assert page_meta(page=2, size=2, total=5) == {"page": 2, "size": 2, "total": 5, "total_pages": 3, "has_next": False}
    assert page_meta(page=0, size=20, total=0)["total_pages"] == 0


@pytest.mark.parametrize(
    "query",
    ["80.0", "2026-10-18", "alice 80.0", "value:80.0", "12:00", "2026-10-18 AND owner:alice", "ali*"],
)
def test_search_accepts_punctuated_free_text(stores, user, query):
    record = weight_service.create(_payload(), caller=user)
    weight_service.create(_payload(value=91.5, date_time=NOW - dt.timedelta(days=3, hours=1)), caller=Caller(login="bob"))

    result = weight_service.search(query, page=0, size=10)

    assert result["items"] == [record]


def test_search_keeps_quoted_phrases_and_operators(stores, user):
    record = weight_service.create(_payload(), caller=user)

    assert weight_service.search('"80 0" OR nothing', page=0, size=10)["items"] == [record]
    assert weight_service.search("alice NOT 80.0", page=0, size=10)["items"] == []


def test_to_match_expression_quotes_only_punctuated_terms():
    assert to_match_expression("alice 80.0") == 'alice "80.0"'
    assert to_match_expression("value:78.25 OR (owner:bob)") == 'value:"78.25" OR ( owner:bob )'
    assert to_match_expression("2026-10* NOT bob") == '"2026-10"* NOT bob'
    assert to_match_expression('owner:"alice" "80 0"') == 'owner:"alice" "80 0"'


def test_early_years_keep_fixed_width_and_sort_first(stores, user, admin):
    ancient = weight_service.create(_payload(date_time=dt.datetime(999, 1, 1, tzinfo=dt.timezone.utc)), caller=user)
    recent = weight_service.create(_payload(), caller=user)

    assert ancient["date_time"] == "0999-01-01T00:00:00.000000Z"
    assert len(ancient["date_time"]) == len(recent["date_time"])

    listed = weight_service.list_page(caller=admin, page=0, size=10)
    assert [item["id"] for item in listed["items"]] == [recent["id"], ancient["id"]]
