from datetime import date
from unittest.mock import Mock

import pytest

from taskbook.errors import (
    Forbidden,
    NotFound,
    Unauthenticated,
    UpstreamUnavailable,
    ValidationError,
)
from taskbook.gateways.tasks import TaskGateway
from taskbook.providers.documents import DocumentStore, DocumentStoreError


def _create(tasks, principal, title="Task", when="2024-03-05", **overrides):
    fields = dict(
        title=title,
        description="Details",
        status="Pending",
        priority="Medium",
        date=when,
    )
    fields.update(overrides)
    return tasks.create(principal, **fields)


def test_pay_rent_scenario(tasks, alice):
    created = tasks.create(
        alice,
        title="Pay rent",
        description="Monthly",
        status="Pending",
        priority="High",
        date="2024-03-05",
    )

    assert created.id
    assert created.status == "Pending"
    assert created.month == 3
    assert created.year == 2024
    assert created.user_id == alice.user_id

    march = tasks.list_by_month(alice, 3, 2024)
    assert [t.id for t in march] == [created.id]
    assert tasks.list_by_month(alice, 4, 2024) == []


def test_operations_without_principal_never_touch_store():
    store = Mock(spec=DocumentStore)
    tasks = TaskGateway(store)

    with pytest.raises(Unauthenticated):
        _create(tasks, None)
    with pytest.raises(Unauthenticated):
        tasks.list_all(None)
    with pytest.raises(Unauthenticated):
        tasks.list_by_month(None, 3, 2024)
    with pytest.raises(Unauthenticated):
        tasks.get(None, "task-id")
    with pytest.raises(Unauthenticated):
        tasks.update(None, "task-id", "t", "d", "Pending", "Low", "2024-01-01")
    with pytest.raises(Unauthenticated):
        tasks.delete(None, "task-id")

    assert store.method_calls == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": ""},
        {"title": "   "},
        {"description": ""},
        {"status": "Done"},
        {"priority": "Urgent"},
        {"when": "2024-02-30"},
        {"when": "05/03/2024"},
        {"when": "2024-W10-1"},
        {"when": ""},
    ],
)
def test_create_validation_happens_before_store(alice, overrides):
    store = Mock(spec=DocumentStore)
    tasks = TaskGateway(store)

    with pytest.raises(ValidationError):
        _create(tasks, alice, **overrides)
    store.insert.assert_not_called()


def test_list_all_is_isolated_per_user(tasks, alice, bob):
    mine = {_create(tasks, alice, title=f"Alice {i}").id for i in range(3)}
    theirs = {_create(tasks, bob, title=f"Bob {i}").id for i in range(2)}

    assert {t.id for t in tasks.list_all(alice)} == mine
    assert {t.id for t in tasks.list_all(bob)} == theirs
    assert all(t.user_id == bob.user_id for t in tasks.list_all(bob))


def test_list_all_orders_by_creation_time_descending(tasks, alice):
    for i in range(4):
        _create(tasks, alice, title=f"Task {i}")

    created = [t.created_at for t in tasks.list_all(alice)]

    assert created == sorted(created, reverse=True)


def test_list_by_month_is_a_filter_of_list_all(tasks, alice, bob):
    for when in ["2024-01-31", "2024-02-01", "2024-02-29", "2024-03-05", "2023-02-10", "2024-12-31"]:
        _create(tasks, alice, when=when)
    _create(tasks, bob, when="2024-02-15")

    everything = tasks.list_all(alice)
    for month, year in [(1, 2024), (2, 2024), (2, 2023), (12, 2024), (6, 2024)]:
        expected = {
            t.id for t in everything
            if date.fromisoformat(t.date).month == month and date.fromisoformat(t.date).year == year
        }
        assert {t.id for t in tasks.list_by_month(alice, month, year)} == expected


def test_list_by_month_orders_by_date_descending(tasks, alice):
    for when in ["2024-05-02", "2024-05-20", "2024-05-11"]:
        _create(tasks, alice, when=when)

    assert [t.date for t in tasks.list_by_month(alice, 5, 2024)] == [
        "2024-05-20",
        "2024-05-11",
        "2024-05-02",
    ]


@pytest.mark.parametrize("month,year", [(0, 2024), (13, 2024), (3, 1999), (3, 2101)])
def test_list_by_month_rejects_out_of_range(tasks, alice, month, year):
    with pytest.raises(ValidationError):
        tasks.list_by_month(alice, month, year)


def test_update_reflects_new_fields_and_refreshes_timestamp(tasks, alice):
    original = _create(tasks, alice, title="Draft", when="2024-03-05")

    updated = tasks.update(
        alice, original.id, "Final", "Reworded", "Completed", "High", "2024-07-14"
    )

    assert updated.title == "Final"
    assert updated.month == 7
    assert updated.updated_at > original.updated_at
    assert updated.created_at == original.created_at

    [listed] = tasks.list_all(alice)
    assert listed.id == original.id
    assert listed.title == "Final"
    assert listed.description == "Reworded"
    assert listed.status == "Completed"
    assert listed.priority == "High"
    assert listed.date == "2024-07-14"
    assert listed.updated_at > original.updated_at
    assert tasks.list_by_month(alice, 3, 2024) == []
    assert [t.id for t in tasks.list_by_month(alice, 7, 2024)] == [original.id]


def test_status_can_move_backwards(tasks, alice):
    task = _create(tasks, alice, status="Completed")

    reopened = tasks.update(alice, task.id, task.title, task.description, "Pending", task.priority, task.date)

    assert reopened.status == "Pending"


def test_update_missing_task(tasks, alice):
    with pytest.raises(NotFound):
        tasks.update(alice, "missing", "t", "d", "Pending", "Low", "2024-01-01")


def test_update_enforces_ownership(tasks, alice, bob):
    task = _create(tasks, alice, title="Private")

    with pytest.raises(Forbidden):
        tasks.update(bob, task.id, "Hijacked", "d", "Pending", "Low", "2024-01-01")

    assert tasks.get(alice, task.id).title == "Private"


def test_get_enforces_ownership(tasks, alice, bob):
    task = _create(tasks, alice)

    assert tasks.get(alice, task.id).id == task.id
    with pytest.raises(Forbidden):
        tasks.get(bob, task.id)


def test_delete_removes_task_permanently(tasks, alice):
    keep = _create(tasks, alice, title="Keep")
    drop = _create(tasks, alice, title="Drop")

    tasks.delete(alice, drop.id)

    assert [t.id for t in tasks.list_all(alice)] == [keep.id]
    with pytest.raises(NotFound):
        tasks.get(alice, drop.id)
    with pytest.raises(NotFound):
        tasks.delete(alice, drop.id)


def test_delete_enforces_ownership(tasks, alice, bob):
    task = _create(tasks, alice)

    with pytest.raises(Forbidden):
        tasks.delete(bob, task.id)

    assert [t.id for t in tasks.list_all(alice)] == [task.id]


def test_concurrent_style_creates_are_not_deduplicated(tasks, alice):
    first = _create(tasks, alice, title="Same")
    second = _create(tasks, alice, title="Same")

    assert first.id != second.id
    assert len(tasks.list_all(alice)) == 2


def test_store_failures_map_to_upstream_unavailable(alice):
    store = Mock(spec=DocumentStore)
    store.insert.side_effect = DocumentStoreError("unavailable")
    store.query.side_effect = DocumentStoreError("unavailable")
    store.get.side_effect = DocumentStoreError("unavailable")
    tasks = TaskGateway(store)

    with pytest.raises(UpstreamUnavailable):
        _create(tasks, alice)
    with pytest.raises(UpstreamUnavailable):
        tasks.list_all(alice)
    with pytest.raises(UpstreamUnavailable):
        tasks.list_by_month(alice, 3, 2024)
    with pytest.raises(UpstreamUnavailable):
        tasks.delete(alice, "task-id")


def test_list_by_month_rejects_boolean_month(tasks, alice):
    with pytest.raises(ValidationError):
        tasks.list_by_month(alice, True, 2024)
