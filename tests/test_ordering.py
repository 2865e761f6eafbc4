from datetime import date, datetime
from types import SimpleNamespace

import pytest

from daily_tasks.services.ordering import group_key, next_sort_order, reorder, sort_group

DAY = date(2024, 1, 1)


def make(id, sort_order, minute=0, member="Alice", owner="alice-id"):
    return SimpleNamespace(
        id=id, sort_order=sort_order, member=member, owner_id=owner, date=DAY,
        created_at=datetime(2024, 1, 1, 8, minute),
    )


def test_next_sort_order_empty_group():
    assert next_sort_order([]) == 10


def test_next_sort_order_uses_max():
    assert next_sort_order([make("a", 10), make("b", 40), make("c", None)]) == 50


def test_sort_group_tie_break_on_created_at():
    early = make("early", 10, minute=1)
    late = make("late", 10, minute=5)
    keyless = make("keyless", None, minute=0)
    assert [t.id for t in sort_group([late, keyless, early])] == ["early", "late", "keyless"]


def test_group_key_placeholder_member():
    assert group_key(make("a", 10, member="")) == (DAY, "-", "alice-id")


def test_reorder_scenario():
    """keys 10, 20, 30 ; move 30 before 10"""
    a, b, c = make("a", 10), make("b", 20), make("c", 30)
    changes = reorder([a, b, c], "c", "a")
    assert [(t.id, key) for t, key in changes] == [("c", 10), ("a", 20), ("b", 30)]


def test_reorder_only_reports_changed_keys():
    a, b, c, d = make("a", 10), make("b", 20), make("c", 30), make("d", 40)
    changes = reorder([a, b, c, d], "b", "a")
    assert [(t.id, key) for t, key in changes] == [("b", 10), ("a", 20)]


def test_reorder_renumbers_sparse_keys():
    a, b, c = make("a", 15), make("b", 70), make("c", None)
    changes = dict((t.id, key) for t, key in reorder([a, b, c], "c", "b"))
    assert changes == {"a": 10, "c": 20, "b": 30}


def test_reorder_errors():
    a, b = make("a", 10), make("b", 20)
    with pytest.raises(ValueError):
        reorder([a, b], "a", "a")
    with pytest.raises(ValueError):
        reorder([a, b], "a", "zzz")
