"""
Tests du client : session, cache des tâches, saisie différée.

Le client HTTP est le TestClient FastAPI, donc les appels traversent la vraie API.
"""

from datetime import date
from unittest.mock import patch, MagicMock

import pytest

from daily_tasks.client.api import ApiClient, ApiError
from daily_tasks.client.debounce import DebouncedField
from daily_tasks.client.session import CloudSession, SessionHolder
from daily_tasks.client.store import StoreError, TaskStore
from daily_tasks.schemas.user import CloudUser

DAY = date(2024, 1, 1)


class FakeTimer:
    def __init__(self, delay, function, args=()):
        self.delay = delay
        self.function = function
        self.args = args
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if not self.cancelled:
            self.function(*self.args)


@pytest.fixture
def timers():
    created = []

    def factory(delay, function, args=()):
        timer = FakeTimer(delay, function, args)
        created.append(timer)
        return timer

    factory.created = created
    return factory


@pytest.fixture
def holder():
    return SessionHolder()


@pytest.fixture
def api(client, holder):
    return ApiClient(holder, http=client)


@pytest.fixture
def store(api):
    store = TaskStore(api)
    yield store
    store.close()


def seed(client, headers, name, **extra):
    body = {"name": name, "category": "seo", "date": DAY.isoformat()}
    body.update(extra)
    return client.post("/tasks", headers=headers, json=body).json()


# ============ SESSION ============

def test_holder_notifies_subscribers(holder):
    seen = []
    unsubscribe = holder.subscribe(seen.append)
    session = CloudSession(access_token="t", user=CloudUser(id="u", email="u@x.io", display_name="U"))

    holder.set(session)
    holder.clear()
    holder.clear()  # déjà déconnecté : pas de nouvelle notification
    unsubscribe()
    holder.set(session)

    assert seen == [session, None]


def test_sign_in_resolves_user(api, holder, alice_token):
    user = api.sign_in(alice_token, provider_token="google-token")
    assert user.display_name == "Alice"
    assert holder.current.provider_token == "google-token"


def test_sign_in_with_bad_token(api, holder):
    with pytest.raises(ApiError) as exc:
        api.sign_in("bad")
    assert exc.value.status_code == 401
    assert holder.current is None


# ============ STORE ============

def test_store_loads_on_sign_in(client, api, store, alice_token, bob_headers):
    seed(client, bob_headers, "Bob's task")
    assert store.all == []

    api.sign_in(alice_token)

    assert [t.name for t in store.all] == ["Bob's task"]
    assert store.mine == []


def test_store_clears_on_sign_out(client, api, store, alice_token):
    api.sign_in(alice_token)
    store.add_task("Report", "seo", DAY)
    assert len(store.mine) == 1

    with patch("daily_tasks.services.identity_service.requests.post") as mock_post:
        mock_post.return_value = MagicMock()
        api.sign_out()

    assert store.mine == []
    assert store.all == []


def test_add_task_refetches(api, store, alice_token):
    api.sign_in(alice_token)
    created = store.add_task("Report", "seo", DAY, "09:00", "18:15")
    store.add_task("Follow-up", "seo", DAY)

    assert created.sort_order == 10
    assert [t.sort_order for t in store.mine] == [10, 20]
    assert len(store.all) == 2


def test_add_task_blank_name_is_ignored(api, store, alice_token):
    api.sign_in(alice_token)
    assert store.add_task("  ", "seo", DAY) is None
    assert store.mine == []


def test_add_task_calendar_failure_keeps_task(api, store, alice_token):
    api.sign_in(alice_token)
    created = store.add_task("Call", "seo", DAY, add_to_calendar=True)
    assert created.calendar_error
    assert len(store.mine) == 1


def test_update_not_owned_is_noop(client, api, store, alice_token, bob_headers):
    bob_task = seed(client, bob_headers, "Bob's task")
    api.sign_in(alice_token)

    with patch.object(api, "request", wraps=api.request) as spy:
        assert store.update_task(bob_task["id"], status="done") is False
        assert store.delete_task(bob_task["id"]) is False
    spy.assert_not_called()

    assert store.find(bob_task["id"]).status == "not_started"


def test_update_own_task(api, store, alice_token):
    api.sign_in(alice_token)
    task = store.add_task("Report", "seo", DAY)

    assert store.update_task(task.id, status="in_progress", actual_hours=1.5, name="ignored") is True

    refreshed = store.find(task.id)
    assert refreshed.status == "in_progress"
    assert refreshed.actual_hours == 1.5
    assert refreshed.name == "Report"


def test_update_failure_keeps_cache(client, api, store, alice_token, alice_headers):
    api.sign_in(alice_token)
    task = store.add_task("Report", "seo", DAY)
    client.delete(f"/tasks/{task.id}", headers=alice_headers)

    with pytest.raises(StoreError):
        store.update_task(task.id, status="done")
    assert [t.id for t in store.mine] == [task.id]


def test_delete_own_task(api, store, alice_token):
    api.sign_in(alice_token)
    task = store.add_task("Temp", "seo", DAY)
    assert store.delete_task(task.id) is True
    assert store.mine == []


def test_reorder_and_board(api, store, alice_token):
    api.sign_in(alice_token)
    first = store.add_task("first", "seo", DAY, "09:00", "10:00")
    store.add_task("second", "seo", DAY, "10:00", "12:30")
    third = store.add_task("third", "seo", DAY, "13:00", "13:15")

    assert store.reorder(third.id, first.id) is True

    board = store.board(DAY)
    assert [label for label, _ in board.groups] == ["Alice"]
    rows = board.groups[0][1]
    assert [t.name for t in rows] == ["third", "first", "second"]
    assert [t.sort_order for t in rows] == [10, 20, 30]
    assert board.totals.planned == 3.75
    assert store.members() == ["all", "Alice"]


def test_reorder_failure_reloads_real_state(api, store, alice_token, failing_commit_on):
    api.sign_in(alice_token)
    a = store.add_task("a", "seo", DAY)
    store.add_task("b", "seo", DAY)
    c = store.add_task("c", "seo", DAY)

    with failing_commit_on(2):
        with pytest.raises(StoreError):
            store.reorder(c.id, a.id)

    # le cache reflète les écritures déjà passées
    assert {t.name: t.sort_order for t in store.mine} == {"a": 10, "b": 20, "c": 10}


def test_reorder_not_owned_is_noop(client, api, store, alice_token, bob_headers):
    a = seed(client, bob_headers, "a")
    b = seed(client, bob_headers, "b")
    api.sign_in(alice_token)
    assert store.reorder(b["id"], a["id"]) is False


# ============ DEBOUNCE ============

def test_debounce_keeps_last_value(timers):
    saved = []
    field = DebouncedField(saved.append, delay=0.6, timer_factory=timers)

    field.change("a")
    field.change("ab")

    first, second = timers.created
    assert first.cancelled and not second.cancelled
    assert second.delay == 0.6
    first.fire()
    second.fire()
    assert saved == ["ab"]


def test_debounce_suppressed_during_composition(timers):
    saved = []
    field = DebouncedField(saved.append, timer_factory=timers)

    field.change("k")
    field.composition_start()
    field.change("かn")
    field.blur("かn")
    assert saved == []
    assert len(timers.created) == 1 and timers.created[0].cancelled

    field.composition_end("かん")
    timers.created[-1].fire()
    assert saved == ["かん"]


def test_debounce_blur_flushes_now(timers):
    saved = []
    field = DebouncedField(saved.append, timer_factory=timers)

    field.change("draft")
    field.blur("draft")

    assert saved == ["draft"]
    assert timers.created[0].cancelled


def test_debounce_close_cancels(timers):
    saved = []
    field = DebouncedField(saved.append, timer_factory=timers)
    field.change("x")
    field.close()
    timers.created[0].fire()
    assert saved == []


def test_store_text_field_persists(api, store, alice_token, timers):
    api.sign_in(alice_token)
    task = store.add_task("Report", "seo", DAY)

    field = store.text_field(task.id, "retrospective", timer_factory=timers)
    field.change("Went")
    field.change("Went well")
    timers.created[-1].fire()

    assert store.find(task.id).retrospective == "Went well"


def test_store_text_field_rejects_other_fields(store):
    with pytest.raises(ValueError):
        store.text_field("id", "status")
