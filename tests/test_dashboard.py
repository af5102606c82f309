from datetime import date, datetime, timezone

import pytest

from models.results import StoreResult
from services.dashboard import (
    CLOSED,
    CREATE,
    DUPLICATE,
    EDIT,
    OPEN,
    SUBMITTING,
    DashboardController,
    due_label,
)
from services.linkify import LinkSegment, TextSegment
from services.task_sync import SyncCoordinator
from services.validation import TaskForm
from tests.fakes import FakeCalendar


UTC = timezone.utc
DAY = date(2024, 1, 1)


@pytest.fixture()
def notes():
    return []


@pytest.fixture()
def controller(auth_session, store, coordinator, notes):
    return DashboardController(
        auth_session,
        store,
        coordinator,
        notify=lambda title, description: notes.append((title, description)),
        selected_date=DAY,
    )


def _insert(store, when, title="Task", user_id="user-1", **extra):
    return store.insert(
        title=title,
        description="Something to do today",
        reminder_time=when,
        user_id=user_id,
        **extra,
    ).data


def _form(hour=10, title="Read"):
    return TaskForm(
        title=title,
        description="Read ten pages",
        reminder_time=datetime(2024, 1, 1, hour, tzinfo=UTC),
    )


def test_day_window_is_utc_and_inclusive(controller):
    start, end = controller.day_window(DAY)

    assert start == datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC)
    assert end == datetime(2024, 1, 1, 23, 59, 59, tzinfo=UTC)


def test_load_includes_last_second_and_excludes_next_midnight(controller, store):
    _insert(store, datetime(2024, 1, 1, 23, 59, 59, tzinfo=UTC), title="late")
    _insert(store, datetime(2024, 1, 2, 0, 0, 0, tzinfo=UTC), title="tomorrow")
    _insert(store, datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC), title="early")

    controller.load()

    assert [t.title for t in controller.tasks] == ["early", "late"]


def test_load_only_shows_session_user(controller, store):
    _insert(store, datetime(2024, 1, 1, 9, tzinfo=UTC), title="mine")
    _insert(store, datetime(2024, 1, 1, 9, tzinfo=UTC), title="theirs", user_id="other")

    controller.load()

    assert [t.title for t in controller.tasks] == ["mine"]


def test_load_failure_keeps_current_list_and_notifies(controller, store, notes, monkeypatch):
    _insert(store, datetime(2024, 1, 1, 9, tzinfo=UTC), title="kept")
    controller.load()

    monkeypatch.setattr(
        store, "select_range",
        lambda start, end, user_id: StoreResult.failure("Could not load task", "connection refused"),
    )
    result = controller.load()

    assert not result.ok
    assert [t.title for t in controller.tasks] == ["kept"]
    assert controller.error.details == "connection refused"
    assert notes[-1] == ("Could not load task", "connection refused")


def test_set_date_reloads_for_new_day(controller, store):
    _insert(store, datetime(2024, 1, 2, 8, tzinfo=UTC), title="next day")

    controller.load()
    assert controller.tasks == []

    controller.set_date(date(2024, 1, 2))
    assert [t.title for t in controller.tasks] == ["next day"]


def test_mount_subscribes_once_and_reloads_on_changes(controller, store):
    loads = []
    controller.on_tasks_changed = lambda tasks: loads.append([t.title for t in tasks])

    controller.mount()
    controller.mount()
    _insert(store, datetime(2024, 1, 1, 9, tzinfo=UTC), title="from elsewhere")

    assert loads[-1] == ["from elsewhere"]
    # one load per mount call plus exactly one for the insert notification
    assert len(loads) == 3


def test_unmount_tears_down_subscription(controller, store):
    controller.mount()
    controller.unmount()

    _insert(store, datetime(2024, 1, 1, 9, tzinfo=UTC), title="unseen")

    assert controller.tasks == []
    assert not controller.mounted


def test_create_dispatch_notifies_and_refreshes(controller, notes):
    controller.mount()

    assert controller.create(_form()) is True

    assert notes[-1] == ("Task created", "Task has been created")
    assert [t.title for t in controller.tasks] == ["Read"]
    assert controller.tasks[0].event_id == "evt-1"


def test_create_refreshes_without_subscription(controller):
    controller.create(_form())

    assert [t.title for t in controller.tasks] == ["Read"]


def test_calendar_error_is_caught_and_reported(auth_session, store, notes):
    calendar = FakeCalendar(fail_on={"create"})
    controller = DashboardController(
        auth_session,
        store,
        SyncCoordinator(auth_session, store, calendar_factory=lambda token: calendar),
        notify=lambda title, description: notes.append((title, description)),
        selected_date=DAY,
    )

    assert controller.create(_form()) is False

    assert notes[-1] == ("Error", "Invalid Credentials")
    controller.load()
    assert controller.tasks == []


def test_edit_complete_delete_flow(controller, calendar, notes):
    controller.mount()
    controller.create(_form(hour=10))
    task = controller.tasks[0]

    controller.edit(task, _form(hour=14, title="Read more"))
    assert notes[-1] == ("Task updated", "Task has been updated")
    task = controller.tasks[0]
    assert task.title == "Read more"
    assert task.event_id == "evt-1"

    controller.complete(task)
    assert notes[-1] == ("Task completed", "Task has been marked as completed")
    assert controller.tasks[0].completed is True

    controller.delete(controller.tasks[0])
    assert notes[-1] == ("Task deleted", "Task has been deleted")
    assert controller.tasks == []
    assert calendar.ops() == ["create", "update", "delete"]


def test_delete_with_calendar_failure_still_removes_row(auth_session, store, notes):
    calendar = FakeCalendar(fail_on={"delete"})
    controller = DashboardController(
        auth_session,
        store,
        SyncCoordinator(auth_session, store, calendar_factory=lambda token: calendar),
        notify=lambda title, description: notes.append((title, description)),
        selected_date=DAY,
    )
    controller.mount()
    controller.create(_form())

    assert controller.delete(controller.tasks[0]) is True

    assert controller.tasks == []
    title, description = notes[-1]
    assert title == "Task deleted"
    assert "Invalid Credentials" in description


def test_store_error_on_dispatch_is_reported(controller, notes):
    class Ghost:
        id = 12345
        event_id = None

    assert controller.complete(Ghost()) is False
    assert notes[-1][0] == "Could not update task"


def test_cards_hide_actions_for_completed_and_split_links(controller, store):
    _insert(store, datetime(2024, 1, 1, 9, 5, tzinfo=UTC), title="open")
    store.insert(
        title="done",
        description="See https://example.com/page.",
        reminder_time=datetime(2024, 1, 1, 10, tzinfo=UTC),
        user_id="user-1",
        completed=True,
    )
    controller.load()

    first, second = controller.cards()

    assert first.show_actions is True
    assert first.due == "9:05:00 AM"
    assert second.show_actions is False
    assert second.segments == (
        TextSegment("See "),
        LinkSegment("https://example.com/page"),
        TextSegment("."),
    )


def test_due_label_uses_viewer_time_zone(store):
    task = _insert(store, datetime(2024, 1, 1, 10, tzinfo=UTC))

    assert due_label(task, "America/New_York") == "5:00:00 AM"


def test_sign_out_unmounts_and_calls_back(controller):
    signed_out = []
    controller.on_sign_out = lambda: signed_out.append(True)
    controller.mount()

    controller.sign_out()

    assert signed_out == [True]
    assert not controller.mounted


# ----- task modal -----

def test_modal_happy_path_goes_through_submitting(controller, monkeypatch):
    modal = controller.modal(CREATE)
    assert modal.state == CLOSED
    modal.open()
    assert modal.state == OPEN
    assert modal.title == "Create Task"

    seen = []
    original = controller.create

    def spy(form):
        seen.append(modal.state)
        return original(form)

    monkeypatch.setattr(controller, "create", spy)

    result = modal.submit({
        "title": "Read",
        "description": "Read ten pages",
        "reminder_time": datetime(2024, 1, 1, 10, tzinfo=UTC),
    })

    assert result.ok
    assert seen == [SUBMITTING]
    assert modal.state == CLOSED


def test_modal_validation_errors_keep_it_open(controller, calendar):
    modal = controller.modal(CREATE)
    modal.open()

    result = modal.submit({"title": "R", "description": "short", "reminder_time": None})

    assert not result.ok
    assert modal.state == OPEN
    assert modal.error_for("title") == "Task title must be at least 2 characters."
    assert modal.error_for("description") == "Task description must be at least 10 characters."
    assert modal.error_for("reminder_time") is not None
    assert calendar.calls == []


def test_modal_closes_even_when_dispatch_fails(auth_session, store, notes):
    calendar = FakeCalendar(fail_on={"create"})
    controller = DashboardController(
        auth_session,
        store,
        SyncCoordinator(auth_session, store, calendar_factory=lambda token: calendar),
        notify=lambda title, description: notes.append((title, description)),
        selected_date=DAY,
    )
    modal = controller.modal(CREATE)
    modal.open()

    modal.submit({
        "title": "Read",
        "description": "Read ten pages",
        "reminder_time": datetime(2024, 1, 1, 10, tzinfo=UTC),
    })

    assert modal.state == CLOSED
    assert notes[-1][0] == "Error"


def test_modal_rejects_submit_when_closed(controller):
    modal = controller.modal(CREATE)

    with pytest.raises(RuntimeError):
        modal.submit({})


def test_edit_modal_prefills_and_updates(controller, calendar):
    controller.mount()
    controller.create(_form(hour=10))
    task = controller.tasks[0]

    modal = controller.modal(EDIT, task)
    modal.open()
    assert modal.title == "Edit Task"
    assert modal.shows_status_field is True
    assert modal.values["title"] == "Read"
    assert modal.values["reminder_time"] == datetime(2024, 1, 1, 10, tzinfo=UTC)

    values = dict(modal.values, reminder_time=datetime(2024, 1, 1, 14, tzinfo=UTC))
    modal.submit(values)

    assert calendar.calls[-1][:2] == ("update", "evt-1")
    assert len(controller.tasks) == 1


def test_duplicate_modal_creates_a_new_task(controller, calendar):
    controller.mount()
    controller.create(_form(hour=10))
    controller.complete(controller.tasks[0])
    original = controller.tasks[0]

    modal = controller.modal(DUPLICATE, original)
    modal.open()
    assert modal.title == "Create Task"
    assert modal.shows_status_field is False
    assert modal.values["completed"] is False
    modal.submit(dict(modal.values))

    assert len(controller.tasks) == 2
    assert {t.event_id for t in controller.tasks} == {"evt-1", "evt-2"}


def test_modal_requires_task_for_edit(controller):
    with pytest.raises(ValueError):
        controller.modal(EDIT)
