from datetime import date
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from entry_store import EntryStore
from repository import EntryRepository, PersistenceError
from schemas import EntryDraft


def draft(**overrides):
    values = {
        "date": "2024-03-01",
        "client": "client-1",
        "task": "task-1",
        "docket_number": "ADI-77",
        "description": "Prior art search",
        "time_spent": "01:30",
    }
    values.update(overrides)
    return values


@pytest.fixture
def store(test_session, alice):
    return EntryStore(EntryRepository(test_session), alice)


def test_load_without_session_empties_list(test_session):
    store = EntryStore(EntryRepository(test_session), None)
    store.entries = ["stale"]
    result = store.load()
    assert result.success is False
    assert result.error == "auth_required"
    assert store.entries == []


def test_save_and_delete_without_session(test_session):
    store = EntryStore(EntryRepository(test_session), None)
    assert store.save(draft()).error == "auth_required"
    assert store.delete(1).error == "auth_required"


def test_save_creates_entry_stamped_with_session(store, alice):
    result = store.save(draft())
    assert result.success is True
    assert result.entry.user_id == alice.user_id
    assert result.entry.user_name == alice.username
    assert [e.id for e in store.entries] == [result.entry.id]


def test_entries_sorted_by_date_descending_after_each_save(store):
    store.save(draft(date="2024-03-04"))
    store.save(draft(date="2024-02-28"))
    store.save(draft(date="2024-03-06"))
    assert [e.date for e in store.entries] == [date(2024, 3, 6), date(2024, 3, 4), date(2024, 2, 28)]


def test_out_of_range_time_fails_validation(store):
    store.save(draft())
    before = list(store.entries)

    result = store.save(draft(time_spent="25:00"))
    assert result.success is False
    assert result.error == "validation"
    assert "Invalid time format" in result.message
    assert store.entries == before


@pytest.mark.parametrize("time_spent", ["0:00", "09:05", "23:59", "1:30"])
def test_valid_time_spent_values(store, time_spent):
    assert store.save(draft(time_spent=time_spent)).success is True


@pytest.mark.parametrize("time_spent", ["24:00", "12:60", "1230", "", "ab:cd", "01:30\n"])
def test_invalid_time_spent_values(store, time_spent):
    assert store.save(draft(time_spent=time_spent)).error == "validation"


def test_missing_date_fails_validation(store):
    values = draft()
    del values["date"]
    result = store.save(values)
    assert result.error == "validation"
    assert "Date is required." in result.message


def test_datetime_is_truncated_to_day(store):
    result = store.save(draft(date="2024-03-01T17:45:00"))
    assert result.entry.date == date(2024, 3, 1)


def test_edit_preserves_id_and_owner(store, alice):
    created = store.save(draft()).entry

    result = store.save(
        EntryDraft(
            date=date(2024, 3, 5),
            client="client-2",
            task="task-2",
            docket_number="APP-9",
            description="Office action response",
            time_spent="03:00",
        ),
        editing_id=created.id,
    )
    assert result.success is True
    edited = result.entry
    assert (edited.id, edited.user_id, edited.user_name) == (created.id, alice.user_id, alice.username)
    assert edited.date == date(2024, 3, 5)
    assert edited.client == "client-2"
    assert edited.task == "task-2"
    assert edited.docket_number == "APP-9"
    assert edited.description == "Office action response"
    assert edited.time_spent == "03:00"
    assert len(store.entries) == 1


def test_delete_unknown_id_fails_and_keeps_list(store):
    store.save(draft())
    before = list(store.entries)

    result = store.delete(424242)
    assert result.success is False
    assert result.error == "not_found"
    assert store.entries == before


def test_delete_removes_entry(store):
    entry_id = store.save(draft()).entry.id
    assert store.delete(entry_id).success is True
    assert store.entries == []


def test_entries_between(store):
    for day in ("2024-03-01", "2024-03-04", "2024-03-06"):
        store.save(draft(date=day))

    in_range = store.entries_between(date(2024, 3, 2), date(2024, 3, 6))
    assert [e.date for e in in_range] == [date(2024, 3, 6), date(2024, 3, 4)]
    assert len(store.entries_between(date_to=date(2024, 3, 1))) == 1
    assert len(store.entries_between()) == 3


def test_load_failure_empties_list(alice):
    repository = MagicMock(spec=EntryRepository)
    repository.list_for_user.side_effect = PersistenceError("Failed to fetch timeline entries.")
    store = EntryStore(repository, alice)
    store.entries = ["stale"]

    result = store.load()
    assert result.success is False
    assert result.error == "persistence"
    assert store.entries == []
    assert store.loading is False


def test_loading_flag_is_set_while_fetching(alice):
    repository = MagicMock(spec=EntryRepository)
    store = EntryStore(repository, alice)
    seen = []

    def list_for_user(user_id):
        seen.append(store.loading)
        return []

    repository.list_for_user.side_effect = list_for_user
    store.load()
    assert seen == [True]
    assert store.loading is False


def test_save_failure_leaves_state_untouched(alice):
    repository = MagicMock(spec=EntryRepository)
    repository.get.return_value = None
    repository.create.side_effect = PersistenceError("Failed to create timeline entry.")
    store = EntryStore(repository, alice)
    store.entries = ["existing"]

    result = store.save(draft())
    assert result.success is False
    assert result.error == "persistence"
    assert result.message == "Failed to create timeline entry."
    assert store.entries == ["existing"]
    repository.list_for_user.assert_not_called()


def test_delete_failure_leaves_state_untouched(alice):
    repository = MagicMock(spec=EntryRepository)
    repository.delete.side_effect = PersistenceError("Failed to delete timeline entry.")
    store = EntryStore(repository, alice)
    store.entries = ["existing"]

    result = store.delete(1)
    assert result.error == "persistence"
    assert store.entries == ["existing"]


def test_repository_wraps_database_errors():
    session = MagicMock()
    session.exec.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
    repository = EntryRepository(session)

    with pytest.raises(PersistenceError):
        repository.list_for_user(1)
    session.rollback.assert_called_once()
