from datetime import datetime, timezone

from sqlalchemy.exc import OperationalError

from todolist.models import Todo, Urgency
from todolist.repositories import RepoErrorKind, SQLModelTodoRepository


def make_repo(session):
    return SQLModelTodoRepository(session)


class TestCreate:
    def test_defaults(self, session, alice):
        result = make_repo(session).create(alice.id, "Buy milk", "<p>2%</p>")
        assert result.ok
        todo = result.value
        assert todo.id is not None
        assert todo.owner_id == alice.id
        assert todo.completed is False
        assert todo.urgency == Urgency.MEDIUM
        assert todo.due_date is None
        assert todo.created_at.tzinfo is not None
        assert todo.updated_at.tzinfo is not None

    def test_due_date_string_and_urgency(self, session, alice):
        result = make_repo(session).create(
            alice.id, "Pay rent", "<b>now</b>", due_date="2099-12-25T10:30:00Z", urgency="High"
        )
        assert result.ok
        assert result.value.due_date == datetime(2099, 12, 25, 10, 30, tzinfo=timezone.utc)
        assert result.value.urgency == Urgency.HIGH

    def test_blank_due_date_means_none(self, session, alice):
        result = make_repo(session).create(alice.id, "t", "d", due_date="")
        assert result.ok
        assert result.value.due_date is None

    def test_validation_errors_write_nothing(self, session, alice):
        repo = make_repo(session)
        bad_calls = [
            dict(title="", description="d"),
            dict(title="t", description="   "),
            dict(title="t", description="d", due_date="not-a-date"),
            dict(title="t", description="d", urgency="Urgent"),
        ]
        for kwargs in bad_calls:
            result = repo.create(alice.id, **kwargs)
            assert not result.ok
            assert result.error.kind == RepoErrorKind.VALIDATION

        assert repo.list_by_owner(alice.id).value == []


class TestListAndGet:
    def test_list_is_scoped_by_owner(self, session, alice, bob):
        repo = make_repo(session)
        first = repo.create(alice.id, "a1", "d").value
        repo.create(bob.id, "b1", "d")
        second = repo.create(alice.id, "a2", "d").value

        todos = repo.list_by_owner(alice.id).value
        assert [t.id for t in todos] == [first.id, second.id]
        assert all(t.owner_id == alice.id for t in todos)

    def test_get_missing_is_absent_not_error(self, session):
        result = make_repo(session).get_by_id(12345)
        assert result.ok
        assert result.value is None

    def test_ids_beyond_integer_range(self, session, alice):
        repo = make_repo(session)
        huge = 2**64

        found = repo.get_by_id(huge)
        assert found.ok
        assert found.value is None
        assert repo.update(huge, {"completed": True}).error.kind == RepoErrorKind.NOT_FOUND
        assert repo.delete(huge).error.kind == RepoErrorKind.NOT_FOUND


class TestUpdate:
    def test_only_supplied_fields_change(self, session, alice):
        repo = make_repo(session)
        todo = repo.create(alice.id, "Title", "<p>x</p>", due_date="2030-01-01").value

        result = repo.update(todo.id, {"completed": True})
        assert result.ok
        updated = result.value
        assert updated.completed is True
        assert updated.title == "Title"
        assert updated.description == "<p>x</p>"
        assert updated.due_date == datetime(2030, 1, 1, tzinfo=timezone.utc)
        assert updated.urgency == Urgency.MEDIUM

    def test_null_due_date_clears_and_omitted_keeps(self, session, alice):
        repo = make_repo(session)
        todo = repo.create(alice.id, "t", "d", due_date="2030-01-01").value

        kept = repo.update(todo.id, {"title": "renamed"}).value
        assert kept.due_date == datetime(2030, 1, 1, tzinfo=timezone.utc)

        cleared = repo.update(todo.id, {"due_date": None}).value
        assert cleared.due_date is None

    def test_updated_at_moves_forward(self, session, alice):
        repo = make_repo(session)
        todo = repo.create(alice.id, "t", "d").value
        before = todo.updated_at
        after = repo.update(todo.id, {"urgency": Urgency.LOW}).value.updated_at
        assert after >= before

    def test_missing_todo(self, session):
        result = make_repo(session).update(999, {"completed": True})
        assert result.error.kind == RepoErrorKind.NOT_FOUND

    def test_invalid_patches(self, session, alice):
        repo = make_repo(session)
        todo = repo.create(alice.id, "t", "d").value
        for patch in (
            {"title": None},
            {"title": ""},
            {"completed": "yes"},
            {"urgency": "Critical"},
            {"due_date": "someday"},
            {"owner_id": 42},
        ):
            result = repo.update(todo.id, patch)
            assert result.error.kind == RepoErrorKind.VALIDATION, patch

        session.refresh(todo)
        assert todo.title == "t"
        assert todo.owner_id == alice.id
        assert todo.completed is False


class TestDelete:
    def test_delete_removes_record(self, session, alice):
        repo = make_repo(session)
        todo = repo.create(alice.id, "t", "d").value

        assert repo.delete(todo.id).ok
        assert repo.get_by_id(todo.id).value is None
        assert repo.list_by_owner(alice.id).value == []

    def test_delete_missing(self, session):
        result = make_repo(session).delete(999)
        assert result.error.kind == RepoErrorKind.NOT_FOUND


class TestStorageFailure:
    def test_store_errors_become_results(self, session, alice, monkeypatch):
        repo = make_repo(session)

        def boom(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(session, "exec", boom)
        result = repo.list_by_owner(alice.id)
        assert not result.ok
        assert result.error.kind == RepoErrorKind.STORAGE

        monkeypatch.setattr(session, "commit", boom)
        result = repo.create(alice.id, "t", "d")
        assert result.error.kind == RepoErrorKind.STORAGE
        assert session.get(Todo, 1) is None
