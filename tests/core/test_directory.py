"""Tests for DirectoryRepository - canonical user records."""

from datetime import timedelta
from unittest.mock import Mock

import psycopg2
import psycopg2.errors
import pytest

from auth.exceptions import ConflictError, InternalFailureError, NotFoundError
from auth.types import UserStatus
from clients.postgres_client import PostgresClient
from core.directory import DirectoryRepository
from utils.timezone import now_utc


@pytest.fixture
def db():
    return Mock(spec=PostgresClient)


@pytest.fixture
def directory(db):
    return DirectoryRepository(db)


def row(user_id, **overrides):
    values = {
        "id": user_id,
        "sync_code": "sync-1",
        "status": "active",
        "archived_at": None,
        "delete_after": None,
        "created_at": now_utc(),
    }
    values.update(overrides)
    return values


class TestCreateUser:

    def test_returns_active_user(self, directory, db, test_user_id):
        db.execute_single.return_value = row(test_user_id)

        user = directory.create_user(test_user_id)

        assert user.id == test_user_id
        assert user.status is UserStatus.ACTIVE

    def test_generates_sync_code(self, directory, db, test_user_id):
        db.execute_single.return_value = row(test_user_id)

        directory.create_user(test_user_id)

        params = db.execute_single.call_args.args[1]
        assert params[0] == test_user_id
        assert len(params[1]) >= 32

    def test_sync_codes_differ(self, directory, db, test_user_id):
        db.execute_single.return_value = row(test_user_id)

        directory.create_user(test_user_id)
        directory.create_user(test_user_id)

        first, second = (c.args[1][1] for c in db.execute_single.call_args_list)
        assert first != second

    def test_duplicate_id_conflict(self, directory, db, test_user_id):
        db.execute_single.side_effect = psycopg2.errors.UniqueViolation("duplicate key")

        with pytest.raises(ConflictError):
            directory.create_user(test_user_id)

    def test_driver_error_internal_failure(self, directory, db, test_user_id):
        db.execute_single.side_effect = psycopg2.OperationalError("connection lost")

        with pytest.raises(InternalFailureError):
            directory.create_user(test_user_id)


class TestLifecycle:

    def test_get_missing_user_not_found(self, directory, db, test_user_id):
        db.execute_single.return_value = None

        with pytest.raises(NotFoundError):
            directory.get_user(test_user_id)

    def test_archive_schedules_delete(self, directory, db, test_user_id):
        now = now_utc()
        db.execute_single.return_value = row(
            test_user_id, status="archived", archived_at=now, delete_after=now + timedelta(hours=24)
        )

        user = directory.archive_user(test_user_id, timedelta(hours=24))

        status, archived_at, delete_after, user_id = db.execute_single.call_args.args[1]
        assert status == "archived"
        assert delete_after - archived_at == timedelta(hours=24)
        assert user_id == test_user_id
        assert user.status is UserStatus.ARCHIVED

    def test_restore_clears_schedule(self, directory, db, test_user_id):
        db.execute_single.return_value = row(test_user_id)

        directory.restore_user(test_user_id)

        query, params = db.execute_single.call_args.args
        assert "archived_at = NULL" in query
        assert "delete_after = NULL" in query
        assert params == ("active", test_user_id)

    @pytest.mark.parametrize("blocked, status", [(True, "blocked"), (False, "active")])
    def test_block_sets_status(self, directory, db, test_user_id, blocked, status):
        db.execute_single.return_value = row(test_user_id, status=status)

        user = directory.block_user(test_user_id, blocked)

        assert db.execute_single.call_args.args[1] == (status, test_user_id)
        assert user.status.value == status

    def test_block_missing_user_not_found(self, directory, db, test_user_id):
        db.execute_single.return_value = None

        with pytest.raises(NotFoundError):
            directory.block_user(test_user_id, True)

    def test_delete(self, directory, db, test_user_id):
        db.execute_single.return_value = {"id": test_user_id}

        directory.delete_user(test_user_id)

        assert "DELETE FROM directory_users" in db.execute_single.call_args.args[0]

    def test_delete_missing_user_not_found(self, directory, db, test_user_id):
        db.execute_single.return_value = None

        with pytest.raises(NotFoundError):
            directory.delete_user(test_user_id)
