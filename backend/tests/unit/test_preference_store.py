"""Tests for PreferenceStore."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.dialects import mysql, postgresql

from models.user_preference import UserPreference
from services.preference_store import (
    PreferenceNotFoundError,
    PreferenceStore,
    UnsupportedDialectError,
    build_upsert,
    ensure_supported_dialect,
)
from tests.fixtures import OTHER_USER_ID, TEST_USER_ID


@pytest.fixture
def frozen_clock(monkeypatch):
    """Control the timestamps the store assigns."""
    times = iter(
        [
            datetime(2026, 1, 1, 9, 0, 0, tzinfo=timezone.utc),
            datetime(2026, 1, 2, 9, 0, 0, tzinfo=timezone.utc),
            datetime(2026, 1, 3, 9, 0, 0, tzinfo=timezone.utc),
        ]
    )
    monkeypatch.setattr("services.preference_store.utcnow", lambda: next(times))


class TestGetPreferenceByKey:
    def test_missing_raises_not_found(self, db, preference_store):
        with pytest.raises(PreferenceNotFoundError):
            preference_store.get_preference_by_key(db, TEST_USER_ID, "theme")

    def test_returns_preference(self, db, preference_store):
        preference_store.upsert_preference(db, TEST_USER_ID, "theme", "dark")
        db.commit()

        pref = preference_store.get_preference_by_key(db, TEST_USER_ID, "theme")
        assert pref.key == "theme"
        assert pref.value == "dark"

    def test_scoped_by_deployment(self, db, preference_store):
        other_deployment = PreferenceStore(deployment_id="other-deployment")
        other_deployment.upsert_preference(db, TEST_USER_ID, "theme", "light")
        db.commit()

        with pytest.raises(PreferenceNotFoundError):
            preference_store.get_preference_by_key(db, TEST_USER_ID, "theme")
        assert other_deployment.get_preference_by_key(db, TEST_USER_ID, "theme").value == "light"


class TestGetPreferencesByUserId:
    def test_empty_list_when_none(self, db, preference_store):
        assert preference_store.get_preferences_by_user_id(db, TEST_USER_ID) == []

    def test_sorted_by_key_and_scoped_to_user(self, db, preference_store):
        for key in ("zoom", "accent", "locale"):
            preference_store.upsert_preference(db, TEST_USER_ID, key, key.upper())
        preference_store.upsert_preference(db, OTHER_USER_ID, "beta", "x")
        db.commit()

        prefs = preference_store.get_preferences_by_user_id(db, TEST_USER_ID)
        assert [p.key for p in prefs] == ["accent", "locale", "zoom"]
        assert [p.value for p in prefs] == ["ACCENT", "LOCALE", "ZOOM"]


class TestUpsertPreference:
    def test_insert_reports_one_row(self, db, preference_store):
        assert preference_store.upsert_preference(db, TEST_USER_ID, "theme", "dark") == 1

    def test_update_keeps_created_at_and_moves_updated_at(
        self, db, preference_store, frozen_clock
    ):
        preference_store.upsert_preference(db, TEST_USER_ID, "theme", "dark")
        db.commit()
        first = preference_store.get_preference_by_key(db, TEST_USER_ID, "theme")

        assert preference_store.upsert_preference(db, TEST_USER_ID, "theme", "light") == 1
        db.commit()
        second = preference_store.get_preference_by_key(db, TEST_USER_ID, "theme")

        assert second.value == "light"
        assert second.created_at == first.created_at
        assert second.updated_at > first.updated_at
        assert db.query(UserPreference).count() == 1

    def test_timestamps_come_back_as_utc(self, db, preference_store, frozen_clock):
        preference_store.upsert_preference(db, TEST_USER_ID, "theme", "dark")
        db.commit()

        pref = preference_store.get_preference_by_key(db, TEST_USER_ID, "theme")
        assert pref.created_at == datetime(2026, 1, 1, 9, 0, 0, tzinfo=timezone.utc)
        assert pref.created_at.utcoffset() == timedelta(0)
        assert pref.updated_at.utcoffset() == timedelta(0)

    def test_unsupported_dialect_is_rejected(self, db, preference_store, monkeypatch):
        monkeypatch.setattr("services.preference_store._ON_CONFLICT_INSERTS", {})

        with pytest.raises(UnsupportedDialectError) as exc_info:
            preference_store.upsert_preference(db, TEST_USER_ID, "theme", "dark")
        assert exc_info.value.dialect_name == "sqlite"
        assert db.query(UserPreference).count() == 0

    def test_does_not_commit(self, db, preference_store):
        preference_store.upsert_preference(db, TEST_USER_ID, "theme", "dark")
        db.rollback()

        with pytest.raises(PreferenceNotFoundError):
            preference_store.get_preference_by_key(db, TEST_USER_ID, "theme")


class TestDeletePreference:
    def test_delete_existing_reports_one_row(self, db, preference_store):
        preference_store.upsert_preference(db, TEST_USER_ID, "theme", "dark")
        db.commit()

        assert preference_store.delete_preference(db, TEST_USER_ID, "theme") == 1
        db.commit()
        assert preference_store.get_preferences_by_user_id(db, TEST_USER_ID) == []

    def test_delete_missing_raises_not_found(self, db, preference_store):
        with pytest.raises(PreferenceNotFoundError):
            preference_store.delete_preference(db, TEST_USER_ID, "theme")

    def test_delete_only_touches_own_user(self, db, preference_store):
        preference_store.upsert_preference(db, OTHER_USER_ID, "theme", "dark")
        db.commit()

        with pytest.raises(PreferenceNotFoundError):
            preference_store.delete_preference(db, TEST_USER_ID, "theme")
        assert preference_store.get_preference_by_key(db, OTHER_USER_ID, "theme").value == "dark"


def _upsert_values():
    now = datetime(2026, 1, 1, 9, 0, 0, tzinfo=timezone.utc)
    return {
        "id": "row-1",
        "user_id": TEST_USER_ID,
        "deployment_id": "test-deployment",
        "preference_key": "theme",
        "preference_value": "dark",
        "created_at": now,
        "updated_at": now,
    }


def _mysql_dialect():
    # Pin a pre-8.0.20 server so the statement renders with VALUES().
    dialect = mysql.dialect()
    dialect.server_version_info = (5, 7, 44)
    return dialect


class TestBuildUpsert:
    def test_postgresql_uses_on_conflict(self):
        stmt = build_upsert("postgresql", _upsert_values())
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert "ON CONFLICT (user_id, deployment_id, preference_key) DO UPDATE" in sql
        assert "created_at = excluded.created_at" not in sql

    @pytest.mark.parametrize("dialect_name", ["mysql", "mariadb"])
    def test_mysql_family_uses_on_duplicate_key(self, dialect_name):
        stmt = build_upsert(dialect_name, _upsert_values())
        sql = str(stmt.compile(dialect=_mysql_dialect()))
        assert "ON DUPLICATE KEY UPDATE" in sql
        assert "preference_value = VALUES(preference_value)" in sql
        assert "updated_at = VALUES(updated_at)" in sql
        assert "created_at = VALUES(created_at)" not in sql

    def test_other_dialects_rejected(self):
        with pytest.raises(UnsupportedDialectError, match="mssql"):
            build_upsert("mssql", _upsert_values())


class TestEnsureSupportedDialect:
    @pytest.mark.parametrize("dialect_name", ["sqlite", "postgresql", "mysql", "mariadb"])
    def test_supported(self, dialect_name):
        ensure_supported_dialect(dialect_name)

    def test_unsupported(self):
        with pytest.raises(UnsupportedDialectError) as exc_info:
            ensure_supported_dialect("oracle")
        assert exc_info.value.dialect_name == "oracle"
