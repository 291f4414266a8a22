"""Preference store - parameterized queries scoped by deployment.

Every operation takes the caller's ``Session``. The session may already be
inside a unit of work opened by :class:`services.transaction.SessionTransactioner`;
the store only executes statements and never commits, rolls back, or begins
a transaction of its own.
"""

from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.orm import Session

from models.user_preference import UserPreference
from models.utils import generate_uuid, utcnow
from schemas.preference import Preference

_table = UserPreference.__table__

# Dialects with native INSERT ... ON CONFLICT DO UPDATE
_ON_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Dialects with native INSERT ... ON DUPLICATE KEY UPDATE
_ON_DUPLICATE_KEY_INSERTS = {
    "mysql": mysql.insert,
    "mariadb": mysql.insert,
}

_CONFLICT_COLUMNS = ["user_id", "deployment_id", "preference_key"]


class PreferenceNotFoundError(LookupError):
    """No preference row matched the (user, key, deployment) scope."""


class UnsupportedDialectError(NotImplementedError):
    """The database has no native insert-or-update the store can rely on."""

    def __init__(self, dialect_name: str):
        self.dialect_name = dialect_name
        super().__init__(
            f"Database dialect {dialect_name!r} has no native upsert; "
            f"supported: {', '.join(sorted(supported_dialects()))}"
        )


def supported_dialects() -> set[str]:
    return set(_ON_CONFLICT_INSERTS) | set(_ON_DUPLICATE_KEY_INSERTS)


def ensure_supported_dialect(dialect_name: str) -> None:
    """Raise :class:`UnsupportedDialectError` unless upserts are atomic on this dialect."""
    if dialect_name not in supported_dialects():
        raise UnsupportedDialectError(dialect_name)


def build_upsert(dialect_name: str, values: dict):
    """Build a single-statement insert-or-update for ``dialect_name``.

    Concurrent first writes of the same key are settled by the database;
    the last writer's value wins. On update only ``preference_value`` and
    ``updated_at`` change.
    """
    insert = _ON_CONFLICT_INSERTS.get(dialect_name)
    if insert is not None:
        stmt = insert(_table).values(**values)
        return stmt.on_conflict_do_update(
            index_elements=_CONFLICT_COLUMNS,
            set_={
                "preference_value": stmt.excluded.preference_value,
                "updated_at": stmt.excluded.updated_at,
            },
        )

    insert = _ON_DUPLICATE_KEY_INSERTS.get(dialect_name)
    if insert is not None:
        stmt = insert(_table).values(**values)
        return stmt.on_duplicate_key_update(
            preference_value=stmt.inserted.preference_value,
            updated_at=stmt.inserted.updated_at,
        )

    raise UnsupportedDialectError(dialect_name)


class PreferenceStoreProtocol(Protocol):
    """Data access contract used by the preference service."""

    def get_preference_by_key(self, db: Session, user_id: str, key: str) -> Preference:
        ...

    def get_preferences_by_user_id(self, db: Session, user_id: str) -> list[Preference]:
        ...

    def upsert_preference(self, db: Session, user_id: str, key: str, value: str) -> int:
        ...

    def delete_preference(self, db: Session, user_id: str, key: str) -> int:
        ...


class PreferenceStore:
    """SQLAlchemy implementation of :class:`PreferenceStoreProtocol`.

    Args:
        deployment_id: Opaque discriminator added to every query. Fixed for
            the lifetime of the store; callers never supply it.
    """

    def __init__(self, deployment_id: str):
        self._deployment_id = deployment_id

    def _columns(self):
        return select(
            _table.c.preference_key,
            _table.c.preference_value,
            _table.c.created_at,
            _table.c.updated_at,
        )

    def get_preference_by_key(self, db: Session, user_id: str, key: str) -> Preference:
        """Fetch one preference.

        Raises:
            PreferenceNotFoundError: If no row matches.
        """
        stmt = self._columns().where(
            _table.c.user_id == user_id,
            _table.c.preference_key == key,
            _table.c.deployment_id == self._deployment_id,
        )
        row = db.execute(stmt).one_or_none()
        if row is None:
            raise PreferenceNotFoundError(key)
        return Preference.model_validate(row)

    def get_preferences_by_user_id(self, db: Session, user_id: str) -> list[Preference]:
        """Fetch all preferences of a user ordered by key. Empty list if none."""
        stmt = (
            self._columns()
            .where(
                _table.c.user_id == user_id,
                _table.c.deployment_id == self._deployment_id,
            )
            .order_by(_table.c.preference_key.asc())
        )
        return [Preference.model_validate(row) for row in db.execute(stmt)]

    def upsert_preference(self, db: Session, user_id: str, key: str, value: str) -> int:
        """Insert the preference or overwrite its value. Returns rows affected.

        ``created_at`` is only written on insert; ``updated_at`` is refreshed
        on every write. MySQL counts an updated row twice.

        Raises:
            UnsupportedDialectError: If the bound database has no native upsert.
        """
        now = utcnow()
        stmt = build_upsert(
            db.get_bind().dialect.name,
            {
                "id": generate_uuid(),
                "user_id": user_id,
                "deployment_id": self._deployment_id,
                "preference_key": key,
                "preference_value": value,
                "created_at": now,
                "updated_at": now,
            },
        )
        return db.execute(stmt).rowcount

    def delete_preference(self, db: Session, user_id: str, key: str) -> int:
        """Delete one preference. Returns rows affected.

        Raises:
            PreferenceNotFoundError: If zero rows were deleted.
        """
        result = db.execute(
            delete(_table).where(
                _table.c.user_id == user_id,
                _table.c.preference_key == key,
                _table.c.deployment_id == self._deployment_id,
            )
        )
        if result.rowcount == 0:
            raise PreferenceNotFoundError(key)
        return result.rowcount
