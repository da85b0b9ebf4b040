"""Schema-tolerant access to the users table.

Deployed databases do not always carry every profile column, so queries are
generated from the columns discovered on the live table. Column names only ever
come from USER_FIELDS; values are always bound parameters.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import column, insert, inspect, select, table, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from profile_api.errors import PersistenceFailure, SchemaError
from profile_api.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    required: bool = False
    editable: bool = False
    default: Any = None


USER_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("id", required=True),
    FieldSpec("email", required=True),
    FieldSpec("name"),
    FieldSpec("picture"),
    FieldSpec("google_sub"),
    FieldSpec("username", editable=True),
    FieldSpec("bio", editable=True),
    FieldSpec("phone", editable=True),
    FieldSpec("address_line1", editable=True),
    FieldSpec("address_line2", editable=True),
    FieldSpec("address_city", editable=True),
    FieldSpec("address_state", editable=True),
    FieldSpec("address_postal", editable=True),
    FieldSpec("address_country", editable=True),
    FieldSpec("role", default="user"),
)

USER_FIELD_NAMES = tuple(f.name for f in USER_FIELDS)
REQUIRED_FIELDS = tuple(f.name for f in USER_FIELDS if f.required)
EDITABLE_FIELDS = tuple(f.name for f in USER_FIELDS if f.editable)
FIELD_DEFAULTS = {f.name: f.default for f in USER_FIELDS if f.default is not None}


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def normalize(row: Mapping[str, Any] | None) -> dict | None:
    """Return the full user shape, with None for every column the row lacks."""
    if row is None:
        return None
    user = dict.fromkeys(USER_FIELD_NAMES)
    for key, value in row.items():
        if key in user:
            user[key] = value
    return user


class ColumnCache:
    """Column names of the users table, read once and kept for the process lifetime.

    Call invalidate() after a migration so the next request re-reads the schema.
    Two cold requests may both introspect; the result is the same either way.
    """

    def __init__(self, table_name: str):
        self.table_name = table_name
        self._columns: frozenset[str] | None = None

    def get(self, bind) -> frozenset[str]:
        columns = self._columns
        if columns is not None:
            return columns
        inspector = inspect(bind)
        if not inspector.has_table(self.table_name):
            # Not cached: the table may be created by startup after this call.
            logger.warning("Table %s does not exist", self.table_name)
            return frozenset()
        columns = frozenset(c["name"] for c in inspector.get_columns(self.table_name))
        logger.info("Discovered %d columns on %s", len(columns), self.table_name)
        self._columns = columns
        return columns

    def invalidate(self) -> None:
        if self._columns is not None:
            logger.info("Column cache for %s invalidated", self.table_name)
        self._columns = None

    @property
    def loaded(self) -> bool:
        return self._columns is not None


class UserStore:
    """Find-or-create and profile updates against whatever user columns exist."""

    def __init__(self, db: Session, columns: ColumnCache):
        self.db = db
        self.columns = columns

    def discover_columns(self) -> frozenset[str]:
        try:
            return self.columns.get(self.db.connection())
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Schema introspection failed for %s", self.columns.table_name)
            raise PersistenceFailure("Schema introspection failed") from exc

    def _users_table(self):
        columns = self.discover_columns()
        if any(name not in columns for name in REQUIRED_FIELDS):
            raise SchemaError(
                f"{self.columns.table_name} must include {' and '.join(REQUIRED_FIELDS)} columns"
            )
        present = [name for name in USER_FIELD_NAMES if name in columns]
        return table(self.columns.table_name, *(column(name) for name in present)), columns

    def _run(self, stmt, *, write: bool = False) -> dict | None:
        try:
            row = self.db.execute(stmt).mappings().first()
            if write:
                self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("User query failed on %s", self.columns.table_name)
            raise PersistenceFailure() from exc
        return normalize(row)

    def _select_one(self, users, condition) -> dict | None:
        return self._run(select(*users.c).where(condition).limit(1))

    def find_by_email(self, email: str) -> dict | None:
        users, _ = self._users_table()
        return self._select_one(users, users.c.email == email)

    def find_by_id(self, user_id: Any) -> dict | None:
        users, _ = self._users_table()
        return self._select_one(users, users.c.id == user_id)

    def upsert_from_identity(
        self,
        email: str,
        name: str | None,
        picture: str | None,
        external_id: str | None,
        default_username: str | None,
    ) -> dict | None:
        """Find-or-create by email, refreshing identity fields on every login.

        A username already on the row is never replaced by default_username.
        """
        users, columns = self._users_table()
        if "google_sub" in columns and not external_id:
            raise SchemaError(f"google_sub is required for {self.columns.table_name}")

        user = self._select_one(users, users.c.email == email)
        if user is not None:
            values: dict[str, Any] = {}
            if "name" in columns:
                values["name"] = name
            if "picture" in columns:
                values["picture"] = picture
            if "google_sub" in columns and external_id:
                values["google_sub"] = external_id
            if "username" in columns and is_blank(user["username"]) and default_username:
                values["username"] = default_username
            if not values:
                return user
            stmt = (
                update(users)
                .where(users.c.id == user["id"])
                .values(**values)
                .returning(*users.c)
            )
            logger.debug("Refreshing user %s on login (%s)", user["id"], ", ".join(values))
            return self._run(stmt, write=True)

        values = {"email": email}
        for field, value in (("name", name), ("picture", picture), ("google_sub", external_id)):
            if field in columns:
                values[field] = value
        if "username" in columns and default_username:
            values["username"] = default_username
        for field, default in FIELD_DEFAULTS.items():
            if field in columns:
                values.setdefault(field, default)

        logger.info("Creating user for new email (%d columns)", len(values))
        return self._run(insert(users).values(**values).returning(*users.c), write=True)

    def update_profile(self, user_id: Any, fields: Mapping[str, Any]) -> dict | None:
        """Apply the supplied editable fields; missing columns and None values are skipped.

        Returns None when the user does not exist.
        """
        users, columns = self._users_table()
        values = {
            name: fields[name]
            for name in EDITABLE_FIELDS
            if name in columns and fields.get(name) is not None
        }
        if not values:
            return self._select_one(users, users.c.id == user_id)
        stmt = (
            update(users)
            .where(users.c.id == user_id)
            .values(**values)
            .returning(*users.c)
        )
        return self._run(stmt, write=True)
