"""Row mapping, a small WHERE/ORDER BY builder and the base repository."""

import dataclasses
import sqlite3
import typing
from decimal import Decimal
from enum import Enum
from typing import Generic, Optional, TypeVar

from .database import Database, get_db

T = TypeVar("T")


def _converter_for(hint):
    """Return a callable turning a raw SQLite value into `hint`, or None to keep it as-is."""
    origin = typing.get_origin(hint)
    if origin is typing.Union:
        inner = [a for a in typing.get_args(hint) if a is not type(None)]
        return _converter_for(inner[0]) if len(inner) == 1 else None
    if origin is not None:
        return None  # containers are filled in by the repository
    if hint is Decimal:
        return lambda v: Decimal(str(v))
    if hint in (int, str):
        return hint
    if isinstance(hint, type) and issubclass(hint, Enum):
        return hint
    return None


class RowMapper(Generic[T]):
    """Maps sqlite3.Row objects to dataclass instances using type hints."""

    def __init__(self, model_class: type[T]):
        self._model_class = model_class
        self._fields = dataclasses.fields(model_class)  # type: ignore[arg-type]
        hints = typing.get_type_hints(model_class)
        self._converters = {f.name: _converter_for(hints.get(f.name)) for f in self._fields}

    def map(self, row: sqlite3.Row) -> T:
        kwargs: dict = {}
        keys = row.keys()
        for f in self._fields:
            # Columns missing from the row (or NULL) fall back to the dataclass default
            if f.name not in keys or row[f.name] is None:
                if f.default is not dataclasses.MISSING:
                    kwargs[f.name] = f.default
                elif f.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
                    kwargs[f.name] = f.default_factory()  # type: ignore[misc]
                elif f.name in keys:
                    kwargs[f.name] = None
                continue
            conv = self._converters[f.name]
            kwargs[f.name] = conv(row[f.name]) if conv else row[f.name]
        return self._model_class(**kwargs)

    def map_all(self, rows) -> list[T]:
        return [self.map(r) for r in rows]

    @staticmethod
    def _serialize(val):
        if isinstance(val, Decimal):
            return str(val)
        if isinstance(val, Enum):
            return val.value
        return val

    def to_db_dict(self, obj: T, skip: frozenset = frozenset()) -> dict:
        """Return {column: serialized value} for all non-skipped fields."""
        return {
            f.name: self._serialize(getattr(obj, f.name))
            for f in self._fields
            if f.name not in skip
        }


class QueryBuilder:
    """SELECT * FROM one table with AND-ed conditions and an optional ORDER BY."""

    def __init__(self, table: str):
        self.table = table
        self._where: list[tuple[str, tuple]] = []
        self._order: Optional[str] = None

    def where(self, condition: str, *params) -> "QueryBuilder":
        self._where.append((condition, params))
        return self

    def where_in(self, column: str, values) -> "QueryBuilder":
        values = tuple(values)
        if not values:
            # IN () is a syntax error in SQLite; match nothing instead
            return self.where("0")
        return self.where(f"{column} IN ({', '.join('?' * len(values))})", *values)

    def order_by(self, clause: str) -> "QueryBuilder":
        self._order = clause
        return self

    def build(self) -> tuple[str, list]:
        parts = [f"SELECT * FROM {self.table}"]
        if self._where:
            parts.append("WHERE " + " AND ".join(cond for cond, _ in self._where))
        if self._order:
            parts.append(f"ORDER BY {self._order}")
        params = [p for _, ps in self._where for p in ps]
        return " ".join(parts), params

    def fetch_one(self, conn: sqlite3.Connection) -> Optional[sqlite3.Row]:
        return conn.execute(*self.build()).fetchone()

    def fetch_all(self, conn: sqlite3.Connection) -> list[sqlite3.Row]:
        return conn.execute(*self.build()).fetchall()


class BaseRepository(Generic[T]):
    """CRUD shared by the table-per-model repositories.

    Subclasses set `_table`, `_mapper`, the fields left out of INSERTs and the
    default listing order.
    """

    _table: str
    _mapper: RowMapper  # type: ignore[type-arg]
    _insert_skip: frozenset = frozenset({"id"})
    _order: str = "id"

    def _db(self) -> Database:
        return get_db()

    def _commit(self, db: Database) -> None:
        if not db.in_transaction:
            db.conn.commit()

    def _query(self) -> QueryBuilder:
        return QueryBuilder(self._table)

    def _map_rows(self, query: QueryBuilder) -> list[T]:
        return self._mapper.map_all(query.fetch_all(self._db().conn))

    def get_by_id(self, id: int) -> Optional[T]:
        row = self._query().where("id = ?", id).fetch_one(self._db().conn)
        return None if row is None else self._mapper.map(row)

    def list_all(self) -> list[T]:
        return self._map_rows(self._query().order_by(self._order))

    def delete(self, id: int) -> bool:
        db = self._db()
        deleted = db.conn.execute(f"DELETE FROM {self._table} WHERE id = ?", (id,)).rowcount
        self._commit(db)
        return deleted > 0

    def _insert(self, obj: T) -> int:
        """INSERT the mapped fields of `obj`; returns the new row id."""
        db = self._db()
        values = self._mapper.to_db_dict(obj, skip=self._insert_skip)
        sql = "INSERT INTO {} ({}) VALUES ({})".format(
            self._table, ", ".join(values), ", ".join("?" * len(values))
        )
        row_id = db.conn.execute(sql, list(values.values())).lastrowid
        self._commit(db)
        return row_id
