"""SQLite-backed storage for the record tables."""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from os import PathLike
from typing import Any, Iterator, Mapping, Sequence, TypeVar

from .records import FAQ, Dataset, FAQCategory, FAQManualMedia, ManualMaterial, RagFile

log = logging.getLogger(__name__)

RECORD_TYPES = (Dataset, FAQ, FAQCategory, RagFile, FAQManualMedia, ManualMaterial)

Raw = Sequence[tuple[str, Sequence[Any]]]
Order = Sequence[tuple[str, bool]]

_R = TypeVar("_R")


class NotFoundError(LookupError):
    """Raised when a query that needs one row finds none."""


@dataclass
class Page:
    """One page of a listing together with the total number of matches."""

    items: list[Any] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 20

    @property
    def pages(self) -> int:
        """Number of pages needed for all matches."""
        return -(-self.total // self.page_size) if self.page_size else 0


def _sql_type(py_type: Any) -> str:
    return "TEXT" if py_type is str else "INTEGER"


def _sql_default(value: Any) -> str:
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return str(int(value))


def _quote(name: str) -> str:
    return f'"{name}"'


class Database:
    """A connection holding one table per record type.

    Statements run in autocommit mode unless inside ``transaction()``.
    """

    def __init__(self, path: str | PathLike = ":memory:") -> None:
        self._conn = sqlite3.connect(str(path), isolation_level=None, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._depth = 0
        for record_type in RECORD_TYPES:
            self._create_table(record_type)

    def _create_table(self, record_type: type) -> None:
        columns = []
        for column in fields(record_type):
            if column.name == "id":
                columns.append('"id" INTEGER PRIMARY KEY AUTOINCREMENT')
                continue
            columns.append(
                f"{_quote(column.name)} {_sql_type(column.type)} NOT NULL "
                f"DEFAULT {_sql_default(column.default)}"
            )
        self._conn.execute(
            f"CREATE TABLE IF NOT EXISTS {_quote(record_type.table)} ({', '.join(columns)})"
        )

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        with self._lock:
            return self._conn.execute(sql, tuple(params))

    def _fetch(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, tuple(params)).fetchall()

    @staticmethod
    def _check_columns(record_type: type, names: Any) -> None:
        known = set(record_type.columns())
        unknown = [name for name in names if name not in known]
        if unknown:
            raise ValueError(f"unknown column(s) for {record_type.table}: {', '.join(unknown)}")

    def _where(self, record_type: type, where: Mapping[str, Any] | None, raw: Raw) -> tuple[str, list]:
        where = where or {}
        self._check_columns(record_type, where)
        clauses = [f"{_quote(column)} = ?" for column in where]
        params = list(where.values())
        for fragment, values in raw:
            clauses.append(f"({fragment})")
            params.extend(values)
        sql = " WHERE " + " AND ".join(clauses) if clauses else ""
        return sql, params

    def _order(self, record_type: type, order_by: Order) -> str:
        self._check_columns(record_type, [column for column, _ in order_by])
        parts = [f"{_quote(column)} {'DESC' if desc else 'ASC'}" for column, desc in order_by]
        parts.append('"id" ASC')
        return " ORDER BY " + ", ".join(parts)

    @contextmanager
    def transaction(self) -> Iterator["Database"]:
        """Run the enclosed statements atomically; nested blocks use savepoints."""
        with self._lock:
            savepoint = f"sp{self._depth}" if self._depth else None
            self._conn.execute(f"SAVEPOINT {savepoint}" if savepoint else "BEGIN")
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if savepoint:
                    self._conn.execute(f"ROLLBACK TO {savepoint}")
                    self._conn.execute(f"RELEASE {savepoint}")
                else:
                    self._conn.execute("ROLLBACK")
                raise
            else:
                self._depth -= 1
                self._conn.execute(f"RELEASE {savepoint}" if savepoint else "COMMIT")

    def close(self) -> None:
        """Close the underlying connection."""
        with self._lock:
            self._conn.close()

    def insert(self, record: _R) -> _R:
        """Insert a record; a zero id is replaced by the generated one."""
        row = record.to_row()
        if not row.get("id"):
            row.pop("id", None)
        columns = ", ".join(_quote(column) for column in row)
        placeholders = ", ".join("?" for _ in row)
        cursor = self._execute(
            f"INSERT INTO {_quote(record.table)} ({columns}) VALUES ({placeholders})",
            list(row.values()),
        )
        if "id" not in row:
            record.id = cursor.lastrowid
        return record

    def insert_many(self, records: Sequence[_R]) -> list[_R]:
        """Insert several records in one transaction."""
        with self.transaction():
            return [self.insert(record) for record in records]

    def select(
        self,
        record_type: type[_R],
        where: Mapping[str, Any] | None = None,
        *,
        raw: Raw = (),
        order_by: Order = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[_R]:
        """Return matching records; ``where`` is column equality, ``raw`` extra SQL conditions."""
        where_sql, params = self._where(record_type, where, raw)
        sql = f"SELECT * FROM {_quote(record_type.table)}{where_sql}{self._order(record_type, order_by)}"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params += [limit, offset]
        return [record_type.from_row(row) for row in self._fetch(sql, params)]

    def first(
        self,
        record_type: type[_R],
        where: Mapping[str, Any] | None = None,
        *,
        raw: Raw = (),
        order_by: Order = (),
    ) -> _R:
        """Return the first matching record or raise ``NotFoundError``."""
        found = self.select(record_type, where, raw=raw, order_by=order_by, limit=1)
        if not found:
            raise NotFoundError(f"{record_type.table} not found")
        return found[0]

    def count(self, record_type: type, where: Mapping[str, Any] | None = None, *, raw: Raw = ()) -> int:
        """Number of matching rows."""
        where_sql, params = self._where(record_type, where, raw)
        rows = self._fetch(f"SELECT COUNT(*) FROM {_quote(record_type.table)}{where_sql}", params)
        return rows[0][0]

    def paginate(
        self,
        record_type: type[_R],
        where: Mapping[str, Any] | None = None,
        *,
        raw: Raw = (),
        order_by: Order = (),
        page: int = 1,
        page_size: int = 20,
    ) -> Page:
        """Return one page of matching records with the total count."""
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be at least 1")
        total = self.count(record_type, where, raw=raw)
        items = self.select(
            record_type, where, raw=raw, order_by=order_by, limit=page_size, offset=(page - 1) * page_size
        )
        return Page(items=items, total=total, page=page, page_size=page_size)

    def update(
        self,
        record_type: type,
        where: Mapping[str, Any] | None,
        data: Mapping[str, Any],
        *,
        raw: Raw = (),
    ) -> int:
        """Set columns on matching rows; return the number of rows changed."""
        if not data:
            return 0
        self._check_columns(record_type, data)
        assignments = ", ".join(f"{_quote(column)} = ?" for column in data)
        where_sql, params = self._where(record_type, where, raw)
        cursor = self._execute(
            f"UPDATE {_quote(record_type.table)} SET {assignments}{where_sql}",
            list(data.values()) + params,
        )
        return cursor.rowcount

    def delete(self, record_type: type, where: Mapping[str, Any] | None, *, raw: Raw = ()) -> int:
        """Delete matching rows; return how many were removed."""
        where_sql, params = self._where(record_type, where, raw)
        cursor = self._execute(f"DELETE FROM {_quote(record_type.table)}{where_sql}", params)
        return cursor.rowcount