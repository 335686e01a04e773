"""Helpers for producing MySQL ``LOAD DATA INFILE`` input and bulk loading it."""

from __future__ import annotations

import contextlib
import datetime as _dt
import os
import re
import tempfile
from typing import Any, Iterable, TextIO

SQL_FIELDS_TERMINATED = " FIELDS TERMINATED BY ',' ENCLOSED BY '\"' ESCAPED BY '\\\\' "
SQL_QUOTE = '"'
SQL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

_ESCAPE_RE = re.compile(r'([\\",\n])')
_INT_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def escape_sql_field(s: str) -> str:
    """Quote a field and backslash-escape quotes, commas, backslashes and newlines."""
    return SQL_QUOTE + _ESCAPE_RE.sub(r"\\\1", s) + SQL_QUOTE


def to_sql_int(s: str) -> str:
    """Render a decimal integer string as a field, or ``NONE`` if it is not one."""
    if not _INT_RE.fullmatch(s):
        return "NONE"
    n = int(s)
    if not _INT64_MIN <= n <= _INT64_MAX:
        return "NONE"
    return escape_sql_field(str(n))


def to_sql_string(s: str) -> str:
    """Render a string as a field; the empty string becomes an unquoted ``NONE``."""
    if not s:
        return "NONE"
    return escape_sql_field(s)


def to_sql_bool(s: str) -> str:
    """Render a boolean-ish string as ``"1"`` (starts with t) or ``"0"``."""
    if s.strip().lower().startswith("t"):
        return '"1"'
    return '"0"'


def to_sql_datetime(t: _dt.datetime) -> str:
    """Render a datetime as a quoted ``YYYY-MM-DD HH:MM:SS`` field."""
    text = (
        f"{t.year:04d}-{t.month:02d}-{t.day:02d} "
        f"{t.hour:02d}:{t.minute:02d}:{t.second:02d}"
    )
    return escape_sql_field(text)


def to_sql_line(fields: Iterable[str]) -> str:
    """Join already-rendered fields into one newline-terminated line."""
    return ",".join(fields) + "\n"


class SQLDataLoader:
    """Spool lines to temporary files and bulk-load them with LOAD DATA LOCAL INFILE.

    Every ``recmax`` records the spool file is loaded into the database and a
    new one is started. ``close`` loads whatever is left.
    """

    def __init__(self, load_params: str, connection: Any, recmax: int, verbose: bool = False):
        self._load_params = load_params
        self._connection = connection
        self._recmax = recmax
        self._verbose = verbose
        self._file: TextIO | None = None
        self._reccount = 0
        self._totalcount = 0

    def _command(self, path: str) -> str:
        return f"LOAD DATA LOCAL INFILE '{path}' {self._load_params}{SQL_FIELDS_TERMINATED}"

    def _load(self) -> None:
        """Load the current spool file into the database and delete it."""
        if self._file is None:
            return
        handle, self._file = self._file, None
        path = handle.name
        try:
            handle.close()
            cmd = self._command(path)
            print(f"Loading {self._reccount} records into SQL: {cmd}")
            try:
                with self._connection.cursor() as cursor:
                    cursor.execute(cmd)
                    count = cursor.rowcount
                self._connection.commit()
            except Exception as err:
                if self._verbose:
                    print(f"Error loading data: {err}")
                raise
            if self._verbose:
                print(f"Loaded data, {count} rows affected.")
        finally:
            with contextlib.suppress(OSError):
                os.remove(path)

    def write(self, s: str) -> None:
        """Append one chunk of lines; triggers a load once ``recmax`` is reached."""
        if not s:
            return
        if self._reccount >= self._recmax:
            self._load()
        if self._file is None:
            self._file = tempfile.NamedTemporaryFile(
                mode="w", prefix="SQLBULKLOAD-", delete=False, encoding="utf-8", newline=""
            )
            self._totalcount += self._reccount
            self._reccount = 0
        self._file.write(s)
        self._reccount += 1

    def close(self) -> None:
        """Load any remaining spooled records."""
        if self._file is None:
            return
        self._load()
        if self._verbose:
            print(f"Successfully loaded {self._totalcount} records into database.")

    def __enter__(self) -> "SQLDataLoader":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()