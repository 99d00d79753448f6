"""
Results Database
================

SQLite store for the parameters of a run and the results of its
experiments. One ``Database`` corresponds to one execution of the driver:
on opening, a new row is added to ``executions`` and every subsequent
parameter or result row is tagged with its id.

Tables
------
executions(id, timestamp)
parameters(execution_id, name, value)
<result table>(execution_id, <columns of the first row stored>)
"""

import logging
import re
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def _sql_type(value: Any) -> str:
    if isinstance(value, int):
        return "INTEGER"
    if isinstance(value, float):
        return "REAL"
    return "TEXT"


class Database:
    """
    Handle to the results database.

    Parameters
    ----------
    path : str or Path
        SQLite file, created if missing. ``":memory:"`` keeps everything
        in memory.
    """

    def __init__(self, path):
        self.path = str(path)
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        # workers may store their results from other threads
        self._connection: Optional[sqlite3.Connection] = sqlite3.connect(
            self.path, check_same_thread=False
        )
        self._lock = threading.Lock()
        self._columns: Dict[str, list] = {}

        with self._lock:
            self._connection.execute(
                "CREATE TABLE IF NOT EXISTS executions ("
                "id INTEGER PRIMARY KEY AUTOINCREMENT, timestamp TEXT NOT NULL)"
            )
            self._connection.execute(
                "CREATE TABLE IF NOT EXISTS parameters ("
                "execution_id INTEGER NOT NULL REFERENCES executions(id), "
                "name TEXT NOT NULL, value TEXT, "
                "PRIMARY KEY (execution_id, name))"
            )
            cursor = self._connection.execute(
                "INSERT INTO executions (timestamp) VALUES (?)",
                (datetime.now().isoformat(timespec="seconds"),),
            )
            self.execution_id: int = cursor.lastrowid
            self._connection.commit()

        logger.info(f"Database {self.path} opened, execution id: {self.execution_id}")

    @property
    def closed(self) -> bool:
        return self._connection is None

    def _require_connection(self) -> sqlite3.Connection:
        if self._connection is None:
            raise sqlite3.ProgrammingError(f"Database {self.path} is closed")
        return self._connection

    def store_parameters(self, parameters: Mapping[str, Any]) -> None:
        """
        Store a snapshot of the run parameters.

        Values are saved as text; storing the same name twice overwrites
        the previous value.
        """
        with self._lock:
            connection = self._require_connection()
            connection.executemany(
                "INSERT OR REPLACE INTO parameters (execution_id, name, value) "
                "VALUES (?, ?, ?)",
                [
                    (self.execution_id, name, None if value is None else str(value))
                    for name, value in parameters.items()
                ],
            )
            connection.commit()
        logger.debug(f"Stored {len(parameters)} parameters")

    def add(self, table: str, row: Mapping[str, Any]) -> None:
        """
        Store a result row into `table`.

        The table is created on first use, with one column per key of the
        row. Later rows may only use those columns.

        Parameters
        ----------
        table : str
            Name of the table, a valid SQL identifier
        row : Mapping[str, Any]
            Column name -> value
        """
        _check_identifier(table)
        if table in ("executions", "parameters"):
            raise ValueError(f"Reserved table name: {table}")
        if not row:
            raise ValueError("Cannot store an empty row")
        names = [_check_identifier(name) for name in row]

        with self._lock:
            connection = self._require_connection()
            if table not in self._columns:
                columns = ", ".join(f"{name} {_sql_type(row[name])}" for name in names)
                connection.execute(
                    f"CREATE TABLE IF NOT EXISTS {table} ("
                    f"execution_id INTEGER NOT NULL REFERENCES executions(id), {columns})"
                )
                self._columns[table] = names

            placeholders = ", ".join("?" for _ in range(len(names) + 1))
            connection.execute(
                f"INSERT INTO {table} (execution_id, {', '.join(names)}) "
                f"VALUES ({placeholders})",
                [self.execution_id] + [row[name] for name in names],
            )
            connection.commit()

    def fetch_parameters(self) -> Dict[str, Optional[str]]:
        """Parameters stored for this execution."""
        with self._lock:
            connection = self._require_connection()
            rows = connection.execute(
                "SELECT name, value FROM parameters WHERE execution_id = ?",
                (self.execution_id,),
            ).fetchall()
        return dict(rows)

    def fetch(self, table: str) -> list:
        """Rows of `table` stored for this execution, as dictionaries."""
        _check_identifier(table)
        with self._lock:
            connection = self._require_connection()
            cursor = connection.execute(
                f"SELECT * FROM {table} WHERE execution_id = ?", (self.execution_id,)
            )
            columns = [c[0] for c in cursor.description]
            return [dict(zip(columns, values)) for values in cursor.fetchall()]

    def close(self) -> None:
        """Commit pending changes and release the connection."""
        with self._lock:
            if self._connection is None:
                return
            self._connection.commit()
            self._connection.close()
            self._connection = None
        logger.debug(f"Database {self.path} closed")

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Database(path={self.path!r}, execution_id={self.execution_id})"
