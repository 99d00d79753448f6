"""
Tests for the results database.
"""

import sqlite3

import pytest

from graph_bench_driver import Database


@pytest.fixture
def db(tmp_path):
    database = Database(tmp_path / "results.sqlite3")
    yield database
    database.close()


class TestDatabase:
    """Tests for Database."""

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "a" / "b" / "results.sqlite3"
        with Database(path):
            pass
        assert path.exists()

    def test_execution_ids_increase(self, tmp_path):
        path = tmp_path / "results.sqlite3"
        with Database(path) as first:
            first_id = first.execution_id
        with Database(path) as second:
            assert second.execution_id > first_id

    def test_store_parameters(self, db):
        db.store_parameters({"library": "dummy", "seed": 42, "database": None})
        db.store_parameters({"seed": 43})

        assert db.fetch_parameters() == {"library": "dummy", "seed": "43", "database": None}

    def test_add_rows(self, db):
        db.add("statistics", {"algorithm": "bfs", "time_ms": 12.5, "repetition": 0})
        db.add("statistics", {"algorithm": "bfs", "time_ms": 11.0, "repetition": 1})

        rows = db.fetch("statistics")
        assert [r["time_ms"] for r in rows] == [12.5, 11.0]
        assert all(r["execution_id"] == db.execution_id for r in rows)

    def test_rows_are_isolated_by_execution(self, tmp_path):
        path = tmp_path / "results.sqlite3"
        with Database(path) as first:
            first.add("latency", {"value": 1})
        with Database(path) as second:
            second.add("latency", {"value": 2})
            assert [r["value"] for r in second.fetch("latency")] == [2]

    @pytest.mark.parametrize("table", ["parameters", "executions", "bad name", "1st"])
    def test_invalid_tables(self, db, table):
        with pytest.raises(ValueError):
            db.add(table, {"value": 1})

    def test_invalid_column(self, db):
        with pytest.raises(ValueError):
            db.add("results", {"value; DROP TABLE executions": 1})

    def test_empty_row(self, db):
        with pytest.raises(ValueError):
            db.add("results", {})

    def test_close(self, db):
        db.close()
        assert db.closed
        db.close()
        with pytest.raises(sqlite3.ProgrammingError):
            db.store_parameters({"seed": 1})

    def test_memory_database(self):
        with Database(":memory:") as db:
            db.add("results", {"value": 1})
            assert len(db.fetch("results")) == 1
