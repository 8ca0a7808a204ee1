"""Conflict-ignoring insert compilation per dialect."""

from __future__ import annotations

import pytest
from sqlalchemy.dialects import mysql, postgresql, sqlite

from rada.db.models import PollVote
from rada.db.upsert import insert_ignore

VALUES = {"poll_id": 1, "user_id": 2, "option_index": 0}


class TestInsertIgnore:
    """Test insert_ignore statement shapes."""

    def test_postgresql(self):
        sql = str(insert_ignore("postgresql", PollVote, VALUES).compile(dialect=postgresql.dialect()))
        assert "ON CONFLICT DO NOTHING" in sql

    def test_sqlite(self):
        sql = str(insert_ignore("sqlite", PollVote, VALUES).compile(dialect=sqlite.dialect()))
        assert "ON CONFLICT DO NOTHING" in sql

    def test_mysql(self):
        sql = str(insert_ignore("mysql", PollVote, VALUES).compile(dialect=mysql.dialect()))
        assert sql.startswith("INSERT IGNORE")

    def test_unsupported_dialect(self):
        with pytest.raises(NotImplementedError):
            insert_ignore("oracle", PollVote, VALUES)
