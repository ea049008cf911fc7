"""
Tests for the PostgreSQL pool wiring, using a stand-in pool so no database is needed.
"""

import pytest

import db.connection as connection
from utils.errors import PersistenceError


class FakeCursor:

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeConnection:

    def __init__(self):
        self.committed = False
        self.rolled_back = False

    def cursor(self, cursor_factory=None):
        return FakeCursor()

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True


class FakePool:
    """Records how it was built and which connections went out and came back."""

    def __init__(self, min_conn, max_conn, dsn):
        self.args = (min_conn, max_conn, dsn)
        self.conn = FakeConnection()
        self.returned = []
        self.closed = False

    def getconn(self):
        return self.conn

    def putconn(self, conn):
        self.returned.append(conn)

    def closeall(self):
        self.closed = True


@pytest.fixture
def fake_pool(monkeypatch):
    monkeypatch.setattr(connection, "_pool", None)
    monkeypatch.setattr(connection.pool, "ThreadedConnectionPool", FakePool)
    connection.init_pool(1, 4)
    yield connection._pool
    connection.close_pool()


class TestPool:

    def test_uses_thread_safe_pool(self, fake_pool):
        assert isinstance(fake_pool, FakePool)
        assert fake_pool.args[:2] == (1, 4)

    def test_init_is_idempotent(self, fake_pool):
        connection.init_pool(1, 4)
        assert connection._pool is fake_pool

    def test_commit_and_release(self, fake_pool):
        with connection.transaction("do nothing"):
            pass
        assert fake_pool.conn.committed
        assert fake_pool.returned == [fake_pool.conn]

    def test_driver_error_rolls_back(self, fake_pool):
        with pytest.raises(PersistenceError):
            with connection.transaction("fail"):
                raise connection.psycopg2.DatabaseError("boom")
        assert fake_pool.conn.rolled_back
        assert not fake_pool.conn.committed
        assert fake_pool.returned == [fake_pool.conn]

    def test_uninitialized_pool(self, monkeypatch):
        monkeypatch.setattr(connection, "_pool", None)
        with pytest.raises(RuntimeError):
            connection.get_connection()
