"""Tests for store deadlines and failure normalization."""

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from src.database import client as db_client
from src.database.client import store_operation
from src.database.errors import NotFound, PersistenceError
from src.features.auth.store import RefreshTokenStore


class FailingSession:
    """Session stand-in whose queries fail, optionally after a delay."""

    def __init__(self, delay: float | None = None):
        self.delay = delay
        self.rolled_back = False
        self.committed = False

    async def execute(self, *args, **kwargs):
        if self.delay is not None:
            await asyncio.sleep(self.delay)
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    def add(self, instance):
        pass

    async def commit(self):
        self.committed = True

    async def rollback(self):
        self.rolled_back = True


class TestStoreOperation:
    async def test_passes_through_on_success(self):
        async with store_operation(1.0, "do nothing"):
            result = 42
        assert result == 42

    async def test_deadline_becomes_persistence_error(self):
        with pytest.raises(PersistenceError, match="Timed out trying to wait"):
            async with store_operation(0.01, "wait"):
                await asyncio.sleep(5)

    async def test_sqlalchemy_error_becomes_persistence_error(self):
        with pytest.raises(PersistenceError) as exc_info:
            async with store_operation(1.0, "query"):
                raise OperationalError("SELECT 1", {}, Exception("boom"))
        assert isinstance(exc_info.value.__cause__, OperationalError)

    async def test_domain_errors_propagate_unchanged(self):
        with pytest.raises(NotFound):
            async with store_operation(1.0, "look up"):
                raise NotFound("missing")

    async def test_no_deadline(self):
        async with store_operation(None, "sleep briefly"):
            await asyncio.sleep(0)


class TestStoreFailures:
    async def test_rotate_failure_rolls_back(self):
        session = FailingSession()
        store = RefreshTokenStore(session)

        with pytest.raises(PersistenceError):
            await store.rotate("alice", store.generate())

        assert session.rolled_back
        assert not session.committed

    async def test_rotate_deadline_rolls_back(self):
        session = FailingSession(delay=5)
        store = RefreshTokenStore(session, timeout=0.01)

        with pytest.raises(PersistenceError):
            await store.rotate("alice", store.generate())

        assert session.rolled_back
        assert not session.committed

    async def test_validate_failure(self):
        with pytest.raises(PersistenceError):
            await RefreshTokenStore(FailingSession()).validate("alice", "token")


class TestClientLifecycle:
    def test_engine_requires_init(self, monkeypatch):
        monkeypatch.setattr(db_client, "_engine", None)
        with pytest.raises(RuntimeError, match="Database not initialized"):
            db_client.get_engine()

    def test_session_factory_requires_init(self, monkeypatch):
        monkeypatch.setattr(db_client, "_async_session_factory", None)
        with pytest.raises(RuntimeError, match="Database not initialized"):
            db_client.get_session_factory()

    async def test_close_without_init_is_noop(self, monkeypatch):
        monkeypatch.setattr(db_client, "_engine", None)
        await db_client.close_db()
        assert db_client._engine is None
