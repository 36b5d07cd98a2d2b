"""Reusable conformance suite for storage backends.

Subclass `CrudContractSuite` in a test module and provide a `backend`
fixture returning a fresh, empty backend; pytest then runs every contract
check against it through a `CrudStore`:

    from crud_lib.conformance import CrudContractSuite

    class TestMyBackend(CrudContractSuite):
        @pytest.fixture
        def backend(self, tmp_path):
            return MyBackend(tmp_path)

Objects are small dicts and keys are strings, so any backend able to store
JSON-like data can be checked. The store reads embedded keys from the
``id`` entry.
"""
from __future__ import annotations
import asyncio
from typing import Any, Optional

import pytest

from crud_lib.cancellation import CancellationToken
from crud_lib.contract import CrudStore, MappingKeyAccessor
from crud_lib.errors import (
    BackendFailure,
    DuplicateKeyError,
    KeyMismatchError,
    MissingKeyError,
    NotFoundError,
    NullArgumentError,
    OperationCancelled,
)


class GatedBackend:
    """Wrap a backend so reads and updates block until `gate` is set.

    `entered` is set once a blocked call has started, which lets a test
    cancel an operation while it is suspended inside the backend. Must be
    created inside the running event loop.
    """

    def __init__(self, inner: Any) -> None:
        self.inner = inner
        self.can_issue_keys = inner.can_issue_keys
        self.gate = asyncio.Event()
        self.entered = asyncio.Event()

    async def _hold(self) -> None:
        self.entered.set()
        await self.gate.wait()

    async def raw_create(self, key, obj) -> None:
        await self.inner.raw_create(key, obj)

    async def raw_read(self, key) -> Optional[Any]:
        await self._hold()
        return await self.inner.raw_read(key)

    async def raw_update(self, key, obj) -> bool:
        await self._hold()
        return await self.inner.raw_update(key, obj)

    async def raw_delete(self, key) -> bool:
        return await self.inner.raw_delete(key)

    async def raw_exists(self, key) -> bool:
        return await self.inner.raw_exists(key)

    async def generate_key(self):
        return await self.inner.generate_key()


class CrudContractSuite:
    """Contract checks shared by every backend. Not collected on its own."""

    key_field = "id"

    @pytest.fixture
    def backend(self):
        raise NotImplementedError("conformance subclasses must provide a `backend` fixture")

    @pytest.fixture
    def store(self, backend) -> CrudStore:
        return CrudStore(backend, key_accessor=MappingKeyAccessor(self.key_field))

    def test_create_returns_supplied_key_and_read_returns_object(self, store):
        async def scenario():
            key = await store.create({"name": "John Doe"}, key="s-1")
            assert key == "s-1"
            assert await store.read("s-1") == {"name": "John Doe"}

        asyncio.run(scenario())

    def test_create_read_round_trip_for_several_objects(self, store):
        objects = {
            "a": {"name": "Ada", "tags": ["x", "y"]},
            "b": {"name": "Bob", "age": 41},
            "c": {"nested": {"deep": [1, 2, 3]}},
        }

        async def scenario():
            for key, obj in objects.items():
                assert await store.create(obj, key=key) == key
            for key, obj in objects.items():
                assert await store.read(key) == obj

        asyncio.run(scenario())

    def test_duplicate_create_fails_and_keeps_original(self, store):
        async def scenario():
            await store.create({"v": 1}, key="dup")
            with pytest.raises(DuplicateKeyError) as excinfo:
                await store.create({"v": 2}, key="dup")
            assert excinfo.value.key == "dup"
            assert await store.read("dup") == {"v": 1}

        asyncio.run(scenario())

    def test_unknown_key_is_not_found(self, store):
        async def scenario():
            with pytest.raises(NotFoundError):
                await store.read("never")
            with pytest.raises(NotFoundError):
                await store.update("never", {"v": 1})
            with pytest.raises(NotFoundError):
                await store.delete("never")
            # a failed update must not create the key
            with pytest.raises(NotFoundError):
                await store.read("never")

        asyncio.run(scenario())

    def test_update_replaces_object(self, store):
        async def scenario():
            await store.create({"v": 1}, key="u")
            await store.update("u", {"v": 2})
            assert await store.read("u") == {"v": 2}
            await store.update("u", {"v": 3})
            assert await store.read("u") == {"v": 3}

        asyncio.run(scenario())

    def test_delete_makes_key_absent(self, store):
        async def scenario():
            await store.create({"v": 1}, key="d")
            await store.delete("d")
            with pytest.raises(NotFoundError):
                await store.read("d")
            with pytest.raises(NotFoundError):
                await store.update("d", {"v": 2})
            with pytest.raises(NotFoundError):
                await store.delete("d")

        asyncio.run(scenario())

    def test_deleted_key_can_be_created_again(self, store):
        async def scenario():
            await store.create({"v": 1}, key="again")
            await store.delete("again")
            assert await store.create({"v": 2}, key="again") == "again"
            assert await store.read("again") == {"v": 2}

        asyncio.run(scenario())

    def test_missing_arguments_name_the_parameter(self, store):
        async def scenario():
            with pytest.raises(NullArgumentError) as e1:
                await store.create(None, key="k")
            assert e1.value.param_name == "object"
            with pytest.raises(NullArgumentError) as e2:
                await store.read(None)
            assert e2.value.param_name == "key"
            with pytest.raises(NullArgumentError) as e3:
                await store.update(None, {"v": 1})
            assert e3.value.param_name == "key"
            with pytest.raises(NullArgumentError) as e4:
                await store.update("k", None)
            assert e4.value.param_name == "object"
            with pytest.raises(NullArgumentError) as e5:
                await store.delete(None)
            assert e5.value.param_name == "key"
            # nothing was stored along the way
            with pytest.raises(NotFoundError):
                await store.read("k")

        asyncio.run(scenario())

    def test_supplied_key_must_match_embedded_key(self, store):
        async def scenario():
            with pytest.raises(KeyMismatchError):
                await store.create({self.key_field: "k1", "v": 1}, key="k2")
            with pytest.raises(NotFoundError):
                await store.read("k1")
            with pytest.raises(NotFoundError):
                await store.read("k2")

        asyncio.run(scenario())

    def test_matching_supplied_and_embedded_key(self, store):
        async def scenario():
            obj = {self.key_field: "same", "v": 1}
            assert await store.create(obj, key="same") == "same"
            assert await store.read("same") == obj

        asyncio.run(scenario())

    def test_embedded_key_used_when_none_supplied(self, store):
        async def scenario():
            obj = {self.key_field: "emb-1", "v": 1}
            assert await store.create(obj) == "emb-1"
            assert await store.read("emb-1") == obj

        asyncio.run(scenario())

    def test_create_without_any_key(self, store, backend):
        async def scenario():
            if backend.can_issue_keys:
                key = await store.create({"v": 1})
                assert key is not None
                assert await store.read(key) == {"v": 1}
                other = await store.create({"v": 2})
                assert other != key
            else:
                with pytest.raises(MissingKeyError):
                    await store.create({"v": 1})

        asyncio.run(scenario())

    def test_object_is_stored_unchanged_or_rejected(self, store):
        obj = {"pair": (1, 2), "by_num": {1: "a"}}

        async def scenario():
            try:
                await store.create(obj, key="lossy")
            except BackendFailure:
                # a backend that cannot keep the value must not keep anything
                with pytest.raises(NotFoundError):
                    await store.read("lossy")
            else:
                assert await store.read("lossy") == obj

        asyncio.run(scenario())

    def test_cancel_in_flight_read(self, store, backend):
        async def scenario():
            await store.create({"v": 1}, key="c")
            gated = GatedBackend(backend)
            gated_store = CrudStore(gated, key_accessor=MappingKeyAccessor(self.key_field))
            token = CancellationToken()
            task = asyncio.ensure_future(gated_store.read("c", cancel=token))
            await gated.entered.wait()
            token.cancel()
            with pytest.raises(OperationCancelled):
                await task

        asyncio.run(scenario())

    def test_cancelled_update_leaves_object_unchanged(self, store, backend):
        async def scenario():
            await store.create({"v": 1}, key="cu")
            gated = GatedBackend(backend)
            gated_store = CrudStore(gated, key_accessor=MappingKeyAccessor(self.key_field))
            token = CancellationToken()
            task = asyncio.ensure_future(gated_store.update("cu", {"v": 2}, cancel=token))
            await gated.entered.wait()
            token.cancel()
            with pytest.raises(OperationCancelled):
                await task
            assert await store.read("cu") == {"v": 1}

        asyncio.run(scenario())

    def test_task_cancellation_is_propagated(self, store, backend):
        async def scenario():
            await store.create({"v": 1}, key="t")
            gated = GatedBackend(backend)
            gated_store = CrudStore(gated)
            task = asyncio.ensure_future(gated_store.read("t", cancel=CancellationToken()))
            await gated.entered.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        asyncio.run(scenario())
