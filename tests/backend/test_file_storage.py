import asyncio

import pytest

from crud_lib.contract import CrudStore
from crud_lib.errors import BackendFailure, DuplicateKeyError
from crud_lib.storage.file_backend import FileBackend
from crud_lib.storage.serializer import EncryptedSerializer, YAMLSerializer


def test_save_load_delete(tmp_path):
    b = FileBackend(data_dir=tmp_path, collection='unittest')

    async def scenario():
        await b.raw_create('item1', {'x': 1})
        assert await b.raw_exists('item1') is True
        assert await b.raw_read('item1') == {'x': 1}
        assert await b.raw_update('item1', {'x': 2}) is True
        assert await b.raw_read('item1') == {'x': 2}
        assert await b.raw_delete('item1') is True
        assert await b.raw_exists('item1') is False

    asyncio.run(scenario())
    assert (tmp_path / 'unittest').is_dir()
    assert b.stored_keys() == []


def test_keys_with_separators_do_not_collide(tmp_path):
    b = FileBackend(data_dir=tmp_path)

    async def scenario():
        await b.raw_create('a/b', 1)
        await b.raw_create('a_b', 2)
        await b.raw_create('../escape', 3)
        assert await b.raw_read('a/b') == 1
        assert await b.raw_read('a_b') == 2
        assert await b.raw_read('../escape') == 3

    asyncio.run(scenario())
    assert b.stored_keys() == ['../escape', 'a/b', 'a_b']
    # everything stays inside the collection directory
    assert all(p.parent == b.collection_dir for p in b.collection_dir.iterdir())


def test_no_temporary_files_left_behind(tmp_path):
    b = FileBackend(data_dir=tmp_path, serializer=YAMLSerializer())

    async def scenario():
        await b.raw_create('k', {'v': 1})
        await b.raw_update('k', {'v': 2})

    asyncio.run(scenario())
    assert [p.name for p in b.collection_dir.iterdir()] == ['k.yml']


def test_raw_create_refuses_existing_file(tmp_path):
    b = FileBackend(data_dir=tmp_path)

    async def scenario():
        await b.raw_create('k', {'v': 1})
        with pytest.raises(DuplicateKeyError):
            await b.raw_create('k', {'v': 2})
        assert await b.raw_read('k') == {'v': 1}

    asyncio.run(scenario())


def test_absent_keys_reported_by_return_value(tmp_path):
    b = FileBackend(data_dir=tmp_path)

    async def scenario():
        assert await b.raw_read('nope') is None
        assert await b.raw_update('nope', {'v': 1}) is False
        assert await b.raw_delete('nope') is False

    asyncio.run(scenario())
    assert b.stored_keys() == []


def test_corrupt_file_is_backend_failure(tmp_path):
    b = FileBackend(data_dir=tmp_path)
    (b.collection_dir / 'bad.json').write_bytes(b'{not json')
    with pytest.raises(BackendFailure):
        asyncio.run(b.raw_read('bad'))


def test_unserializable_object_is_backend_failure(tmp_path):
    b = FileBackend(data_dir=tmp_path)
    with pytest.raises(BackendFailure):
        asyncio.run(b.raw_create('k', {'v': object()}))
    assert list(b.collection_dir.iterdir()) == []


def test_wrong_password_is_backend_failure(tmp_path):
    writer = FileBackend(data_dir=tmp_path, serializer=EncryptedSerializer(password='right', iterations=1000))
    reader = FileBackend(data_dir=tmp_path, serializer=EncryptedSerializer(password='wrong', iterations=1000))
    asyncio.run(writer.raw_create('secret', {'pat': 'xyz'}))
    with pytest.raises(BackendFailure):
        asyncio.run(reader.raw_read('secret'))


def test_data_survives_a_new_backend_instance(tmp_path):
    asyncio.run(FileBackend(data_dir=tmp_path).raw_create('k', {'v': 1}))
    assert asyncio.run(FileBackend(data_dir=tmp_path).raw_read('k')) == {'v': 1}


def test_generated_keys_are_unused(tmp_path):
    b = FileBackend(data_dir=tmp_path)

    async def scenario():
        key = await b.generate_key()
        assert not await b.raw_exists(key)
        return key

    assert len(asyncio.run(scenario())) == 32


def test_unusable_filename_is_a_backend_failure(tmp_path):
    b = FileBackend(data_dir=tmp_path)
    store = CrudStore(b)
    key = 'x' * 300

    async def scenario():
        with pytest.raises(BackendFailure):
            await b.raw_exists(key)
        with pytest.raises(BackendFailure):
            await b.raw_update(key, {'v': 1})
        with pytest.raises(BackendFailure):
            await b.raw_create(key, {'v': 1})
        with pytest.raises(BackendFailure):
            await store.update(key, {'v': 1})
        with pytest.raises(BackendFailure):
            await store.create({'v': 1}, key=key)

    asyncio.run(scenario())
    assert b.stored_keys() == []
