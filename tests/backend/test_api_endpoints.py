import pytest
from starlette.testclient import TestClient

from crud_lib.main import create_app, Config
from crud_lib.storage import MemoryBackend


@pytest.fixture
def client():
    app = create_app(Config(storage_backend='memory'))
    return TestClient(app)


def test_create_read_update_delete(client):
    r = client.post('/api/v1/objects', json={'object': {'name': 'John Doe'}, 'key': 's-1'})
    assert r.status_code == 201
    assert r.json() == {'key': 's-1'}

    r = client.get('/api/v1/objects/s-1')
    assert r.status_code == 200
    assert r.json() == {'name': 'John Doe'}

    r = client.put('/api/v1/objects/s-1', json={'object': {'name': 'Jane Doe'}})
    assert r.json() == {'ok': True, 'key': 's-1'}
    assert client.get('/api/v1/objects/s-1').json() == {'name': 'Jane Doe'}

    r = client.delete('/api/v1/objects/s-1')
    assert r.json() == {'ok': True, 'key': 's-1'}
    assert client.get('/api/v1/objects/s-1').status_code == 404


def test_generated_and_embedded_keys(client):
    r = client.post('/api/v1/objects', json={'object': {'v': 1}})
    assert r.status_code == 201
    key = r.json()['key']
    assert client.get(f'/api/v1/objects/{key}').json() == {'v': 1}

    r = client.post('/api/v1/objects', json={'object': {'id': 'emb', 'v': 2}})
    assert r.json() == {'key': 'emb'}


def test_error_payloads(client):
    client.post('/api/v1/objects', json={'object': {'v': 1}, 'key': 'k'})

    r = client.post('/api/v1/objects', json={'object': {'v': 2}, 'key': 'k'})
    assert r.status_code == 409
    assert r.json()['detail']['error'] == 'duplicate_key'

    r = client.post('/api/v1/objects', json={'object': {'id': 'a'}, 'key': 'b'})
    assert r.status_code == 400
    assert r.json()['detail']['error'] == 'key_mismatch'

    r = client.post('/api/v1/objects', json={'key': 'x'})
    assert r.status_code == 400
    assert r.json()['detail']['error'] == 'null_argument'

    r = client.put('/api/v1/objects/k', json={})
    assert r.status_code == 400

    for method in ('get', 'delete'):
        r = getattr(client, method)('/api/v1/objects/missing')
        assert r.status_code == 404
        assert r.json()['detail'] == {'error': 'not_found', 'message': "No object with key 'missing'"}
    r = client.put('/api/v1/objects/missing', json={'object': {'v': 1}})
    assert r.status_code == 404


def test_missing_key_without_issuing_backend():
    app = create_app(Config(key_field=None), backend=MemoryBackend(issue_keys=False))
    client = TestClient(app)
    r = client.post('/api/v1/objects', json={'object': {'id': 'ignored'}})
    assert r.status_code == 400
    assert r.json()['detail']['error'] == 'missing_key'


def test_file_backend_app(tmp_path):
    app = create_app(Config(data_dir=str(tmp_path), serializer='yaml'))
    client = TestClient(app)
    assert client.post('/api/v1/objects', json={'object': {'v': 1}, 'key': 'f'}).status_code == 201
    assert (tmp_path / 'objects' / 'f.yml').exists()


def test_health_reports_backend(client):
    r = client.get('/api/health')
    assert r.status_code == 200
    assert r.json()['status'] == 'ok'
    assert r.json()['backend'] == 'memory'


def test_numeric_embedded_key_is_addressable_by_path(client):
    r = client.post('/api/v1/objects', json={'object': {'id': 5, 'v': 1}})
    assert r.status_code == 201
    assert r.json() == {'key': '5'}
    r = client.get('/api/v1/objects/5')
    assert r.status_code == 200
    assert r.json() == {'id': 5, 'v': 1}

    r = client.post('/api/v1/objects', json={'object': {'id': 6}, 'key': '6'})
    assert r.status_code == 201
    assert client.get('/api/v1/objects/6').status_code == 200
