"""Tests for assembler API endpoints."""

import hashlib
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from assembler.main import app
from assembler.service_locator import get_chunk_merger


@pytest.fixture
def client(merger):
    """Create FastAPI test client backed by a temporary ChunkMerger."""
    app.dependency_overrides[get_chunk_merger] = lambda: merger
    yield TestClient(app)
    app.dependency_overrides.clear()


def _post_chunk(client, name, data, chunk_number, total_chunks, **extra):
    return client.post(
        '/uploads/chunks',
        files={'file': (name, data, 'application/octet-stream')},
        data={'chunk_number': str(chunk_number), 'total_chunks': str(total_chunks), **extra},
    )


def test_root_endpoint(client):
    """Test health check endpoint."""
    response = client.get('/')
    assert response.status_code == 200
    assert response.json()['status'] == 'running'
    assert 'X-Request-ID' in response.headers


def test_intermediate_chunk_returns_200(client):
    response = _post_chunk(client, 'clip.mov', b'abc', 0, 2)

    assert response.status_code == 200
    body = response.json()
    assert body['success'] is True
    assert body['chunk_number'] == 0
    assert body['merged_file_path'] is None


def test_final_chunk_returns_201_with_path(client):
    _post_chunk(client, 'clip.mov', b'abc', 0, 2)
    response = _post_chunk(client, 'clip.mov', b'def', 1, 2)

    assert response.status_code == 201
    merged = Path(response.json()['merged_file_path'])
    assert merged.name == 'clip.mov'
    assert merged.read_bytes() == b'abcdef'


def test_missing_chunk_returns_409(client):
    response = _post_chunk(client, 'clip.mov', b'def', 1, 2)

    assert response.status_code == 409
    assert response.json()['code'] == 'MISSING_CHUNK'


@pytest.mark.parametrize('chunk_number,total_chunks', [(-1, 2), (2, 2), (0, 0), ('x', 2)])
def test_invalid_fields_return_400(client, chunk_number, total_chunks):
    response = _post_chunk(client, 'clip.mov', b'abc', chunk_number, total_chunks)

    assert response.status_code == 400
    assert response.json()['code'] == 'VALIDATION_ERROR'


def test_missing_file_returns_400(client):
    response = client.post('/uploads/chunks', data={'chunk_number': '0', 'total_chunks': '1'})

    assert response.status_code == 400
    assert 'file' in response.json()['detail']


def test_missing_form_field_returns_422(client):
    response = client.post('/uploads/chunks', files={'file': ('a.txt', b'x')}, data={'chunk_number': '0'})

    assert response.status_code == 422


def test_checksum_mismatch_returns_400(client):
    response = _post_chunk(client, 'clip.mov', b'abc', 0, 2, checksum=hashlib.sha256(b'other').hexdigest())

    assert response.status_code == 400
    assert response.json()['code'] == 'CHECKSUM_MISMATCH'


def test_list_received_chunks(client):
    _post_chunk(client, 'clip.mov', b'a', 0, 4, upload_id='up1')
    _post_chunk(client, 'clip.mov', b'c', 2, 4, upload_id='up1')

    response = client.get('/uploads/clip.mov/chunks', params={'upload_id': 'up1'})

    assert response.status_code == 200
    assert response.json() == {'file_name': 'clip.mov', 'upload_id': 'up1', 'chunk_numbers': [0, 2]}


def test_list_received_chunks_bad_upload_id(client):
    response = client.get('/uploads/clip.mov/chunks', params={'upload_id': 'bad id!'})

    assert response.status_code == 400
    assert response.json()['code'] == 'VALIDATION_ERROR'
