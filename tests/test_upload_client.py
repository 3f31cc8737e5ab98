"""Unit tests for UploadClient."""

from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from assembler.main import app
from assembler.service_locator import get_chunk_merger
from cli.upload_client import UploadClient


@pytest.fixture
def upload_client(temp_config, monkeypatch):
    monkeypatch.setattr("cli.upload_client.time.sleep", lambda seconds: None)
    client = UploadClient(temp_config)
    temp_config.data['max_retries'] = 1
    temp_config.data['retry_backoff_multiplier'] = 0
    yield client
    client.close()


@pytest.fixture
def assembler_session(merger):
    """Route the client's requests into the real assembler app."""
    app.dependency_overrides[get_chunk_merger] = lambda: merger
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_upload_round_trip(upload_client, assembler_session, sample_file, payload):
    upload_client.session = assembler_session

    result = upload_client.upload_file(str(sample_file), chunk_size=4096, show_progress=False)

    assert result.startswith('Upload complete')
    merged_path = result.rsplit(' ', 1)[1]
    assert merged_path.endswith('.dat')
    assert Path(merged_path).read_bytes() == payload


def test_upload_missing_file(upload_client, tmp_path):
    result = upload_client.upload_file(str(tmp_path / 'nope.bin'))

    assert result.startswith('Error: File not found')


def test_upload_empty_file(upload_client, tmp_path):
    empty = tmp_path / 'empty.txt'
    empty.write_bytes(b'')

    result = upload_client.upload_file(str(empty))

    assert result.startswith('Error:')
    assert 'empty' in result


def test_upload_stops_on_rejected_chunk(upload_client, sample_file):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(409, json={'detail': 'Missing chunk file: x.part_0', 'code': 'MISSING_CHUNK'})

    upload_client.session = httpx.Client(transport=httpx.MockTransport(handler), base_url='http://test')

    result = upload_client.upload_file(str(sample_file), chunk_size=4096, show_progress=False)

    assert result.startswith('Upload failed at chunk 0')
    assert 'restarted' in result
    assert len(calls) == 1


def test_upload_retries_server_errors(upload_client, sample_file):
    statuses = iter([503, 200, 200, 201])

    def handler(request):
        status = next(statuses)
        body = {'success': True, 'message': 'ok', 'merged_file_path': '/srv/x.dat' if status == 201 else None}
        return httpx.Response(status, json=body if status < 500 else {'detail': 'busy', 'code': 'UNKNOWN'})

    upload_client.session = httpx.Client(transport=httpx.MockTransport(handler), base_url='http://test')

    result = upload_client.upload_file(str(sample_file), chunk_size=4096, show_progress=False)

    assert result == 'Upload complete: sample.dat stored as /srv/x.dat'


def test_upload_connection_error(upload_client, sample_file):
    def handler(request):
        raise httpx.ConnectError('refused', request=request)

    upload_client.session = httpx.Client(transport=httpx.MockTransport(handler), base_url='http://test')

    result = upload_client.upload_file(str(sample_file), chunk_size=4096, show_progress=False)

    assert result == 'Error: Cannot connect to assembler server. Is it running?'


def test_send_chunk_sets_form_fields(upload_client):
    from cli.file_splitter import split_file
    from cli.source_file import BytesSourceFile

    captured = {}

    def handler(request):
        captured['body'] = request.content
        captured['request_id'] = request.headers.get('X-Request-ID')
        return httpx.Response(201, json={'success': True, 'message': 'ok'})

    upload_client.session = httpx.Client(transport=httpx.MockTransport(handler), base_url='http://test')
    descriptor = next(split_file(BytesSourceFile('a.txt', b'hello'), chunk_size=10))

    upload_client.send_chunk(descriptor)

    assert b'name="chunk_number"' in captured['body']
    assert descriptor.upload_id.encode() in captured['body']
    assert descriptor.checksum.encode() in captured['body']
    assert captured['request_id']


def test_final_chunk_not_resent_after_timeout(upload_client, merger, sample_file, output_dir):
    assembler = TestClient(app)
    app.dependency_overrides[get_chunk_merger] = lambda: merger
    posted = []

    def handler(request):
        response = assembler.post(
            '/uploads/chunks',
            content=request.content,
            headers={'content-type': request.headers['content-type']},
        )
        posted.append(response.status_code)
        if response.status_code == 201:
            raise httpx.ReadTimeout('merge took too long', request=request)
        return httpx.Response(response.status_code, json=response.json())

    upload_client.session = httpx.Client(transport=httpx.MockTransport(handler), base_url='http://test')
    try:
        result = upload_client.upload_file(str(sample_file), chunk_size=4096, show_progress=False)
    finally:
        app.dependency_overrides.clear()

    assert result.startswith('Error: Timed out waiting for the server')
    assert posted == [200, 200, 201]
    merged = list(output_dir.iterdir())
    assert len(merged) == 1
    assert merged[0].read_bytes() == sample_file.read_bytes()


def test_intermediate_chunk_retried_after_timeout(upload_client, sample_file):
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ReadTimeout('slow disk', request=request)
        status = 201 if len(attempts) == 4 else 200
        return httpx.Response(status, json={'success': True, 'message': 'ok', 'merged_file_path': '/srv/x.dat'})

    upload_client.session = httpx.Client(transport=httpx.MockTransport(handler), base_url='http://test')

    result = upload_client.upload_file(str(sample_file), chunk_size=4096, show_progress=False)

    assert result == 'Upload complete: sample.dat stored as /srv/x.dat'
    assert len(attempts) == 4
