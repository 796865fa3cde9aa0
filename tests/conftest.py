"""Pytest fixtures for chunkupload tests."""
import os
import tempfile
import zlib
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from chunkupload.core.api import APIConfig, UploadApiClient


class FakeUploadServer:
    """
    In-process upload service.

    Records every request and reassembles chunks so tests can check what
    reached the server. Failures are injected through the public attributes.
    """

    def __init__(self, chunk_size: int = 2 * 1024 * 1024):
        self.chunk_size = chunk_size
        self.url = None
        self.requests = []
        self.uploads = {}
        self.completed = []
        self.cookies_seen = []

        # Failure injection
        self.init_response = None            # (status, json body) returned by init
        self.chunk_failures = {}             # chunk index -> list of (status, json body), one per attempt
        self.complete_response = None        # (status, json body) returned by complete
        self.quota = {'used_quota': 5 * 1024 ** 3, 'total_quota': 20 * 1024 ** 3}

        self.app = web.Application(client_max_size=64 * 1024 * 1024)
        self.app.router.add_post('/upload/init_chunk_upload', self.handle_init)
        self.app.router.add_post('/upload/chunk', self.handle_chunk)
        self.app.router.add_post('/upload/complete_chunk_upload', self.handle_complete)
        self.app.router.add_get('/upload/quota', self.handle_quota)

    def chunk_indices(self, upload_id):
        """Chunk indices in the order they were received."""
        return [
            int(req['params']['chunk_index'])
            for req in self.requests
            if req['path'] == '/upload/chunk' and req['params'].get('upload_id') == upload_id
        ]

    def paths(self):
        return [req['path'] for req in self.requests]

    def _record(self, request, **extra):
        self.cookies_seen.append(dict(request.cookies))
        self.requests.append({
            'method': request.method,
            'path': request.path,
            'params': dict(request.query),
            **extra
        })

    async def handle_init(self, request):
        body = await request.json()
        self._record(request, json=body)
        if self.init_response is not None:
            status, payload = self.init_response
            return web.json_response(payload, status=status)

        upload_id = f"up-{len(self.uploads) + 1}"
        self.uploads[upload_id] = {
            'file_name': body['file_name'],
            'file_size': body['file_size'],
            'checksum': body['integrity_check_value'],
            'chunks': {},
        }
        return web.json_response({'upload_id': upload_id, 'chunk_size': self.chunk_size})

    async def handle_chunk(self, request):
        form = await request.post()
        self._record(request)
        index = int(request.query['chunk_index'])

        failures = self.chunk_failures.get(index)
        if failures:
            status, payload = failures.pop(0)
            return web.json_response(payload, status=status)

        upload = self.uploads.get(request.query.get('upload_id'))
        if upload is None:
            return web.json_response({'error': 'unknown_upload'}, status=404)
        upload['chunks'][index] = form['file'].file.read()
        return web.json_response({'status': 'ok'})

    async def handle_complete(self, request):
        body = await request.json()
        self._record(request, json=body)
        if self.complete_response is not None:
            status, payload = self.complete_response
            return web.json_response(payload, status=status)

        upload = self.uploads.get(body.get('upload_id'))
        if upload is None:
            return web.json_response({'error': 'unknown_upload'}, status=404)
        data = b''.join(upload['chunks'][i] for i in sorted(upload['chunks']))
        if len(data) != upload['file_size'] or f"{zlib.crc32(data):08x}" != upload['checksum']:
            return web.json_response({'error': 'integrity_check_failed', 'message': 'Checksum mismatch'}, status=422)
        upload['data'] = data
        self.completed.append(body['upload_id'])
        return web.json_response({'status': 'completed'})

    async def handle_quota(self, request):
        self._record(request)
        return web.json_response(self.quota)


@pytest_asyncio.fixture
async def fake_server():
    """Running FakeUploadServer; its base URL is in .url."""
    server = FakeUploadServer()
    test_server = TestServer(server.app)
    await test_server.start_server()
    server.url = str(test_server.make_url('/'))
    yield server
    await test_server.close()


@pytest.fixture
def api_config(fake_server):
    """APIConfig pointing at the fake server."""
    return APIConfig(base_url=fake_server.url, cookies={'sid': 'test-session'})


@pytest_asyncio.fixture
async def api_client(api_config):
    """Open UploadApiClient against the fake server."""
    async with UploadApiClient(api_config) as client:
        yield client


@pytest.fixture
def make_file():
    """Factory for temporary files of a given size with deterministic content."""
    paths = []

    def _make(size: int, name: str = 'payload.bin') -> Path:
        directory = tempfile.mkdtemp()
        path = Path(directory) / name
        pattern = bytes(range(256))
        with open(path, 'wb') as f:
            remaining = size
            while remaining > 0:
                block = pattern * 4096
                f.write(block[:remaining])
                remaining -= len(block[:remaining])
        paths.append(path)
        return path

    yield _make

    for path in paths:
        if path.exists():
            os.unlink(path)
        os.rmdir(path.parent)
