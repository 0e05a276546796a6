from __future__ import annotations

import io
import threading
import zipfile

from fastapi.testclient import TestClient
from PIL import Image

from whitebg.presentation import api


def _image_bytes(size: tuple[int, int] = (20, 20)) -> bytes:
    img = Image.new('RGB', size, 'white')
    img.putpixel((0, 0), (0, 128, 0))
    out = io.BytesIO()
    img.save(out, format='PNG')
    return out.getvalue()


def test_health() -> None:
    client = TestClient(api.app)
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.json()['status'] == 'ok'
    assert res.headers['x-request-id']


def test_remove_white_bg() -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/remove-white-bg',
        files={'file': ('logo.png', _image_bytes(), 'image/png')},
        data={'tolerance': '10', 'size': '10x5'},
    )

    assert res.status_code == 200
    assert res.headers['content-type'] == 'image/png'
    assert 'logo_no_bg.png' in res.headers['content-disposition']
    with Image.open(io.BytesIO(res.content)) as result:
        assert result.mode == 'RGBA'
        assert result.size == (10, 5)


def test_remove_white_bg_keeps_non_white_pixels() -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/remove-white-bg',
        files={'file': ('logo.png', _image_bytes(), 'image/png')},
    )

    assert res.status_code == 200
    with Image.open(io.BytesIO(res.content)) as result:
        assert result.getpixel((0, 0)) == (0, 128, 0, 255)
        assert result.getpixel((5, 5)) == (255, 255, 255, 0)


def test_rejects_bad_tolerance() -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/remove-white-bg',
        files={'file': ('logo.png', _image_bytes(), 'image/png')},
        data={'tolerance': '300'},
    )

    assert res.status_code == 400
    assert 'Tolerance' in res.json()['detail']


def test_rejects_bad_size() -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/remove-white-bg',
        files={'file': ('logo.png', _image_bytes(), 'image/png')},
        data={'size': 'abcxdef'},
    )

    assert res.status_code == 400


def test_rejects_non_image() -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/remove-white-bg',
        files={'file': ('a.txt', b'hello', 'text/plain')},
    )

    assert res.status_code == 400


def test_rejects_oversized_upload(monkeypatch) -> None:
    monkeypatch.setattr(api.settings, 'max_image_bytes', 10)
    client = TestClient(api.app)
    res = client.post(
        '/api/remove-white-bg',
        files={'file': ('logo.png', _image_bytes(), 'image/png')},
    )

    assert res.status_code == 413


def test_favicons_archive() -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/favicons',
        files={'file': ('brand.png', _image_bytes((64, 64)), 'image/png')},
    )

    assert res.status_code == 200
    assert res.headers['content-type'] == 'application/zip'
    with zipfile.ZipFile(io.BytesIO(res.content)) as archive:
        names = archive.namelist()
        assert names == [
            'brand_no_bg.png',
            'brand_no_bg_16x16.png',
            'brand_no_bg_32x32.png',
            'brand_no_bg_48x48.png',
        ]
        with Image.open(io.BytesIO(archive.read('brand_no_bg_32x32.png'))) as icon:
            assert icon.size == (32, 32)


def test_metrics_endpoint() -> None:
    client = TestClient(api.app)
    client.get('/api/health')
    res = client.get('/api/metrics')
    assert res.status_code == 200
    body = res.json()
    assert 'timestamp' in body
    assert body['http_requests_total'] >= 1


def test_prometheus_metrics() -> None:
    client = TestClient(api.app)
    res = client.get('/api/metrics/prometheus')
    assert res.status_code == 200
    assert 'whitebg_' in res.text


def test_rejects_undecodable_image_upload() -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/remove-white-bg',
        files={'file': ('broken.png', b'not really a png', 'image/png')},
    )

    assert res.status_code == 400
    assert 'Could not read image' in res.json()['detail']


def test_rejects_image_over_pixel_limit(monkeypatch) -> None:
    monkeypatch.setattr(api.settings, 'max_image_pixels', 100)
    client = TestClient(api.app)
    res = client.post(
        '/api/favicons',
        files={'file': ('logo.png', _image_bytes(), 'image/png')},
    )

    assert res.status_code == 400
    assert 'too large in pixels' in res.json()['detail']


def test_favicons_from_custom_size() -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/favicons',
        files={'file': ('brand.png', _image_bytes((64, 64)), 'image/png')},
        data={'size': '24x12'},
    )

    assert res.status_code == 200
    with zipfile.ZipFile(io.BytesIO(res.content)) as archive:
        with Image.open(io.BytesIO(archive.read('brand_no_bg.png'))) as primary:
            assert primary.size == (24, 12)
        with Image.open(io.BytesIO(archive.read('brand_no_bg_48x48.png'))) as icon:
            assert icon.size == (48, 48)


def test_favicons_rejects_bad_size() -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/favicons',
        files={'file': ('brand.png', _image_bytes(), 'image/png')},
        data={'size': '0x16'},
    )

    assert res.status_code == 400


def test_processing_does_not_block_other_requests(monkeypatch) -> None:
    started = threading.Event()
    release = threading.Event()
    waits: list[bool] = []

    def slow_execute(self, image_bytes, size=None, max_pixels=None):
        started.set()
        waits.append(release.wait(timeout=5))
        return _image_bytes()

    monkeypatch.setattr(api.RemoveBackgroundUseCase, 'execute', slow_execute)
    responses = {}

    with TestClient(api.app) as client:
        def post_heavy() -> None:
            responses['heavy'] = client.post(
                '/api/remove-white-bg',
                files={'file': ('logo.png', _image_bytes(), 'image/png')},
            )

        worker = threading.Thread(target=post_heavy)
        worker.start()
        assert started.wait(timeout=5)

        health = client.get('/api/health')
        release.set()
        worker.join(timeout=10)

    assert health.status_code == 200
    assert waits == [True]
    assert responses['heavy'].status_code == 200
