import io
import struct
import zlib

from PIL import Image


def _png_bytes(size=(32, 24), color=(200, 30, 30)):
    bio = io.BytesIO()
    Image.new("RGB", size, color).save(bio, format="PNG")
    return bio.getvalue()


def _member(client, house):
    house_id, _, _, headers = house
    r = client.post(f'/houses/{house_id}/members', json={'members': [{'name': 'Doc Owner'}]}, headers=headers)
    return r.json()['members'][0]['memberId'], headers


def _upload(client, method, member_id, payload, headers):
    files = {'memberDocument': ('document.png', payload, 'image/png')}
    return client.request(method, f'/members/{member_id}/documents', files=files, headers=headers)


def test_upload_and_download_document(client, house):
    member_id, headers = _member(client, house)
    assert client.get(f'/members/{member_id}/documents', headers=headers).status_code == 404

    r = _upload(client, 'POST', member_id, _png_bytes(), headers)
    assert r.status_code == 204

    r = client.get(f'/members/{member_id}/documents', headers=headers)
    assert r.status_code == 200
    assert r.headers['content-type'] == 'image/jpeg'
    assert r.headers['cache-control'] == 'no-cache'
    assert r.headers['content-disposition'] == f'inline; filename="member_{member_id}_document.jpg"'
    img = Image.open(io.BytesIO(r.content))
    assert img.format == 'JPEG'
    assert img.size == (32, 24)


def test_update_replaces_document(client, house):
    member_id, headers = _member(client, house)
    assert _upload(client, 'POST', member_id, _png_bytes(), headers).status_code == 204
    first = client.get(f'/members/{member_id}/documents', headers=headers).content
    assert _upload(client, 'PUT', member_id, _png_bytes(size=(64, 64)), headers).status_code == 204
    second = client.get(f'/members/{member_id}/documents', headers=headers).content
    assert first != second
    assert Image.open(io.BytesIO(second)).size == (64, 64)


def test_delete_document(client, house):
    member_id, headers = _member(client, house)
    assert client.delete(f'/members/{member_id}/documents', headers=headers).status_code == 404
    _upload(client, 'POST', member_id, _png_bytes(), headers)
    assert client.delete(f'/members/{member_id}/documents', headers=headers).status_code == 204
    assert client.get(f'/members/{member_id}/documents', headers=headers).status_code == 404


def test_upload_errors(client, house):
    member_id, headers = _member(client, house)
    assert _upload(client, 'POST', 'missing-member', _png_bytes(), headers).status_code == 404

    r = _upload(client, 'POST', member_id, b'not an image at all', headers)
    assert r.status_code == 409
    assert r.json() == {'message': 'Something go wrong with document saving!'}

    r = _upload(client, 'POST', member_id, b'\0' * (1024 * 1024 + 1), headers)
    assert r.status_code == 413
    assert r.json() == {'message': 'File size exceeds limit!'}
    assert client.get(f'/members/{member_id}/documents', headers=headers).status_code == 404


def _png_header_only(width, height):
    """A tiny PNG whose IHDR declares `width` x `height` pixels."""
    def chunk(kind, data):
        return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", zlib.crc32(kind + data) & 0xFFFFFFFF)
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", ihdr) + chunk(b"IEND", b"")


def test_oversized_dimensions_are_rejected_as_undecodable(client, house):
    member_id, headers = _member(client, house)
    payload = _png_header_only(20000, 20000)
    assert len(payload) < 100
    r = _upload(client, 'POST', member_id, payload, headers)
    assert r.status_code == 409
    assert r.json() == {'message': 'Something go wrong with document saving!'}
    assert client.get(f'/members/{member_id}/documents', headers=headers).status_code == 404
