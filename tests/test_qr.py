import base64

from studio.services.qr import build_checkin_token, render_qr_data_uri, render_qr_png

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_tokens_are_fresh_per_activation():
    a = build_checkin_token(1, 2)
    b = build_checkin_token(1, 2)
    assert a != b
    assert len(a) == 32


def test_render_is_deterministic_and_png():
    png = render_qr_png("abc123")
    assert png.startswith(PNG_MAGIC)
    assert render_qr_png("abc123") == png


def test_data_uri_wraps_png():
    uri = render_qr_data_uri("abc123")
    prefix = "data:image/png;base64,"
    assert uri.startswith(prefix)
    assert base64.b64decode(uri[len(prefix):]).startswith(PNG_MAGIC)
