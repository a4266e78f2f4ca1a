import pytest
from PIL import Image

from quickreports.errors import DecodeError, ValidationError
from quickreports.image_codec import decode_image, encode_image


def test_encode_produces_png(make_image):
    data = encode_image(make_image())
    assert data.startswith(b"\x89PNG\r\n\x1a\n")


def test_decode_restores_pixels():
    original = Image.new("RGBA", (3, 3), (10, 20, 30, 128))
    decoded = decode_image(encode_image(original))
    assert decoded.size == (3, 3)
    assert decoded.mode == "RGBA"
    assert decoded.tobytes() == original.tobytes()


@pytest.mark.parametrize("blob", [b"", b"garbage", b"\x89PNG\r\n\x1a\n\x00\x00"])
def test_decode_rejects_invalid_blobs(blob):
    with pytest.raises(DecodeError):
        decode_image(blob)


def test_decode_rejects_truncated_png():
    data = encode_image(Image.effect_noise((64, 64), 64))
    with pytest.raises(DecodeError):
        decode_image(data[: len(data) // 2])


def test_encode_rejects_unsupported_mode():
    with pytest.raises(ValidationError):
        encode_image(Image.new("HSV", (2, 2)))


def test_decode_rejects_oversized_image(monkeypatch):
    data = encode_image(Image.new("L", (200, 200)))
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    with pytest.raises(DecodeError):
        decode_image(data)
