from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from quickreports.errors import DecodeError, ValidationError

IMAGE_FORMAT = "PNG"
# Lossless; the reference quality setting of 50 maps onto zlib level 4.
PNG_COMPRESS_LEVEL = 4


def encode_image(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    try:
        image.save(buf, format=IMAGE_FORMAT, compress_level=PNG_COMPRESS_LEVEL)
    except (OSError, ValueError) as e:
        raise ValidationError(f"image cannot be encoded as {IMAGE_FORMAT}: {e}") from e
    return buf.getvalue()


def decode_image(data: bytes) -> Image.Image:
    if not data:
        raise DecodeError("empty image blob")
    try:
        image = Image.open(io.BytesIO(data))
        # open() is lazy; load() surfaces truncated or corrupt pixel data now
        image.load()
    except (
        Image.DecompressionBombError,
        UnidentifiedImageError,
        OSError,
        EOFError,
        SyntaxError,
        ValueError,
    ) as e:
        raise DecodeError(f"stored blob is not a valid image: {e}") from e
    return image
