"""JPEG encoding helpers for house member documents.

Uploaded images are decoded with Pillow and written back as JPEG. Small
uploads are written with the encoder defaults; uploads at or above the
compression border are re-encoded with an explicit quality.
"""

import io

from PIL import Image, UnidentifiedImageError

from ..errors import DocumentSaveError


def load_image(payload: bytes) -> Image.Image:
    """Decode `payload` into an RGB image or raise DocumentSaveError."""
    try:
        img = Image.open(io.BytesIO(payload))
        img.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise DocumentSaveError(f"cannot decode image: {e}") from e
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img


def write_jpeg(img: Image.Image) -> bytes:
    bio = io.BytesIO()
    img.save(bio, format="JPEG")
    return bio.getvalue()


def compress_jpeg(img: Image.Image, quality: float) -> bytes:
    """Encode `img` as JPEG with `quality` given on a 0..1 scale."""
    bio = io.BytesIO()
    img.save(bio, format="JPEG", quality=max(1, min(95, round(quality * 100))), optimize=True)
    return bio.getvalue()


def encode_document_image(payload: bytes, compression_border_bytes: int, quality: float) -> bytes:
    """Return JPEG bytes for an uploaded image, compressing large uploads."""
    img = load_image(payload)
    if len(payload) < compression_border_bytes:
        return write_jpeg(img)
    return compress_jpeg(img, quality)
