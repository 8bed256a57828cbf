"""
Module: common.images

Purpose:
    Image references for questions. Records store each image inline as a
    base64 ``data:`` URI so a record is self-contained in the store and in
    exports. These helpers convert between files / PIL images and that
    reference form and reject payloads that are not images.

Key Functions:
    - image_to_data_uri(): PIL image -> data URI
    - load_image_reference(): Image file on disk -> data URI
    - data_uri_to_image(): data URI -> PIL image
    - image_size(): (width, height) of a referenced image

Dependencies:
    - PIL/Pillow: Decoding, format detection, downscaling
    - base64, io (std)

Used By:
    - Callers capturing pasted / dropped screenshots
    - library.service.QuestionLibrary._check_images (via is_image_reference)
"""

from __future__ import annotations

import base64
import binascii
import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


_DATA_URI_PREFIX = "data:"
_BASE64_MARKER = ";base64,"


class ImageDecodeError(ValueError):
    """Payload is not a decodable image reference."""
    pass


def image_to_data_uri(
    image: Image.Image,
    *,
    fmt: str = "PNG",
    max_dimension: Optional[int] = None,
) -> str:
    """
    Encode a PIL image as a base64 data URI.

    Args:
        image: Source image (not modified)
        fmt: Pillow format name, e.g. "PNG" or "JPEG"
        max_dimension: If set, downscale so neither side exceeds it

    Returns:
        String like "data:image/png;base64,iVBOR..."
    """
    if max_dimension is not None and max(image.size) > max_dimension:
        image = image.copy()
        image.thumbnail((max_dimension, max_dimension))
    if fmt.upper() in ("JPEG", "JPG") and image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    buffer = BytesIO()
    image.save(buffer, format=fmt)
    mime = Image.MIME.get(fmt.upper(), f"image/{fmt.lower()}")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"{_DATA_URI_PREFIX}{mime}{_BASE64_MARKER}{encoded}"


def load_image_reference(path: Path, *, max_dimension: Optional[int] = None) -> str:
    """
    Read an image file into a data URI, keeping its original format.

    Raises:
        FileNotFoundError: If path does not exist
        ImageDecodeError: If the file is not an image
    """
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    try:
        with Image.open(path) as img:
            img.load()
            fmt = img.format or "PNG"
            return image_to_data_uri(img, fmt=fmt, max_dimension=max_dimension)
    except UnidentifiedImageError as e:
        raise ImageDecodeError(f"Not an image file: {path}") from e


def _decode_payload(uri: str) -> bytes:
    if not uri.startswith(_DATA_URI_PREFIX) or _BASE64_MARKER not in uri:
        raise ImageDecodeError("Image reference is not a base64 data URI")
    header, _, payload = uri.partition(_BASE64_MARKER)
    if not header[len(_DATA_URI_PREFIX):].startswith("image/"):
        raise ImageDecodeError(f"Data URI is not an image: {header}")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Corrupt base64 image payload: {e}") from e


def data_uri_to_image(uri: str) -> Image.Image:
    """
    Decode a data URI into a loaded PIL image.

    Raises:
        ImageDecodeError: If the reference is malformed or not an image
    """
    raw = _decode_payload(uri)
    try:
        img = Image.open(BytesIO(raw))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageDecodeError(f"Cannot decode image payload: {e}") from e
    return img


def image_size(uri: str) -> Tuple[int, int]:
    """(width, height) of the image behind ``uri``."""
    return data_uri_to_image(uri).size


def is_image_reference(value: Optional[str]) -> bool:
    """True if ``value`` decodes to an image. None/empty is False."""
    if not value:
        return False
    try:
        data_uri_to_image(value)
    except ImageDecodeError as e:
        logger.debug(f"Rejected image reference: {e}")
        return False
    return True
