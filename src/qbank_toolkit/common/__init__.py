"""Common utilities shared across the toolkit."""

from __future__ import annotations

from .images import (
    ImageDecodeError,
    image_to_data_uri,
    load_image_reference,
    data_uri_to_image,
    image_size,
    is_image_reference,
)
from .paths import get_app_data_dir, get_database_path, get_export_dir

__all__ = [
    # images
    "ImageDecodeError",
    "image_to_data_uri",
    "load_image_reference",
    "data_uri_to_image",
    "image_size",
    "is_image_reference",
    # paths
    "get_app_data_dir",
    "get_database_path",
    "get_export_dir",
]
