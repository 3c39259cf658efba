"""
thumbnails.py

Playlist cover images: fetch over HTTP and crop to a centered square.
"""

from __future__ import annotations

import io
from typing import Tuple

import requests
from PIL import Image

import config


def fetch_image(url: str, timeout: int = config.IMAGE_FETCH_TIMEOUT_SEC) -> bytes:
    response = requests.get(url, timeout=timeout)
    response.raise_for_status()
    return response.content


def crop_to_square(
    data: bytes,
    size: int = config.PLAYLIST_IMAGE_SIZE,
    quality: int = 90,
) -> Tuple[bytes, str]:
    """
    Center-crop an image to a square, scale it down to at most `size` px,
    and re-encode as JPEG. Returns (bytes, mime type).
    """
    with Image.open(io.BytesIO(data)) as src:
        img = src.convert("RGB")

    w, h = img.size
    side = min(w, h)
    left = (w - side) // 2
    top = (h - side) // 2
    img = img.crop((left, top, left + side, top + side))

    if side > size:
        img = img.resize((size, size), Image.LANCZOS)

    out = io.BytesIO()
    img.save(out, format="JPEG", quality=quality)
    return out.getvalue(), "image/jpeg"
