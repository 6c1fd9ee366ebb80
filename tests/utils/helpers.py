"""Test helper functions."""

import io
import json
from typing import Any, Dict

from PIL import Image


def create_vercel_request(
    method: str = "POST",
    path: str = "/api/review",
    body: Dict[str, Any] = None,
    headers: Dict[str, str] = None,
    query: Dict[str, str] = None,
) -> Dict[str, Any]:
    """Create a Vercel request object for testing."""
    if headers is None:
        headers = {
            "content-type": "application/json",
            "authorization": "Bearer test-token",
        }

    return {
        "method": method,
        "path": path,
        "headers": headers,
        "body": json.dumps(body) if isinstance(body, dict) else body,
        "query": query or {},
    }


def make_image_bytes(width: int, height: int, image_format: str = "BMP", color=(120, 80, 40)) -> bytes:
    """Encode a solid-colour image. BMP size is predictable: roughly width * height * 3 bytes."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=color).save(buffer, format=image_format)
    return buffer.getvalue()


def open_image(data: bytes) -> Image.Image:
    image = Image.open(io.BytesIO(data))
    image.load()
    return image
