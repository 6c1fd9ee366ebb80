"""Environment-driven configuration for auth and photo intake."""

import os


class AuthConfig:
    """OAuth sign-in settings."""

    AUTH_PROVIDER = os.environ.get("AUTH_PROVIDER", "google")
    AUTH_REDIRECT_URL = os.environ.get("AUTH_REDIRECT_URL", "http://localhost:3000/auth/callback")


class PhotoConfig:
    """Photo capture limits."""

    MAX_PHOTOS = int(os.environ.get("PHOTO_MAX_COUNT", "10"))
    COMPRESS_THRESHOLD_BYTES = int(os.environ.get("PHOTO_COMPRESS_THRESHOLD_BYTES", str(2 * 1024 * 1024)))
    MAX_DIMENSION = int(os.environ.get("PHOTO_MAX_DIMENSION", "1920"))
    JPEG_QUALITY = int(os.environ.get("PHOTO_JPEG_QUALITY", "80"))
    # Largest source image decoded for compression; a 200 MP phone photo fits
    MAX_SOURCE_PIXELS = int(os.environ.get("PHOTO_MAX_SOURCE_PIXELS", "250000000"))
