"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
API starts on a developer machine without any setup.  In a production
deployment override them via environment variables (``SECRET_KEY``
and ``PUBLIC_BASE_URL`` at the very least).
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "SlideSync API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")
    secret_key: str = os.getenv("SECRET_KEY", "change_me")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))

    # Path to the SQLite database.  Relative paths are resolved against
    # the project root by the ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "slidesync.db")

    # Uploaded images, audio and rendered videos live below ``media_dir``
    # and are served from ``{public_base_url}/media/...``.
    media_dir: str = os.getenv("MEDIA_DIR", "media")
    # Optional directory holding audio files for the built-in music
    # library, named after the track id (e.g. ``upbeat.mp3``).
    music_dir: str = os.getenv("MUSIC_DIR", "music")
    public_base_url: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")

    max_image_bytes: int = int(os.getenv("MAX_IMAGE_BYTES", str(15 * 1024 * 1024)))
    max_audio_bytes: int = int(os.getenv("MAX_AUDIO_BYTES", str(10 * 1024 * 1024)))

    # Stripe checkout.  When ``STRIPE_SECRET_KEY`` is empty the payment
    # service falls back to a simulated provider.
    stripe_secret_key: str = os.getenv("STRIPE_SECRET_KEY", "")
    stripe_api_base: str = os.getenv("STRIPE_API_BASE", "https://api.stripe.com/v1")
    # If set, webhook calls must carry a valid ``Stripe-Signature`` header.
    stripe_webhook_secret: str = os.getenv("STRIPE_WEBHOOK_SECRET", "")
    premium_price_cents: int = int(os.getenv("PREMIUM_PRICE_CENTS", "500"))
    premium_currency: str = os.getenv("PREMIUM_CURRENCY", "usd")
    premium_product_name: str = os.getenv("PREMIUM_PRODUCT_NAME", "Slide Sync Clean – Premium")
    checkout_success_url: str = os.getenv(
        "CHECKOUT_SUCCESS_URL", "http://localhost:3000/premium?status=success"
    )
    checkout_cancel_url: str = os.getenv(
        "CHECKOUT_CANCEL_URL", "http://localhost:3000/premium?status=cancel"
    )

    # Google sign-in.  If set, ID tokens must be issued for this client.
    google_client_id: str = os.getenv("GOOGLE_CLIENT_ID", "")
    google_tokeninfo_url: str = os.getenv(
        "GOOGLE_TOKENINFO_URL", "https://oauth2.googleapis.com/tokeninfo"
    )

    # Video export
    export_fps: int = int(os.getenv("EXPORT_FPS", "30"))
    slide_duration_seconds: float = float(os.getenv("SLIDE_DURATION_SECONDS", "3.0"))
    transition_seconds: float = float(os.getenv("TRANSITION_SECONDS", "1.0"))
    watermark_text: str = os.getenv("WATERMARK_TEXT", "Made with SlideSync")


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module; tests patch attributes instead.
settings = Settings()
