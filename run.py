"""Entry point for the SlideSync API server.

Starts the FastAPI application with Uvicorn.  Host and port are read
from the environment variables ``HOST`` and ``PORT`` (defaults
``0.0.0.0`` and ``8000``).  All other configuration (``SECRET_KEY``,
``DATABASE_URL``, ``MEDIA_DIR``, ``STRIPE_SECRET_KEY`` ...) is read by
``slidesync_api.app.core.config``.

Usage:
    python run.py
"""
import os

import uvicorn


def main() -> None:
    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("slidesync_api.app.main:app", host=host, port=port, reload=False, log_level="info")


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
