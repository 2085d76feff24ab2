"""Mint a long-lived access token for a user email.

Usage:
    python create_token.py user@example.com [days]
"""
import sys

from slidesync_api.app.core.security import create_access_token

email = sys.argv[1] if len(sys.argv) > 1 else "admin@example.com"
# lifetime in days, 365 by default
days = int(sys.argv[2]) if len(sys.argv) > 2 else 365
token = create_access_token({"sub": email}, expires_delta=days * 24 * 60 * 60)
print(token)
