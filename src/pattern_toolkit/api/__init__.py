"""HTTP boundary (FastAPI) for upload, merge and cleanup."""

from .app import create_app, error_status
from .auth import TokenVerifier, StaticTokenVerifier, bearer_token

__all__ = [
    "create_app",
    "error_status",
    "TokenVerifier",
    "StaticTokenVerifier",
    "bearer_token",
]
