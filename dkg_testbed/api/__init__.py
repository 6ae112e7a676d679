"""
API Package for the DKG Testbed

Usage:
    from dkg_testbed.api import create_app

    app = create_app()
"""

from .app import create_app, main
from .routes import APIResponse, asset_router, create_testbed_router, session_router

__all__ = [
    "create_app",
    "main",
    "create_testbed_router",
    "session_router",
    "asset_router",
    "APIResponse",
]
