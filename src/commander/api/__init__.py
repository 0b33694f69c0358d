"""
commander REST API.

Exposes the pipeline trigger (``POST /execute``) plus command listing and
liveness endpoints.

Usage::

    from commander.api import create_app
    app = create_app()

    # or via uvicorn:
    # uvicorn commander.api:create_app --factory
"""

from commander.api.app import create_app

__all__ = ["create_app"]
