"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from chainmuse.api import app

    uvicorn chainmuse.api:app --reload
"""

from chainmuse.api.app import app, create_app

__all__ = ["app", "create_app"]
