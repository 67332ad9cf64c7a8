"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from flowql.api import app

    uvicorn flowql.api:app --reload
"""

from flowql.api.app import app, create_app

__all__ = ["app", "create_app"]
