"""HTTP API over the content store and the Git repository.

Example:
    >>> import uvicorn
    >>> from jsoncms.server import create_app
    >>> uvicorn.run(create_app(), host="127.0.0.1", port=3000)
"""

from jsoncms.server._app import create_app
from jsoncms.server._errors import STATUS_BY_KIND, error_body, status_for

__all__ = ["STATUS_BY_KIND", "create_app", "error_body", "status_for"]
