"""Executable entry point for launching the YANG Swagger FastAPI application.

Process managers can import the stable `app` object from `yang_swagger.app`,
or run `python -m yang_swagger.run_server` directly for local development.

Environment Variables:
    PORT (int): Override listening port (default 8000).
    YANG_SWAGGER_CONFIG: Generator defaults, see :mod:`yang_swagger.config`.

Example:
    $ python -m yang_swagger.run_server
    $ PORT=9000 YANG_SWAGGER_CONFIG="strategy=unpacking" python -m yang_swagger.run_server
"""

from __future__ import annotations

import os

import uvicorn

from .app import app


def main() -> None:
    """Launch the ASGI server with development-friendly defaults."""
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
