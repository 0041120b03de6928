"""Main entry point for the viewer proxy.

This file serves as the entry point for Gunicorn/Uvicorn.
All application logic is in the src/ package.
"""

from src.app import app
from src.config import config

__all__ = ["app"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
