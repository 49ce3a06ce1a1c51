from __future__ import annotations

import uvicorn

from .logging_setup import setup_logging
from .settings import get_settings


def main() -> None:
    """Start the API server for the desktop shell."""
    settings = get_settings()
    setup_logging(settings)
    uvicorn.run(
        "todo_note.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        access_log=settings.log_access,
        log_config=None,
    )


if __name__ == "__main__":
    main()
