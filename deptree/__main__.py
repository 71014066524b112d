"""Entry point for running the deptree server."""

import uvicorn

from deptree.config import get_settings
from deptree.logging_config import setup_logging


def main() -> None:
    """Run the deptree server."""
    settings = get_settings()
    setup_logging(settings)

    uvicorn.run(
        "deptree.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="debug" if settings.debug else settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
