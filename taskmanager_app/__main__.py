"""Run the API with uvicorn: ``python -m taskmanager_app``."""

import uvicorn

from .logging_setup import setup_logging
from .settings import settings


def main() -> None:
    setup_logging(settings.LOG_LEVEL)
    uvicorn.run(
        "taskmanager_app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
