"""Run the API server: ``python -m tasktrack``."""

import uvicorn

from tasktrack.core.config import settings


def main() -> None:
    uvicorn.run(
        "tasktrack.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
    )


if __name__ == "__main__":
    main()
