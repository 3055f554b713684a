"""Entry point for running the API with uvicorn."""

import uvicorn

from timecard_engine.config import settings


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "timecard_engine.api.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
