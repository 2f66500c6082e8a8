"""Entry point for the student careers API.

Runs the FastAPI application under Uvicorn. Host and port are read from
the `HOST` and `PORT` environment variables (defaults `0.0.0.0` and
`8081`); see `student_api.config` for the rest of the settings.

Usage:
    python run.py
"""
import logging

from uvicorn import Config, Server

from student_api.config import settings


def main() -> None:
    """Serve the API until interrupted."""
    logging.basicConfig(level=settings.LOG_LEVEL)
    config = Config(
        app="student_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
    )
    Server(config).run()


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
