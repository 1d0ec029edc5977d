# main.py
import argparse
import logging

import uvicorn

from .config import get_settings


def setup_logging():
    """Configures logging to file and console explicitly."""
    settings = get_settings()
    log_level_name = settings.LOG_LEVEL.upper()

    # Get the root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_name)

    # Clear any existing handlers to prevent duplicate logs on re-runs
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    try:
        file_handler = logging.FileHandler(settings.LOG_FILE)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    except OSError as e:
        root_logger.error(f"Failed to set up file logging to {settings.LOG_FILE}: {e}")

    # Reducing "noise" from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def main():
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Browse and upload Pinata files through virtual folders."
    )
    parser.add_argument("--host", default=settings.HOST, help="Interface to bind to.")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Port to listen on.")
    parser.add_argument(
        "--reload", action="store_true", help="Reload the server when code changes."
    )
    args = parser.parse_args()

    setup_logging()

    if not settings.PINATA_JWT:
        logging.warning("PINATA_JWT is not set; provider-backed endpoints will answer 500.")

    logging.info(f"Starting pinvault on {args.host}:{args.port}")
    uvicorn.run(
        "pinvault.api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
