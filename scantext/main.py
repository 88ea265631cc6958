"""Application entry point for the scantext API server."""

import uvicorn

from scantext.api.app import app
from scantext.utils.config import load_config
from scantext.utils.logger import setup_logging


def main(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
