from __future__ import annotations

import logging

import uvicorn

from app.main import app

logger = logging.getLogger("x-image-poster")


def main() -> None:
    settings = app.state.settings
    logger.info("X Image Uploader running at http://localhost:%s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
