from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

logger = logging.getLogger("x-image-poster")


def ensure_upload_dir(upload_dir: str | Path) -> Path:
    directory = Path(upload_dir)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.exception("directory_create_failed path=%s", directory)
        raise
    return directory


@contextmanager
def stage_upload(data: bytes, upload_dir: str | Path) -> Generator[Path, None, None]:
    """Write ``data`` to a temp file under ``upload_dir`` and delete it on exit."""
    directory = ensure_upload_dir(upload_dir)
    fd, name = tempfile.mkstemp(prefix="upload-", dir=directory)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("upload_cleanup_skipped path=%s reason=already_removed", path)
