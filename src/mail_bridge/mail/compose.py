"""Staging of outgoing message bodies for Mail.app."""

import contextlib
import logging
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

BODY_FILE_PREFIX = "email-body-"


@contextlib.contextmanager
def staged_body(body: str, directory: Path | None = None) -> Iterator[Path]:
    """
    Write a message body to a temporary UTF-8 file for the send script to read.

    The file is removed when the block exits, however it exits. Removal is
    best-effort; a file that is already gone is not an error.

    Args:
        body: Message body; surrounding whitespace is stripped.
        directory: Where to create the file (default: system temp dir).

    Yields:
        Path to the staged file.
    """
    fd, name = tempfile.mkstemp(prefix=BODY_FILE_PREFIX, suffix=".txt", dir=directory)
    path = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(body.strip())
        logger.debug(f"Staged message body at {path}")
        yield path
    finally:
        with contextlib.suppress(OSError):
            path.unlink()
