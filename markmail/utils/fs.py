"""File system utilities for MarkMail.

Staging directories and atomic promotion of finished output.
"""

import os
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Any

from markmail.utils.logging import get_logger

log = get_logger(__name__)


@contextmanager
def atomic_write(
    file_path: Path,
    mode: str = "w",
    encoding: str | None = "utf-8",
) -> Iterator[IO[Any]]:
    """Context manager for atomic file writes.

    Writes to a temp file next to the target, then moves it into place.
    The target is left untouched if the block raises.

    Args:
        file_path: Target file path
        mode: File mode ('w' or 'wb')
        encoding: File encoding (ignored for binary mode)

    Yields:
        File handle
    """
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd, temp_name = tempfile.mkstemp(
        dir=file_path.parent,
        prefix=f".{file_path.name}.",
    )
    temp_path = Path(temp_name)

    try:
        os.close(temp_fd)

        if "b" in mode:
            with open(temp_path, mode) as f:
                yield f
        else:
            with open(temp_path, mode, encoding=encoding) as f:
                yield f

        temp_path.replace(file_path)

    except BaseException:
        if temp_path.exists():
            temp_path.unlink()
        raise


def promote_file(staged: Path, destination: Path) -> Path:
    """Move a fully written staged file onto its destination.

    Copies into a sibling temp file first so the final step is a rename on the
    destination's filesystem, even when the staging area lives elsewhere.
    """
    with atomic_write(destination, mode="wb") as out, open(staged, "rb") as src:
        shutil.copyfileobj(src, out)
    log.debug("Promoted staged output", staged=str(staged), destination=str(destination))
    return destination


@contextmanager
def staging_directory(prefix: str = "markmail-") -> Iterator[Path]:
    """Context manager for the run-scoped staging directory.

    Removed on every exit path.

    Yields:
        Path to the staging directory
    """
    temp_path = Path(tempfile.mkdtemp(prefix=prefix))
    log.debug("Created staging directory", path=str(temp_path))

    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)
        log.debug("Removed staging directory", path=str(temp_path))
