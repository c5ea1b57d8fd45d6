from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path
from typing import Callable, Optional

from ..errors import BackendError, InvalidInput

logger = logging.getLogger(__name__)

Picker = Callable[[], Optional[str]]


class FileService:
    """Stores uploaded images under one root directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def upload(self, picker: Picker) -> Optional[Path]:
        """
        Copy the file chosen by `picker` into the root.

        `picker` may block on user interaction; it is called with no locks held.
        Returns None when the user cancelled.
        """
        selected = picker()
        if selected is None:
            logger.info("File selection was cancelled by user")
            return None

        src = Path(selected)
        if not src.is_file():
            raise InvalidInput(f"Selected file does not exist: {src}")
        filename = str(int(time.time() * 1000)) + src.suffix
        dest = self.root / filename
        try:
            shutil.copyfile(src, dest)
        except OSError as e:
            raise BackendError(f"Failed to copy file from {src} to {dest}") from e
        logger.info("File uploaded: %s -> %s", src, dest)
        return dest

    def delete(self, path: str | Path) -> None:
        p = Path(path)
        if not p.exists():
            raise InvalidInput(f"File does not exist: {p}")
        resolved = p.resolve()
        root = self.root.resolve()
        if root not in resolved.parents:
            raise InvalidInput(f"Refusing to delete file outside root directory: {resolved} (root: {root})")
        if not resolved.is_file():
            raise InvalidInput(f"Not a regular file: {resolved}")
        try:
            resolved.unlink()
        except OSError as e:
            raise BackendError(f"Failed to delete file: {p}") from e
        logger.info("File deleted: %s", p)
