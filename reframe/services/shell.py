import os
import subprocess
import sys
from pathlib import Path

from loguru import logger as log

from reframe.errors import FilesystemError, ToolInvocationError
from reframe.services.storage import StorageService


def open_path(path: str) -> None:
    """Open *path* with the platform's default application."""
    log.info(f"Opening {path}")
    try:
        if os.name == "nt":
            os.startfile(path)  # type: ignore[attr-defined]
        elif sys.platform == "darwin":
            subprocess.Popen(["open", path])
        else:
            subprocess.Popen(["xdg-open", path])
    except OSError as e:
        raise ToolInvocationError(f"Failed to open: {e}") from e


def open_folder(path: str) -> Path:
    """Open a session root (the default one if *path* is empty), creating it first."""
    target = StorageService.resolve_root(path)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create {target}: {e}") from e
    open_path(str(target))
    return target
