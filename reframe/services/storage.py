import json
import os
import shutil
from datetime import datetime
from pathlib import Path

from loguru import logger as log
from pydantic import ValidationError

from reframe.config import settings
from reframe.errors import FilesystemError
from reframe.models import RecordingMetadata, Session

SESSION_PREFIX = "Session_"
ARTIFACT_NAME = "screen.mp4"
METADATA_NAME = "metadata.json"


def format_size(size_bytes: int) -> str:
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def _created_at(path: Path) -> int:
    """Directory creation time in epoch seconds, 0 if unavailable."""
    try:
        st = path.stat()
    except OSError:
        return 0
    return int(getattr(st, "st_birthtime", st.st_ctime))


class StorageService:
    """Filesystem-backed catalog of recording sessions.

    Layout::

        <root>/Session_<YYYY-MM-DD_HH-MM-SS>/screen.mp4
        <root>/Session_<YYYY-MM-DD_HH-MM-SS>/metadata.json   (optional)

    Nothing is cached; every listing re-reads the directory tree.
    """

    @staticmethod
    def resolve_root(save_path: str | None = None) -> Path:
        """Return *save_path*, or the configured default root if it is empty."""
        if save_path:
            return Path(save_path)
        return settings.default_root

    @staticmethod
    def create_session_dir(root: Path) -> Path:
        """Create a new ``Session_<timestamp>`` directory under *root*."""
        stamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
        base = f"{SESSION_PREFIX}{stamp}"
        try:
            root.mkdir(parents=True, exist_ok=True)
            suffix = 0
            while True:
                name = base if suffix == 0 else f"{base}_{suffix}"
                session_dir = root / name
                try:
                    session_dir.mkdir()
                    break
                except FileExistsError:
                    suffix += 1
        except OSError as e:
            raise FilesystemError(f"Failed to create directory: {e}") from e
        log.info(f"Created session directory {session_dir}")
        return session_dir

    @staticmethod
    def write_json(path: Path, data: dict | list) -> None:
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def read_json(path: Path) -> dict | list:
        with open(path) as f:
            return json.load(f)

    @staticmethod
    def read_metadata(session_dir: Path) -> RecordingMetadata | None:
        """Parse ``metadata.json``; None when it is missing or unreadable."""
        path = session_dir / METADATA_NAME
        if not path.exists():
            return None
        try:
            return RecordingMetadata.model_validate(StorageService.read_json(path))
        except (OSError, ValueError, ValidationError) as e:
            log.warning(f"Ignoring unreadable metadata in {session_dir}: {e}")
            return None

    @staticmethod
    def list_sessions(root: Path) -> list[Session]:
        """Return the sessions under *root*, newest first.

        Directories without the artifact are skipped. The root is created if
        it does not exist yet.
        """
        try:
            root.mkdir(parents=True, exist_ok=True)
            entries = list(os.scandir(root))
        except OSError as e:
            raise FilesystemError(f"Failed to read {root}: {e}") from e

        sessions: list[Session] = []
        for entry in entries:
            if not entry.is_dir() or not entry.name.startswith(SESSION_PREFIX):
                continue
            session_dir = Path(entry.path)
            video_path = session_dir / ARTIFACT_NAME
            if not video_path.is_file():
                continue

            name = entry.name
            duration = "00:00"
            session_id = 0
            meta = StorageService.read_metadata(session_dir)
            if meta is not None:
                name = meta.name
                duration = meta.duration
                session_id = meta.timestamp
            if session_id == 0:
                session_id = _created_at(session_dir)

            try:
                size_bytes = video_path.stat().st_size
            except OSError:
                size_bytes = 0

            sessions.append(Session(
                id=session_id,
                name=name,
                duration=duration,
                size_bytes=size_bytes,
                size=format_size(size_bytes),
                folder=entry.name,
                files=[ARTIFACT_NAME],
                full_path=str(video_path),
                session_path=str(session_dir),
            ))

        sessions.sort(key=lambda s: s.id, reverse=True)
        return sessions

    @staticmethod
    def rename_session(path: str, new_name: str) -> None:
        """Change the display name stored in the session's metadata.

        A session without metadata is left untouched.
        """
        metadata_path = Path(path) / METADATA_NAME
        if not metadata_path.exists():
            return
        try:
            meta = RecordingMetadata.model_validate(
                StorageService.read_json(metadata_path)
            )
            data = meta.model_dump()
            data["name"] = new_name
            StorageService.write_json(metadata_path, data)
        except (OSError, ValueError, ValidationError) as e:
            raise FilesystemError(f"Failed to rename {path}: {e}") from e
        log.info(f"Renamed session {path} to {new_name!r}")

    @staticmethod
    def delete_session(path: str) -> None:
        p = Path(path)
        if not p.is_dir():
            return
        try:
            shutil.rmtree(p)
        except OSError as e:
            raise FilesystemError(f"Failed to delete {path}: {e}") from e
        log.info(f"Deleted session {path}")

    @staticmethod
    def save_metadata(path: str, metadata: str) -> None:
        """Write *metadata* verbatim to the session's ``metadata.json``."""
        try:
            (Path(path) / METADATA_NAME).write_text(metadata)
        except OSError as e:
            raise FilesystemError(f"Failed to save metadata: {e}") from e
