import os
import sys
from pathlib import Path

from pydantic_settings import BaseSettings


def _xdg_videos_dir() -> Path | None:
    """``XDG_VIDEOS_DIR`` from the environment or ``user-dirs.dirs``."""
    value = os.environ.get("XDG_VIDEOS_DIR")
    if not value:
        config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
        user_dirs = Path(config_home) / "user-dirs.dirs"
        try:
            lines = user_dirs.read_text().splitlines()
        except OSError:
            lines = []
        for line in lines:
            key, _, raw = line.partition("=")
            if key.strip() == "XDG_VIDEOS_DIR":
                value = raw.strip().strip('"')
                break
    if not value:
        return None
    value = value.replace("$HOME", str(Path.home()))
    return Path(os.path.expanduser(value))


def videos_dir() -> Path:
    """The platform's video folder; the working directory if there is none."""
    if os.name == "nt":
        return Path.home() / "Videos"
    if sys.platform == "darwin":
        return Path.home() / "Movies"
    return _xdg_videos_dir() or Path(".")


class Settings(BaseSettings):
    # Encoder
    ffmpeg_path: str = "ffmpeg"
    audio_input_format: str = "dshow"
    screen_input_format: str = "gdigrab"
    screen_input: str = "desktop"
    system_audio_device: str = "virtual-audio-capturer"
    stop_timeout_seconds: float = 5.0
    device_list_timeout_seconds: float = 10.0

    # Storage
    recordings_root: str = ""
    default_folder_name: str = "Reframe"

    # Disk info
    disk_drive: str = "C:"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "REFRAME_", "extra": "ignore"}

    @property
    def default_root(self) -> Path:
        """Directory sessions go to when the caller gives no save path."""
        if self.recordings_root:
            return Path(self.recordings_root)
        return videos_dir() / self.default_folder_name


settings = Settings()
