from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, NonNegativeInt, field_validator
from pydantic.alias_generators import to_camel


class RecordingOptions(BaseModel):
    """Capture options submitted by the UI (camelCase on the wire).

    ``capture_mode``, ``window_title`` and ``region`` are accepted but not yet
    used when building the encoder command.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    mic_enabled: bool
    mic_device: str | None = None
    system_audio_enabled: bool
    save_path: str = ""
    capture_mode: str | None = None
    window_title: str | None = None
    region: str | None = None
    mic_volume: float = 1.0
    system_audio_volume: float = 1.0

    @field_validator("mic_volume", "system_audio_volume", mode="before")
    @classmethod
    def _default_volume(cls, value):
        return 1.0 if value is None else value


class RecordingMetadata(BaseModel):
    """Contents of a session's ``metadata.json``. Unknown keys survive a rewrite."""

    model_config = ConfigDict(extra="allow")

    name: str
    duration: str
    timestamp: NonNegativeInt  # epoch seconds


@dataclass
class Session:
    id: int  # epoch seconds
    name: str
    duration: str
    size_bytes: int
    size: str  # "12.3 MB"
    folder: str
    files: list[str]
    full_path: str  # artifact path
    session_path: str


@dataclass
class DeviceList:
    audio: list[str] = field(default_factory=list)
    video: list[str] = field(default_factory=list)


@dataclass
class DiskInfo:
    free: int
    total: int
    label: str


@dataclass
class StopResult:
    path: str
    size: str
    size_bytes: int
    forced: bool = False
