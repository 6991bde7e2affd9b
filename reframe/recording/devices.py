import re
import subprocess

from loguru import logger as log

from reframe.config import settings
from reframe.errors import EncoderLaunchError
from reframe.models import DeviceList
from reframe.recording.command import DEFAULT_DEVICE

# [dshow @ 000001] "Device Name" (audio)
DEVICE_LINE = re.compile(r'\[[^\]]+\]\s+"([^"]+)"\s+\((audio|video)\)')


def parse_device_list(text: str) -> DeviceList:
    """Classify the devices ffmpeg printed in listing mode.

    Lines that don't match are ignored. A kind with no devices gets the
    ``"Default"`` sentinel so callers never see an empty list.
    """
    devices = DeviceList()
    for line in text.splitlines():
        match = DEVICE_LINE.search(line)
        if not match:
            continue
        name, kind = match.groups()
        log.debug(f"Found device: {name} ({kind})")
        if kind == "audio":
            devices.audio.append(name)
        else:
            devices.video.append(name)

    if not devices.audio:
        devices.audio.append(DEFAULT_DEVICE)
    if not devices.video:
        devices.video.append(DEFAULT_DEVICE)
    return devices


def list_devices() -> DeviceList:
    """Ask ffmpeg for the capture devices it can see.

    The listing goes to stderr and ffmpeg exits non-zero after printing it,
    so only a failure to run the binary is an error.
    """
    cmd = [
        settings.ffmpeg_path,
        "-hide_banner",
        "-list_devices", "true",
        "-f", settings.audio_input_format,
        "-i", "dummy",
    ]
    try:
        result = subprocess.run(
            cmd,
            stdin=subprocess.DEVNULL,
            capture_output=True,
            timeout=settings.device_list_timeout_seconds,
        )
    except subprocess.TimeoutExpired as e:
        raise EncoderLaunchError(f"ffmpeg device listing timed out: {e}") from e
    except OSError as e:
        raise EncoderLaunchError(f"Failed to execute ffmpeg: {e}") from e

    stderr = result.stderr.decode("utf-8", errors="replace")
    devices = parse_device_list(stderr)
    log.info(f"Devices: audio={devices.audio} video={devices.video}")
    return devices
