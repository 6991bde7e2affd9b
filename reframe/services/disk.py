import os
import shutil
import subprocess

from reframe.config import settings
from reframe.errors import ToolInvocationError
from reframe.models import DiskInfo

DEFAULT_LABEL = "Local Disk"


def parse_disk_info(text: str, drive: str) -> DiskInfo:
    """Parse ``wmic ... /format:list`` output (``Key=Value`` lines)."""
    free = 0
    total = 0
    label = DEFAULT_LABEL
    for line in text.splitlines():
        parts = line.split("=")
        if len(parts) != 2:
            continue
        key, val = parts[0].strip(), parts[1].strip()
        if key == "FreeSpace":
            free = int(val) if val.isdigit() else 0
        elif key == "Size":
            total = int(val) if val.isdigit() else 0
        elif key == "VolumeName" and val:
            label = val

    if label == DEFAULT_LABEL:
        label = f"System Drive ({drive})"
    else:
        label = f"{label} ({drive})"
    return DiskInfo(free=free, total=total, label=label)


def _wmic_disk_info(drive: str) -> DiskInfo:
    cmd = [
        "wmic", "logicaldisk",
        "where", f"DeviceID='{drive}'",
        "get", "size,freespace,volumename",
        "/format:list",
    ]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=10)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ToolInvocationError(f"Failed to run wmic: {e}") from e
    return parse_disk_info(result.stdout, drive)


def disk_info() -> DiskInfo:
    """Free/total bytes and a display label for the system volume."""
    if os.name == "nt":
        return _wmic_disk_info(settings.disk_drive)
    try:
        usage = shutil.disk_usage("/")
    except OSError as e:
        raise ToolInvocationError(f"Failed to query disk usage: {e}") from e
    return DiskInfo(free=usage.free, total=usage.total, label="System Drive (/)")
