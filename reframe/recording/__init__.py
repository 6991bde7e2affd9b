from reframe.recording.command import audio_input_count, build_command
from reframe.recording.devices import list_devices, parse_device_list
from reframe.recording.supervisor import RecordingSupervisor

__all__ = [
    "RecordingSupervisor",
    "audio_input_count",
    "build_command",
    "list_devices",
    "parse_device_list",
]
