from reframe.config import settings
from reframe.models import RecordingOptions

FRAMERATE = 30
DEFAULT_DEVICE = "Default"


def _mic_active(options: RecordingOptions) -> bool:
    device = options.mic_device
    return options.mic_enabled and bool(device) and device != DEFAULT_DEVICE


def audio_input_count(options: RecordingOptions) -> int:
    """Number of audio inputs the encoder will be given (0, 1 or 2).

    The microphone counts only with a concrete device name; system audio
    only needs its flag.
    """
    return int(_mic_active(options)) + int(options.system_audio_enabled)


def build_command(options: RecordingOptions, output_path: str) -> list[str]:
    """Return the ffmpeg arguments (executable excluded) for a screen capture.

    Pure function, no side effects. Audio inputs come first (mic, then
    system audio) so the screen grab always has the last input index.
    """
    args = ["-y"]

    if _mic_active(options):
        args += ["-f", settings.audio_input_format, "-i", f"audio={options.mic_device}"]
    if options.system_audio_enabled:
        args += [
            "-f", settings.audio_input_format,
            "-i", f"audio={settings.system_audio_device}",
        ]
    n_audio = audio_input_count(options)

    args += [
        "-f", settings.screen_input_format,
        "-framerate", str(FRAMERATE),
        "-offset_x", "0",
        "-offset_y", "0",
        "-draw_mouse", "1",
        "-i", settings.screen_input,
    ]

    args += [
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        "-preset", "superfast",
        "-profile:v", "main",
        "-level", "3.0",
        "-g", str(FRAMERATE),  # one keyframe per second
        "-crf", "23",
    ]

    if n_audio == 2:
        graph = (
            f"[0:a]volume={options.mic_volume:.1f}[a0];"
            f"[1:a]volume={options.system_audio_volume:.1f}[a1];"
            "[a0][a1]amix=inputs=2:duration=longest[aout]"
        )
        args += [
            "-filter_complex", graph,
            "-map", "2:v",
            "-map", "[aout]",
            "-c:a", "aac",
            "-b:a", "192k",
            "-ar", "44100",
            "-ac", "2",
        ]
    elif n_audio == 1:
        # keyed on the mic flag, not on whether the mic made it in as an input
        volume = options.mic_volume if options.mic_enabled else options.system_audio_volume
        args += [
            "-filter:a", f"volume={volume:.1f}",
            "-map", "1:v",
            "-map", "0:a",
            "-c:a", "aac",
            "-b:a", "128k",
            "-ar", "44100",
            "-ac", "2",
        ]
    else:
        args.append("-an")

    args += ["-movflags", "+faststart", output_path]
    return args
