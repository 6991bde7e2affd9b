import json
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path

from loguru import logger as log
from pydantic import ValidationError

from reframe.errors import (
    AlreadyRecordingError,
    EncoderLaunchError,
    FilesystemError,
    InvalidOptionsError,
    NotRecordingError,
)
from reframe.models import RecordingOptions, StopResult
from reframe.recording.command import build_command
from reframe.services.storage import (
    ARTIFACT_NAME,
    METADATA_NAME,
    StorageService,
    format_size,
)

QUIT_COMMAND = b"q\n"


@dataclass
class ActiveRecording:
    process: subprocess.Popen
    output_path: Path
    session_dir: Path
    started_at: float  # epoch seconds


def format_duration(seconds: float) -> str:
    """``MM:SS``, or ``H:MM:SS`` from one hour up."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def parse_options(options: RecordingOptions | dict | str) -> RecordingOptions:
    if isinstance(options, RecordingOptions):
        return options
    try:
        if isinstance(options, (str, bytes)):
            return RecordingOptions.model_validate_json(options)
        return RecordingOptions.model_validate(options)
    except ValidationError as e:
        raise InvalidOptionsError(f"Invalid options: {e}") from e


class RecordingSupervisor:
    """Owns the one screen recording that may run at a time.

    State is either idle (``_active is None``) or an :class:`ActiveRecording`,
    guarded by ``_lock``. ``stop`` keeps the lock for the whole shutdown, so
    the Active -> Idle transition is atomic to other callers and no second
    ``start`` can slip in while the encoder is still finalizing.

    Shutdown protocol:

    1. write ``q`` to ffmpeg's stdin (ffmpeg's own "finish and exit" key),
    2. wait up to ``stop_timeout`` seconds for it to exit,
    3. kill it if it is still running.

    ``stop`` therefore blocks its caller for at most ``stop_timeout`` plus
    the time to reap a killed process.
    """

    def __init__(
        self,
        encoder_path: str,
        default_root: Path,
        stop_timeout: float = 5.0,
    ) -> None:
        self.encoder_path = encoder_path
        self.default_root = Path(default_root)
        self.stop_timeout = stop_timeout

        self._lock = threading.Lock()
        self._active: ActiveRecording | None = None
        # Readable without the lock, which stop() holds for the whole shutdown.
        self._recording = threading.Event()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def is_recording(self) -> bool:
        """Never blocks, so async handlers can read it during a stop."""
        return self._recording.is_set()

    def status(self) -> dict:
        with self._lock:
            active = self._active
            if active is None:
                return {"state": "idle"}
            return {
                "state": "recording",
                "pid": active.process.pid,
                "output_path": str(active.output_path),
                "session_dir": str(active.session_dir),
                "elapsed_seconds": round(time.time() - active.started_at, 1),
            }

    def start(self, options: RecordingOptions | dict | str) -> str:
        """Spawn the encoder for a new session and return its directory."""
        with self._lock:
            if self._active is not None:
                raise AlreadyRecordingError()

            opts = parse_options(options)
            log.info(f"Starting recording with options: {opts!r}")

            root = Path(opts.save_path) if opts.save_path else self.default_root
            session_dir = StorageService.create_session_dir(root)
            output_path = session_dir / ARTIFACT_NAME
            try:
                output_path.touch()
            except OSError as e:
                raise FilesystemError(f"Failed to create {output_path}: {e}") from e

            cmd = [self.encoder_path, *build_command(opts, str(output_path))]
            log.debug(f"Encoder command: {cmd}")
            try:
                process = subprocess.Popen(cmd, stdin=subprocess.PIPE)
            except OSError as e:
                # no encoder, no artifact: listings skip the directory
                output_path.unlink(missing_ok=True)
                raise EncoderLaunchError(f"Failed to spawn ffmpeg: {e}") from e
            log.info(f"ffmpeg spawned with PID {process.pid}")

            self._active = ActiveRecording(
                process=process,
                output_path=output_path,
                session_dir=session_dir,
                started_at=time.time(),
            )
            self._recording.set()
            return str(session_dir)

    def stop(self) -> StopResult:
        """Finish the active recording and report the artifact."""
        with self._lock:
            active = self._active
            if active is None:
                raise NotRecordingError()

            log.info("Stopping recording gracefully...")
            self._send_quit(active.process)
            forced = self._wait_or_kill(active.process)
            elapsed = time.time() - active.started_at
            self._active = None
            self._recording.clear()

        try:
            size_bytes = active.output_path.stat().st_size
        except OSError:
            size_bytes = 0
        self._write_default_metadata(active, elapsed)

        result = StopResult(
            path=str(active.output_path),
            size=format_size(size_bytes),
            size_bytes=size_bytes,
            forced=forced,
        )
        log.info(f"Recording stopped, output: {result.path}, size: {result.size}")
        return result

    def shutdown(self) -> None:
        """Stop any active recording so no encoder outlives the service."""
        try:
            self.stop()
        except NotRecordingError:
            pass

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _send_quit(self, process: subprocess.Popen) -> None:
        if process.stdin is None:
            return
        try:
            process.stdin.write(QUIT_COMMAND)
            process.stdin.flush()
        except OSError as e:
            # Encoder already gone; the wait below just reaps it.
            log.warning(f"Could not send quit to ffmpeg: {e}")
        finally:
            try:
                process.stdin.close()
            except OSError:
                pass

    def _wait_or_kill(self, process: subprocess.Popen) -> bool:
        """Wait for exit within ``stop_timeout``; kill on timeout.

        Returns True when the process had to be killed.
        """
        log.info("Waiting for ffmpeg to finish...")
        try:
            code = process.wait(timeout=self.stop_timeout)
            log.info(f"ffmpeg exited with status {code}")
            return False
        except subprocess.TimeoutExpired:
            log.warning("ffmpeg didn't exit gracefully, killing...")
            process.kill()
            process.wait()
            return True

    def _write_default_metadata(self, active: ActiveRecording, elapsed: float) -> None:
        """Give the session a metadata file unless the caller already wrote one."""
        if (active.session_dir / METADATA_NAME).exists():
            return
        metadata = {
            "name": active.session_dir.name,
            "duration": format_duration(elapsed),
            "timestamp": int(active.started_at),
        }
        try:
            StorageService.save_metadata(str(active.session_dir), json.dumps(metadata))
        except FilesystemError as e:
            log.warning(f"Could not write metadata for {active.session_dir}: {e}")
