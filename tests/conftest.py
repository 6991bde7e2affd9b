import stat
import sys
import textwrap
from pathlib import Path

import pytest

from reframe.config import settings

# Stand-ins for ffmpeg. The cooperative and stubborn ones write the output file
# (last argument) right away; the silent one never touches it. The cooperative
# and silent ones exit when they read "q" or stdin closes; the stubborn one
# ignores stdin and SIGTERM and has to be killed.
COOPERATIVE_ENCODER = """
import sys

with open(sys.argv[-1], "wb") as f:
    f.write(b"\\0" * 4096)

for line in sys.stdin:
    if line.strip() == "q":
        break
sys.exit(0)
"""

STUBBORN_ENCODER = """
import signal
import sys
import time

signal.signal(signal.SIGTERM, signal.SIG_IGN)
with open(sys.argv[-1], "wb") as f:
    f.write(b"\\0" * 1024)

while True:
    time.sleep(1)
"""

SILENT_ENCODER = """
import sys

for line in sys.stdin:
    if line.strip() == "q":
        break
sys.exit(0)
"""


def _write_script(path: Path, body: str) -> Path:
    path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_encoder(tmp_path) -> str:
    return str(_write_script(tmp_path / "fake_ffmpeg", COOPERATIVE_ENCODER))


@pytest.fixture
def stubborn_encoder(tmp_path) -> str:
    return str(_write_script(tmp_path / "stubborn_ffmpeg", STUBBORN_ENCODER))


@pytest.fixture
def silent_encoder(tmp_path) -> str:
    return str(_write_script(tmp_path / "silent_ffmpeg", SILENT_ENCODER))


@pytest.fixture
def recordings_root(tmp_path, monkeypatch) -> Path:
    root = tmp_path / "recordings"
    monkeypatch.setattr(settings, "recordings_root", str(root))
    return root
