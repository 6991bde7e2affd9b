import json
import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from reframe.config import settings
from reframe.main import app
from reframe.models import DeviceList
from reframe.routes import recording as recording_routes
from reframe.services.input_listener import GlobalInputListener

pytestmark = pytest.mark.skipif(
    os.name == "nt", reason="stand-in encoders are shebang scripts"
)

OPTIONS = {"micEnabled": False, "systemAudioEnabled": False, "savePath": ""}


@pytest.fixture
def client(fake_encoder, recordings_root, monkeypatch):
    monkeypatch.setattr(settings, "ffmpeg_path", fake_encoder)
    with TestClient(app) as c:
        yield c


def test_recording_lifecycle(client, recordings_root):
    assert client.get("/api/recording/status").json() == {"state": "idle"}

    resp = client.post("/api/recording/start", json=OPTIONS)
    assert resp.status_code == 200
    session_dir = Path(resp.json()["session_dir"])
    assert session_dir.parent == recordings_root

    assert client.get("/api/recording/status").json()["state"] == "recording"
    assert client.post("/api/recording/start", json=OPTIONS).status_code == 409

    resp = client.post("/api/recording/stop")
    assert resp.status_code == 200
    body = resp.json()
    assert body["path"] == str(session_dir / "screen.mp4")
    assert body["size"] == "0.0 MB"
    assert body["forced"] is False

    resp = client.post("/api/recording/stop")
    assert resp.status_code == 400
    assert resp.json() == {"detail": "Not recording"}


def test_invalid_options_rejected(client):
    resp = client.post("/api/recording/start", json={"micEnabled": True})
    assert resp.status_code == 422
    assert "Invalid options" in resp.json()["detail"]


def test_session_endpoints(client, recordings_root):
    session_dir = client.post("/api/recording/start", json=OPTIONS).json()["session_dir"]
    client.post("/api/recording/stop")

    sessions = client.get("/api/sessions").json()
    assert [s["session_path"] for s in sessions] == [session_dir]

    resp = client.patch("/api/sessions/rename", json={"path": session_dir, "new_name": "Demo"})
    assert resp.status_code == 200
    assert client.get("/api/sessions").json()[0]["name"] == "Demo"

    meta = json.dumps({"name": "Final", "duration": "01:02", "timestamp": 100})
    assert client.put(
        "/api/sessions/metadata", json={"path": session_dir, "metadata": meta}
    ).status_code == 200
    [session] = client.get("/api/sessions", params={"save_path": str(recordings_root)}).json()
    assert (session["id"], session["name"], session["duration"]) == (100, "Final", "01:02")

    assert client.delete("/api/sessions", params={"path": session_dir}).status_code == 200
    assert client.get("/api/sessions").json() == []


def test_metadata_write_failure(client, tmp_path):
    resp = client.put(
        "/api/sessions/metadata", json={"path": str(tmp_path / "missing"), "metadata": "{}"}
    )
    assert resp.status_code == 500
    assert resp.json()["detail"].startswith("Failed to save metadata")


def test_devices(client, monkeypatch):
    monkeypatch.setattr(
        recording_routes, "list_devices", lambda: DeviceList(audio=["Mic"], video=["Default"])
    )
    assert client.get("/api/devices").json() == {"audio": ["Mic"], "video": ["Default"]}


def test_listener_endpoint(client):
    started = []

    class FakeListener:
        daemon = False

        def start(self):
            started.append(True)

    client.app.state.listener = GlobalInputListener(
        client.app.state.hub.publish,
        listener_factory=lambda *_handlers: [FakeListener()],
    )

    assert client.post("/api/system/listener").json() == {"running": True, "started": True}
    assert client.post("/api/system/listener").json() == {"running": True, "started": False}
    assert started == [True]


def test_disk_endpoint(client):
    body = client.get("/api/system/disk").json()
    assert set(body) == {"free", "total", "label"}


def test_events_websocket(client):
    with client.websocket_connect("/ws/events") as ws:
        assert ws.receive_json() == {"type": "recording_status", "status": "idle"}

        client.post("/api/recording/start", json=OPTIONS)
        assert ws.receive_json() == {"type": "recording_status", "status": "recording"}

        client.post("/api/recording/stop")
        message = ws.receive_json()
        assert message["status"] == "stopped"
        assert message["path"].endswith("screen.mp4")
