from typing import Any

from fastapi import APIRouter, Body, Depends, WebSocket, WebSocketDisconnect

from reframe.dependencies import get_hub, get_supervisor
from reframe.events import EventHub
from reframe.models import DeviceList, StopResult
from reframe.recording import RecordingSupervisor, list_devices

router = APIRouter(tags=["recording"])


# ==================================================================
# REST endpoints
# ==================================================================
# Plain ``def`` handlers: they block on process spawn/exit, so FastAPI runs
# them in its threadpool instead of on the event loop.


@router.post("/api/recording/start")
def start_recording(
    options: dict[str, Any] = Body(...),
    supervisor: RecordingSupervisor = Depends(get_supervisor),
    hub: EventHub = Depends(get_hub),
) -> dict:
    """Start a screen recording. Body uses the camelCase option names."""
    session_dir = supervisor.start(options)
    hub.publish({"type": "recording_status", "status": "recording"})
    return {"status": "recording", "session_dir": session_dir}


@router.post("/api/recording/stop")
def stop_recording(
    supervisor: RecordingSupervisor = Depends(get_supervisor),
    hub: EventHub = Depends(get_hub),
) -> StopResult:
    """Stop the recording; blocks until ffmpeg has exited (or been killed)."""
    result = supervisor.stop()
    hub.publish({"type": "recording_status", "status": "stopped", "path": result.path})
    return result


@router.get("/api/recording/status")
def recording_status(supervisor: RecordingSupervisor = Depends(get_supervisor)) -> dict:
    return supervisor.status()


@router.get("/api/devices")
def get_input_devices() -> DeviceList:
    return list_devices()


# ==================================================================
# WebSocket endpoint
# ==================================================================


@router.websocket("/ws/events")
async def events_endpoint(websocket: WebSocket) -> None:
    """Live stream of recording status changes and global input events."""
    hub: EventHub = websocket.app.state.hub
    supervisor: RecordingSupervisor = websocket.app.state.supervisor
    await websocket.accept()
    hub.add(websocket)

    await websocket.send_json({
        "type": "recording_status",
        "status": "recording" if supervisor.is_recording else "idle",
    })

    try:
        while True:
            await websocket.receive_text()  # keep-alive; client sends pings
    except WebSocketDisconnect:
        hub.discard(websocket)
