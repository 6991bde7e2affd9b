from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from reframe.dependencies import get_listener
from reframe.models import DiskInfo
from reframe.services.disk import disk_info
from reframe.services.input_listener import GlobalInputListener
from reframe.services.shell import open_folder, open_path

router = APIRouter(prefix="/api/system", tags=["system"])


class OpenRequest(BaseModel):
    path: str = ""
    folder: bool = False


@router.get("/disk")
def get_disk_info() -> DiskInfo:
    return disk_info()


@router.post("/listener")
def start_global_listener(
    listener: GlobalInputListener = Depends(get_listener),
) -> dict:
    """Start forwarding global clicks/keys to ``/ws/events``. Safe to call twice."""
    started = listener.start()
    return {"running": True, "started": started}


@router.post("/open")
def open_in_shell(body: OpenRequest) -> dict:
    """Open a file, or a session folder (default root when *path* is empty)."""
    if body.folder:
        target = str(open_folder(body.path))
    else:
        if not body.path:
            raise HTTPException(status_code=400, detail="No file path given.")
        open_path(body.path)
        target = body.path
    return {"opened": target}
