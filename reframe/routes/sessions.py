from fastapi import APIRouter
from pydantic import BaseModel

from reframe.models import Session
from reframe.services.storage import StorageService

router = APIRouter(prefix="/api", tags=["sessions"])


# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------


class SessionRename(BaseModel):
    path: str
    new_name: str


class SessionMetadata(BaseModel):
    path: str
    metadata: str  # raw JSON text, written as-is


# ------------------------------------------------------------------
# Session endpoints
# ------------------------------------------------------------------


@router.get("/sessions")
def list_sessions(save_path: str = "") -> list[Session]:
    """Sessions under *save_path* (or the default root), newest first."""
    return StorageService.list_sessions(StorageService.resolve_root(save_path))


@router.patch("/sessions/rename")
def rename_session(body: SessionRename) -> dict:
    StorageService.rename_session(body.path, body.new_name)
    return {"path": body.path, "name": body.new_name}


@router.delete("/sessions")
def delete_session(path: str) -> dict:
    StorageService.delete_session(path)
    return {"path": path, "deleted": True}


@router.put("/sessions/metadata")
def save_metadata(body: SessionMetadata) -> dict:
    StorageService.save_metadata(body.path, body.metadata)
    return {"path": body.path}
