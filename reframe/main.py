import asyncio
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger as log

from reframe.config import settings
from reframe.errors import RecorderError
from reframe.events import EventHub
from reframe.recording import RecordingSupervisor
from reframe.routes import recording, sessions, system
from reframe.services.input_listener import GlobalInputListener

log.remove()
log.add(sys.stderr, level=settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the per-process recorder state; stop any recording on shutdown
    so ffmpeg never outlives the service."""
    hub = EventHub()
    hub.bind(asyncio.get_running_loop())
    app.state.hub = hub
    app.state.supervisor = RecordingSupervisor(
        encoder_path=settings.ffmpeg_path,
        default_root=settings.default_root,
        stop_timeout=settings.stop_timeout_seconds,
    )
    app.state.listener = GlobalInputListener(hub.publish)
    log.info(f"Sessions default to {settings.default_root}")
    yield
    await asyncio.to_thread(app.state.supervisor.shutdown)


app = FastAPI(
    title="reframe",
    description="Screen/audio recording sessions driven by ffmpeg",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RecorderError)
async def recorder_error_handler(_request: Request, exc: RecorderError) -> JSONResponse:
    log.warning(f"{type(exc).__name__}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


app.include_router(recording.router)
app.include_router(sessions.router)
app.include_router(system.router)
