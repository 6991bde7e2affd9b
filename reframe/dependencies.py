from fastapi import Request

from reframe.events import EventHub
from reframe.recording import RecordingSupervisor
from reframe.services.input_listener import GlobalInputListener


def get_supervisor(request: Request) -> RecordingSupervisor:
    return request.app.state.supervisor


def get_hub(request: Request) -> EventHub:
    return request.app.state.hub


def get_listener(request: Request) -> GlobalInputListener:
    return request.app.state.listener
