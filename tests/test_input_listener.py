from types import SimpleNamespace

import pytest

from reframe.errors import ToolInvocationError
from reframe.services.input_listener import GlobalInputListener


class FakeListener:
    def __init__(self):
        self.daemon = False
        self.started = False

    def start(self):
        self.started = True


class FakeFactory:
    def __init__(self):
        self.calls = 0
        self.handlers = None
        self.listeners = []

    def __call__(self, on_move, on_click, on_press):
        self.calls += 1
        self.handlers = SimpleNamespace(move=on_move, click=on_click, press=on_press)
        self.listeners = [FakeListener(), FakeListener()]
        return self.listeners


@pytest.fixture
def events():
    return []


@pytest.fixture
def factory():
    return FakeFactory()


@pytest.fixture
def listener(events, factory):
    return GlobalInputListener(events.append, listener_factory=factory)


def test_start_is_idempotent(listener, factory):
    assert listener.start() is True
    assert listener.start() is False
    assert factory.calls == 1
    assert listener.is_running
    assert all(l.started and l.daemon for l in factory.listeners)


def test_click_uses_last_pointer_position(listener, factory, events):
    listener.start()
    factory.handlers.move(120.0, 45.5)
    factory.handlers.click(0, 0, SimpleNamespace(name="left"), True)
    factory.handlers.click(0, 0, SimpleNamespace(name="right"), True)

    assert events == [
        {"type": "global-click", "x": 120.0, "y": 45.5, "button": "left"},
        {"type": "global-click", "x": 120.0, "y": 45.5, "button": "right"},
    ]


def test_release_and_other_buttons_are_ignored(listener, factory, events):
    listener.start()
    factory.handlers.click(1, 1, SimpleNamespace(name="left"), False)
    factory.handlers.click(1, 1, SimpleNamespace(name="middle"), True)
    factory.handlers.move(5, 5)

    assert events == []


def test_key_press(listener, factory, events):
    listener.start()
    factory.handlers.press(SimpleNamespace(char="a"))
    factory.handlers.press(SimpleNamespace(char=None, name="space"))

    assert events == [
        {"type": "global-key", "key": "a"},
        {"type": "global-key", "key": "space"},
    ]


def test_failed_start_can_be_retried(events):
    def broken_factory(*_handlers):
        raise ImportError("no display")

    listener = GlobalInputListener(events.append, listener_factory=broken_factory)
    with pytest.raises(ToolInvocationError):
        listener.start()
    assert not listener.is_running
