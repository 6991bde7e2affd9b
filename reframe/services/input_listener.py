import threading
from typing import Any, Callable

from loguru import logger as log

from reframe.errors import ToolInvocationError

Publish = Callable[[dict], None]


def _pynput_listeners(on_move, on_click, on_press) -> list:
    """Global mouse and keyboard hooks. pynput needs a display, so import late."""
    from pynput import keyboard, mouse

    return [
        mouse.Listener(on_move=on_move, on_click=on_click),
        keyboard.Listener(on_press=on_press),
    ]


class GlobalInputListener:
    """Forwards system-wide clicks and key presses to the UI overlay.

    Runs for the rest of the process once started; there is no stop.
    ``start`` is idempotent. Handlers run on pynput's threads and only touch
    the last pointer position kept here.
    """

    def __init__(
        self,
        publish: Publish,
        listener_factory: Callable[..., list] = _pynput_listeners,
    ) -> None:
        self._publish = publish
        self._listener_factory = listener_factory
        self._lock = threading.Lock()
        self._running = False
        self._listeners: list = []

        self._last_x = 0.0
        self._last_y = 0.0

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def start(self) -> bool:
        """Start the hooks. Returns False if they were already running."""
        with self._lock:
            if self._running:
                log.info("Global listener already running.")
                return False
            self._running = True

        log.info("Starting global input listener...")
        try:
            self._listeners = self._listener_factory(
                self._on_move, self._on_click, self._on_press
            )
        except Exception as e:
            with self._lock:
                self._running = False
            raise ToolInvocationError(f"Failed to start input listener: {e}") from e
        for listener in self._listeners:
            listener.daemon = True
            listener.start()
        return True

    # ------------------------------------------------------------------
    # pynput callbacks
    # ------------------------------------------------------------------

    def _on_move(self, x: float, y: float) -> None:
        self._last_x = x
        self._last_y = y

    def _on_click(self, x: float, y: float, button: Any, pressed: bool) -> None:
        if not pressed:
            return
        name = getattr(button, "name", str(button))
        if name not in ("left", "right"):
            return
        self._publish({
            "type": "global-click",
            "x": self._last_x,
            "y": self._last_y,
            "button": name,
        })

    def _on_press(self, key: Any) -> None:
        name = getattr(key, "char", None) or getattr(key, "name", None) or str(key)
        self._publish({"type": "global-key", "key": name})
