"""Error taxonomy shared by the recorder services and the HTTP layer.

Every error carries the HTTP status the API answers with, so routes can let
them propagate and a single handler in ``reframe.main`` renders
``{"detail": message}``.
"""


class RecorderError(Exception):
    status_code: int = 500


class AlreadyRecordingError(RecorderError):
    status_code = 409

    def __init__(self, message: str = "Already recording") -> None:
        super().__init__(message)


class NotRecordingError(RecorderError):
    status_code = 400

    def __init__(self, message: str = "Not recording") -> None:
        super().__init__(message)


class InvalidOptionsError(RecorderError):
    status_code = 422


class EncoderLaunchError(RecorderError):
    status_code = 500


class FilesystemError(RecorderError):
    status_code = 500


class ToolInvocationError(RecorderError):
    status_code = 500
