"""
Exceptions raised by the trainer client. None of them is fatal: the
orchestrator logs them, updates the status line and returns to idle.
"""


class SignTalkError(Exception):
    """Base class for client-side failures."""


class GatewayError(SignTalkError):
    """The backend could not be reached or answered with an unexpected status."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class CameraError(SignTalkError):
    """The camera could not be opened or a frame could not be read."""


class FeatureExtractionError(SignTalkError):
    """An image could not be read or turned into a feature vector."""


class EmptyClassifierError(SignTalkError):
    """Prediction or export was requested before any example was added."""
