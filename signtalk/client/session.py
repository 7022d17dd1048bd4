"""
Trainer session state.

Everything the trainer mutates (camera handle, extractor, classifier,
recognition flag, status line, last displayed result) lives on one
TrainerSession, passed explicitly to the orchestrator.
"""
import enum
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from signtalk.backend.core.logging import get_logger
from signtalk.client.config import HIGH_CONFIDENCE, MEDIUM_CONFIDENCE, PLACEHOLDER_LABEL

logger = get_logger(__name__)


class RecognitionState(str, enum.Enum):
    IDLE = "idle"
    RECOGNIZING = "recognizing"


class LoadOutcome(str, enum.Enum):
    """Result of asking the backend for the saved model."""
    LOADED = "loaded"
    MISSING = "missing"  # nothing was ever saved
    FAILED = "failed"


@dataclass
class RecognitionResult:
    """What the UI shows for one recognition cycle."""
    word: str
    confidence: float
    media_url: Optional[str] = None
    label: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def placeholder(cls):
        return cls(word=PLACEHOLDER_LABEL, confidence=0.0)

    @property
    def band(self):
        return confidence_band(self.confidence)


@dataclass
class BatchTrainingReport:
    """Outcome of a batch training run."""
    label: str
    total: int
    added: int = 0
    failures: List[tuple] = field(default_factory=list)  # (path, error message)

    @property
    def failed(self):
        return len(self.failures)


def confidence_band(confidence):
    """Colour band used when displaying a confidence percentage."""
    if confidence > HIGH_CONFIDENCE:
        return "high"
    if confidence > MEDIUM_CONFIDENCE:
        return "medium"
    return "low"


class TrainerSession:
    """Manages state for a single trainer client."""

    def __init__(self, classifier, extractor, gateway, camera=None):
        """
        Args:
            classifier: k-NN classifier (add_example / predict / export_dataset / import_dataset / dispose)
            extractor: object with ``extract(frame) -> feature vector``
            gateway: GatewayClient (or anything with the same methods)
            camera: frame source with ``await next_frame()``; may be attached later
        """
        self.classifier = classifier
        self.extractor = extractor
        self.gateway = gateway
        self.camera = camera

        self.state = RecognitionState.IDLE
        self.status = ""
        self.last_result: Optional[RecognitionResult] = None

        # Statistics
        self.frames_processed = 0
        self.lookups = 0

        self._status_listeners: List[Callable[[str], None]] = []
        self._result_listeners: List[Callable[[RecognitionResult], None]] = []

    @property
    def is_recognizing(self):
        return self.state is RecognitionState.RECOGNIZING

    @property
    def has_camera(self):
        return self.camera is not None

    def on_status(self, callback):
        self._status_listeners.append(callback)

    def on_result(self, callback):
        self._result_listeners.append(callback)

    def set_status(self, message):
        self.status = message
        logger.info("status", message=message)
        for callback in self._status_listeners:
            callback(message)

    def show_result(self, result: RecognitionResult):
        self.last_result = result
        for callback in self._result_listeners:
            callback(result)

    def get_progress(self) -> dict:
        """Snapshot of the session for display."""
        return {
            'state': self.state.value,
            'status': self.status,
            'example_counts': self.classifier.class_example_count(),
            'frames_processed': self.frames_processed,
            'lookups': self.lookups,
            'last_word': self.last_result.word if self.last_result else None,
            'last_confidence': self.last_result.confidence if self.last_result else None,
        }

    def close(self):
        """Release the camera, extractor and classifier."""
        self.state = RecognitionState.IDLE
        if self.camera is not None:
            self.camera.release()
            self.camera = None
        dispose = getattr(self.extractor, 'dispose', None)
        if dispose is not None:
            dispose()
        self.classifier.dispose()
        self.gateway.close()
