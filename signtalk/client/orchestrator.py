"""
Training, recognition and model persistence flows of the trainer client.

Recognition is a two-state machine (idle / recognizing) run as a single
asyncio task. Each cycle awaits a camera frame, classifies it and, when the
classifier is confident enough, asks the backend for the word and media to
show. Stopping is cooperative: the running cycle finishes, the next one is
skipped.
"""
import asyncio
from typing import Callable, Iterable, Optional

from tqdm import tqdm

from signtalk.backend.core.logging import get_logger
from signtalk.client.camera import read_image
from signtalk.client.config import CONFIDENCE_THRESHOLD, TARGET_FPS
from signtalk.client.errors import GatewayError, SignTalkError
from signtalk.client.session import (
    LoadOutcome,
    BatchTrainingReport,
    RecognitionResult,
    RecognitionState,
    TrainerSession,
)

logger = get_logger(__name__)


def normalize_label(label: str) -> str:
    """Labels are stored upper-case, like the backend vocabulary keys."""
    return label.strip().upper()


class Orchestrator:
    """Drives a TrainerSession."""

    def __init__(
        self,
        session: TrainerSession,
        confidence_threshold: float = CONFIDENCE_THRESHOLD,
        target_fps: float = TARGET_FPS,
        image_reader: Callable = read_image,
    ):
        self.session = session
        self.confidence_threshold = confidence_threshold
        self.frame_interval = 1.0 / target_fps
        self.image_reader = image_reader
        self._task: Optional[asyncio.Task] = None

    # ========== TRAINING ==========

    async def train_letter(self, label: str) -> bool:
        """Capture one camera frame and add it as an example of ``label``."""
        session = self.session
        if not session.has_camera:
            session.set_status("Start the camera first")
            return False

        label = normalize_label(label)
        if not label:
            session.set_status("Choose a letter to train")
            return False

        try:
            frame = await session.camera.next_frame()
            features = await asyncio.to_thread(session.extractor.extract, frame)
            session.classifier.add_example(features, label)
        except (SignTalkError, ValueError) as e:
            logger.warning("train_letter_failed", label=label, error=str(e))
            session.set_status(f"Error training {label}: {e}")
            return False

        count = session.classifier.class_example_count().get(label, 1)
        session.set_status(f"{label} trained ({count} samples)")
        return True

    async def batch_train(
        self,
        paths: Iterable,
        label: str,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> BatchTrainingReport:
        """
        Add one example per image under a single label.

        A failing image is logged and skipped; the remaining images are
        still processed.

        Args:
            paths: image files to train on
            label: label for every image
            on_progress: called with (processed, total) after each image

        Returns:
            BatchTrainingReport with the added count and per-file failures
        """
        session = self.session
        paths = list(paths)
        label = normalize_label(label)
        report = BatchTrainingReport(label=label, total=len(paths))

        if not label:
            session.set_status("Choose a label before batch training")
            return report
        if not paths:
            session.set_status("No images selected")
            return report

        session.set_status(f"Training {label} with {len(paths)} images...")
        for index, path in enumerate(tqdm(paths, desc=f"  {label}", leave=False), start=1):
            try:
                frame = await asyncio.to_thread(self.image_reader, path)
                features = await asyncio.to_thread(session.extractor.extract, frame)
                session.classifier.add_example(features, label)
                report.added += 1
            except Exception as e:
                logger.warning("batch_image_failed", label=label, path=str(path), error=str(e))
                report.failures.append((str(path), str(e)))

            if on_progress is not None:
                on_progress(index, report.total)

        logger.info("batch_training_done", label=label, added=report.added, failed=report.failed)
        session.set_status(f"{label}: {report.added} images trained, {report.failed} failed")
        return report

    def example_counts(self):
        return self.session.classifier.class_example_count()

    def clear_model(self):
        """Forget every example held in memory."""
        self.session.classifier.clear()
        self.session.set_status("Model cleared")

    # ========== RECOGNITION ==========

    @property
    def state(self):
        return self.session.state

    def start_recognition(self) -> Optional[asyncio.Task]:
        """
        Enter the recognizing state and spawn the recognition task.

        Returns the running task, or None when preconditions are not met.
        Must be called from inside a running event loop.
        """
        session = self.session
        if session.classifier.is_empty():
            session.set_status("Train some letters first!")
            return None
        if not session.has_camera:
            session.set_status("Start the camera first!")
            return None

        session.state = RecognitionState.RECOGNIZING
        session.set_status("Recognizing... make signs at the camera")
        # A loop that was asked to stop but is still finishing its cycle keeps going
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._recognition_loop())
        return self._task

    def stop_recognition(self):
        """Ask the loop to stop after the cycle in progress."""
        if self.session.is_recognizing:
            self.session.state = RecognitionState.IDLE
            self.session.set_status("Recognition stopped")

    async def _recognition_loop(self):
        session = self.session
        try:
            while session.is_recognizing:
                try:
                    await self.recognize_frame()
                except Exception as e:
                    logger.exception("recognition_cycle_failed", error=str(e))
                    session.set_status(f"Recognition stopped: {e}")
                    break
                await asyncio.sleep(self.frame_interval)
        finally:
            session.state = RecognitionState.IDLE

    async def recognize_frame(self) -> RecognitionResult:
        """Run one recognition cycle on the next camera frame."""
        session = self.session
        frame = await session.camera.next_frame()
        features = await asyncio.to_thread(session.extractor.extract, frame)
        prediction = session.classifier.predict(features)
        session.frames_processed += 1

        label = prediction['predicted_class']
        confidence = prediction['confidence']
        if confidence > self.confidence_threshold:
            result = await self.resolve_label(label, confidence)
        else:
            result = RecognitionResult.placeholder()

        session.show_result(result)
        return result

    async def resolve_label(self, label: str, confidence: float) -> RecognitionResult:
        """Turn a predicted label into the word and media to display."""
        session = self.session
        session.lookups += 1
        try:
            entry = await asyncio.to_thread(session.gateway.lookup, label)
        except GatewayError as e:
            logger.warning("vocabulary_lookup_failed", label=label, error=str(e))
            entry = None

        if not isinstance(entry, dict):
            return RecognitionResult(word=label, confidence=confidence, label=label)

        return RecognitionResult(
            word=entry.get('key') or label,
            confidence=confidence,
            media_url=session.gateway.media_url(entry.get('mediaUrl')),
            label=label,
        )

    # ========== SAVE / LOAD ==========

    async def save_model(self) -> bool:
        """Send the whole example set to the backend, replacing what it stored."""
        session = self.session
        snapshot = session.classifier.export_dataset()
        if not snapshot:
            session.set_status("Nothing to save: train some letters first")
            return False

        try:
            await asyncio.to_thread(session.gateway.save_snapshot, snapshot)
        except GatewayError as e:
            logger.error("save_model_failed", error=str(e))
            session.set_status("Error saving model on the server")
            return False

        session.set_status(f"Model saved on the server ({len(snapshot)} labels)")
        return True

    async def load_model(self) -> LoadOutcome:
        """
        Replace the in-memory example set with the snapshot stored on the backend.

        The in-memory examples are untouched unless the outcome is LOADED.
        MISSING means the backend has never stored a model; FAILED covers
        transport errors, server errors and snapshots that cannot be imported.
        """
        session = self.session
        try:
            snapshot = await asyncio.to_thread(session.gateway.load_snapshot)
        except GatewayError as e:
            logger.error("load_model_failed", error=str(e))
            session.set_status("Error loading model from the server")
            return LoadOutcome.FAILED

        if snapshot is None:
            session.set_status("No saved model found on the server")
            return LoadOutcome.MISSING

        try:
            session.classifier.import_dataset(snapshot)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error("load_model_invalid", error=str(e))
            session.set_status("Saved model is not valid")
            return LoadOutcome.FAILED

        session.set_status(f"Model loaded from the server ({len(snapshot)} labels)")
        return LoadOutcome.LOADED
