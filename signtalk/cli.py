"""
Command-line interface for SignTalk.

Usage:
    signtalk serve                       # run the API server
    signtalk run                         # interactive camera trainer / recognizer
    signtalk batch-train A photos/A      # train one label from a folder of images
    signtalk vocabulary                  # list the backend vocabulary
"""
import argparse
import asyncio
import sys

import cv2

from signtalk.backend.core.logging import configure_logging, get_logger
from signtalk.client.camera import VideoCapture, list_images
from signtalk.client.classifier import KNNClassifier
from signtalk.client.config import get_client_settings
from signtalk.client.errors import SignTalkError
from signtalk.client.gateway import GatewayClient
from signtalk.client.orchestrator import Orchestrator
from signtalk.client.session import LoadOutcome, TrainerSession

logger = get_logger(__name__)

WINDOW_NAME = "SignTalk"
BAND_COLORS = {
    "high": (113, 204, 46),   # green
    "medium": (18, 156, 243),  # orange
    "low": (60, 76, 231),     # red
}


class FrameHub:
    """Shares the preview loop's frames with the orchestrator."""

    def __init__(self, capture):
        self.capture = capture
        self._frame = None
        self._fresh = asyncio.Event()

    def publish(self, frame):
        self._frame = frame
        self._fresh.set()

    async def next_frame(self):
        self._fresh.clear()
        await self._fresh.wait()
        return self._frame.copy()

    def release(self):
        self.capture.release()


def build_session(settings, camera=None):
    """Create a trainer session from client settings."""
    # torch/mediapipe are only loaded when a session actually needs an extractor
    from signtalk.client.features import create_extractor

    return TrainerSession(
        classifier=KNNClassifier(k=settings.knn_k),
        extractor=create_extractor(settings),
        gateway=GatewayClient(settings.api_url, timeout=settings.request_timeout),
        camera=camera,
    )


def draw_overlay(frame, session):
    """Status line, last result and the per-letter sample counts."""
    cv2.putText(frame, session.status[:60], (10, 25),
                cv2.FONT_HERSHEY_SIMPLEX, 0.5, (200, 200, 200), 1)

    result = session.last_result
    if result is not None and session.is_recognizing:
        color = BAND_COLORS[result.band]
        cv2.putText(frame, result.word, (10, 70),
                    cv2.FONT_HERSHEY_SIMPLEX, 1.4, color, 3)
        cv2.putText(frame, f"Confidence: {result.confidence:.1f}%", (10, 100),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, color, 1)

    counts = session.classifier.class_example_count()
    if counts:
        summary = " ".join(f"{label}:{n}" for label, n in sorted(counts.items()))
        cv2.putText(frame, summary[:70], (10, frame.shape[0] - 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.4, (0, 255, 255), 1)

    cv2.putText(frame, "a-z train | 1 recognize | 2 stop | 3 save | 4 load | 0 clear | ESC quit",
                (10, frame.shape[0] - 10), cv2.FONT_HERSHEY_SIMPLEX, 0.4, (200, 200, 200), 1)


async def run_app(settings):
    """Main application loop: camera preview plus keyboard-driven training and recognition."""
    try:
        capture = VideoCapture(settings.camera_index)
    except SignTalkError as e:
        logger.error("camera_unavailable", error=str(e))
        return 1

    hub = FrameHub(capture)
    session = build_session(settings, camera=hub)
    orchestrator = Orchestrator(
        session,
        confidence_threshold=settings.confidence_threshold,
        target_fps=settings.target_fps,
    )
    session.set_status("Camera connected! Ready to train or recognize.")
    pending = set()

    def spawn(coro):
        task = asyncio.create_task(coro)
        pending.add(task)
        task.add_done_callback(pending.discard)

    try:
        while True:
            frame = await capture.next_frame()
            hub.publish(frame)
            await asyncio.sleep(0)

            view = frame.copy()
            draw_overlay(view, session)
            cv2.imshow(WINDOW_NAME, view)

            key = cv2.waitKey(1) & 0xFF
            if key == 27:
                break
            elif ord('a') <= key <= ord('z'):
                spawn(orchestrator.train_letter(chr(key).upper()))
            elif key == ord('1'):
                orchestrator.start_recognition()
            elif key == ord('2'):
                orchestrator.stop_recognition()
            elif key == ord('3'):
                spawn(orchestrator.save_model())
            elif key == ord('4'):
                spawn(orchestrator.load_model())
            elif key == ord('0'):
                orchestrator.clear_model()
    except KeyboardInterrupt:
        logger.info("interrupted")
    finally:
        orchestrator.stop_recognition()
        for task in list(pending):
            task.cancel()
        session.close()
        cv2.destroyAllWindows()
        logger.info("trainer_closed")
    return 0


async def batch_train(settings, label, folder, load_first=True, save=True):
    """Train ``label`` from every image in ``folder`` and optionally push the result."""
    session = build_session(settings)
    orchestrator = Orchestrator(session, confidence_threshold=settings.confidence_threshold)

    try:
        # Every save replaces the whole server snapshot, so never train on top of a failed load
        if load_first and await orchestrator.load_model() is LoadOutcome.FAILED:
            print(f"Error: {session.status}", file=sys.stderr)
            return 1

        report = await orchestrator.batch_train(list_images(folder), label)
        for path, error in report.failures:
            print(f"  skipped {path}: {error}")
        print(f"{report.label}: {report.added}/{report.total} images added")

        if save and report.added:
            if not await orchestrator.save_model():
                return 1
        return 0
    finally:
        session.close()


def show_vocabulary(settings):
    gateway = GatewayClient(settings.api_url, timeout=settings.request_timeout)
    try:
        for entry in gateway.list_vocabulary():
            print(f"{entry['key']:<8} {entry['category']:<12} {gateway.media_url(entry['mediaUrl'])}")
    finally:
        gateway.close()
    return 0


def serve(host=None, port=None):
    import uvicorn
    from signtalk.backend.core.config import get_settings

    backend_settings = get_settings()
    uvicorn.run(
        "signtalk.backend.api.routes:app",
        host=host or backend_settings.host,
        port=port or backend_settings.port,
        log_level=backend_settings.log_level.lower(),
    )
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="signtalk", description="Sign-language gesture trainer")
    sub = parser.add_subparsers(dest="command", required=True)

    serve_parser = sub.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=None)
    serve_parser.add_argument("--port", type=int, default=None)

    sub.add_parser("run", help="Interactive camera trainer and recognizer")

    batch_parser = sub.add_parser("batch-train", help="Train one label from a folder of images")
    batch_parser.add_argument("label")
    batch_parser.add_argument("folder")
    batch_parser.add_argument("--no-load", action="store_true",
                              help="Start from an empty model instead of the one saved on the server")
    batch_parser.add_argument("--no-save", action="store_true", help="Do not send the result to the server")

    sub.add_parser("vocabulary", help="List the backend vocabulary")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = get_client_settings()
    configure_logging(settings.log_level, settings.logging_json)

    try:
        if args.command == "serve":
            return serve(args.host, args.port)
        if args.command == "run":
            return asyncio.run(run_app(settings))
        if args.command == "batch-train":
            return asyncio.run(batch_train(
                settings, args.label, args.folder,
                load_first=not args.no_load, save=not args.no_save,
            ))
        if args.command == "vocabulary":
            return show_vocabulary(settings)
    except (SignTalkError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
