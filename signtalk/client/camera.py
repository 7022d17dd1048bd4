"""
Camera capture and image loading with OpenCV.
"""
import asyncio
from pathlib import Path

import cv2

from signtalk.client.config import FRAME_HEIGHT, FRAME_WIDTH, IMAGE_EXTENSIONS
from signtalk.client.errors import CameraError, FeatureExtractionError


class VideoCapture:
    """Webcam wrapper whose frames can be awaited from the event loop."""

    def __init__(self, source=0, width=FRAME_WIDTH, height=FRAME_HEIGHT, mirror=True):
        self.source = source
        self.mirror = mirror
        self.cap = cv2.VideoCapture(source)
        if not self.cap.isOpened():
            raise CameraError(f"Unable to open camera {source}")
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self.width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

    @property
    def is_open(self):
        return self.cap is not None and self.cap.isOpened()

    def read(self):
        """Read one BGR frame (mirrored for a selfie view)."""
        if not self.is_open:
            raise CameraError("Camera is not open")
        flag, frame = self.cap.read()
        if not flag:
            raise CameraError("Failed to read frame from the camera.")
        if self.mirror:
            frame = cv2.flip(frame, 1)
        return frame

    async def next_frame(self):
        """Suspend until the next frame is available."""
        return await asyncio.to_thread(self.read)

    def release(self):
        if getattr(self, 'cap', None) is not None:
            self.cap.release()
            self.cap = None

    def __del__(self):
        self.release()


def read_image(path):
    """Load an image file as a BGR array."""
    frame = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if frame is None:
        raise FeatureExtractionError(f"Could not read image: {path}")
    return frame


def list_images(folder):
    """All image files directly inside ``folder``, sorted by name."""
    folder = Path(folder)
    if not folder.is_dir():
        raise FileNotFoundError(f"Folder not found: {folder}")
    return sorted(p for p in folder.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_EXTENSIONS)
