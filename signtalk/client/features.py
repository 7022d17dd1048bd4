"""
Feature extractors turning a BGR frame into a fixed-length vector for the k-NN classifier.

Two backends are available:
    - MobileNetFeatureExtractor: pretrained MobileNetV3 embedding of the whole frame
    - LandmarkFeatureExtractor: normalized MediaPipe hand landmarks (21 x 3)
"""
import cv2
import numpy as np
import torch
from PIL import Image
from torchvision import models

from signtalk.backend.core.logging import get_logger
from signtalk.client.errors import FeatureExtractionError

logger = get_logger(__name__)


class MobileNetFeatureExtractor:
    """Embeds frames with an ImageNet-pretrained MobileNetV3 (classifier head removed)."""

    def __init__(self, device=None):
        self.device = device if device else torch.device("cuda" if torch.cuda.is_available() else "cpu")

        weights = models.MobileNet_V3_Small_Weights.DEFAULT
        self.model = models.mobilenet_v3_small(weights=weights)
        self.model.classifier = torch.nn.Identity()
        self.model.to(self.device)
        self.model.eval()

        # Resize, center crop and ImageNet normalization
        self.transform = weights.transforms()
        logger.info("mobilenet_loaded", device=str(self.device))

    def extract(self, frame):
        """
        Args:
            frame: BGR image (H, W, 3)

        Returns:
            np.array of shape (576,)
        """
        if frame is None or frame.size == 0:
            raise FeatureExtractionError("Empty frame")

        image = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        input_tensor = self.transform(image).unsqueeze(0).to(self.device)

        with torch.no_grad():
            embedding = self.model(input_tensor)

        return embedding.squeeze(0).cpu().numpy()

    def dispose(self):
        self.model = None


class LandmarkFeatureExtractor:
    """Uses MediaPipe's hand landmarker and returns wrist-centred, scale-normalized landmarks."""

    def __init__(self, model_path, min_detection_confidence=0.5):
        # Imported here so the MobileNet path works without the landmarker model file
        import mediapipe as mp
        from mediapipe.tasks import python
        from mediapipe.tasks.python import vision

        self._mp = mp
        base_options = python.BaseOptions(model_asset_path=str(model_path))
        options = vision.HandLandmarkerOptions(
            base_options=base_options,
            num_hands=1,
            min_hand_detection_confidence=min_detection_confidence
        )
        self.detector = vision.HandLandmarker.create_from_options(options)
        logger.info("hand_landmarker_loaded", model_path=str(model_path))

    def extract_landmarks(self, frame):
        """
        Returns:
            landmarks: np.array of shape (21, 3) or None if no hand detected
        """
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        mp_image = self._mp.Image(image_format=self._mp.ImageFormat.SRGB, data=rgb)
        results = self.detector.detect(mp_image)

        if results.hand_landmarks:
            return np.array([[lm.x, lm.y, lm.z] for lm in results.hand_landmarks[0]], dtype=np.float32)
        return None

    def extract(self, frame):
        landmarks = self.extract_landmarks(frame)
        if landmarks is None:
            raise FeatureExtractionError("No hand detected")
        return normalize(landmarks).flatten()

    def dispose(self):
        if self.detector is not None:
            self.detector.close()
            self.detector = None


def normalize(landmarks):
    """
    Normalize landmarks by centering on wrist and scaling by hand size.

    Args:
        landmarks: np.array of shape (21, 3) - raw hand landmarks

    Returns:
        normalized: np.array of shape (21, 3) - normalized landmarks
    """
    lm = np.array(landmarks, dtype=np.float32)
    lm -= lm[0]  # center on wrist (landmark 0)

    # Scale by distance to middle finger tip (landmark 12)
    scale = np.linalg.norm(lm[12])

    if scale > 0:
        lm /= scale

    return lm


def create_extractor(settings):
    """Build the extractor named by ``settings.extractor``."""
    if settings.extractor == "landmarks":
        if settings.hand_landmarker_path is None:
            raise ValueError("SIGNTALK_HAND_LANDMARKER_PATH must point to hand_landmarker.task")
        return LandmarkFeatureExtractor(settings.hand_landmarker_path)
    if settings.extractor == "mobilenet":
        return MobileNetFeatureExtractor()
    raise ValueError(f"Unknown extractor: {settings.extractor}. Must be 'mobilenet' or 'landmarks'.")
