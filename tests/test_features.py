import numpy as np
import pytest

from signtalk.client.config import ClientSettings
from signtalk.client.features import create_extractor, normalize


def test_normalize_centers_on_wrist_and_scales_by_middle_finger():
    landmarks = np.zeros((21, 3), dtype=np.float32)
    landmarks[:] = [0.5, 0.5, 0.0]
    landmarks[12] = [0.5, 0.1, 0.0]  # middle finger tip, 0.4 above the wrist
    landmarks[4] = [0.7, 0.5, 0.0]

    norm = normalize(landmarks)

    assert np.allclose(norm[0], 0.0)
    assert np.isclose(np.linalg.norm(norm[12]), 1.0)
    assert np.allclose(norm[4], [0.5, 0.0, 0.0])
    assert landmarks[4][0] == pytest.approx(0.7)  # input untouched


def test_normalize_degenerate_hand_is_left_unscaled():
    landmarks = np.ones((21, 3), dtype=np.float32)

    assert np.allclose(normalize(landmarks), 0.0)


def test_landmark_extractor_needs_model_path():
    with pytest.raises(ValueError):
        create_extractor(ClientSettings(extractor="landmarks", hand_landmarker_path=None))


def test_unknown_extractor_is_rejected():
    with pytest.raises(ValueError):
        create_extractor(ClientSettings(extractor="resnet"))
