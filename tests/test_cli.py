import asyncio

import cv2
import numpy as np
import pytest

from signtalk import cli
from signtalk.cli import FrameHub, build_parser
from signtalk.client.classifier import KNNClassifier
from signtalk.client.config import ClientSettings
from signtalk.client.errors import GatewayError
from signtalk.client.session import TrainerSession

SAVED = {
    label: {"values": values, "shape": [1, 3]}
    for label, values in (("A", [1.0, 0.0, 0.0]), ("B", [0.0, 1.0, 0.0]), ("C", [0.0, 0.0, 1.0]))
}


class MeanColorExtractor:
    def extract(self, frame):
        return frame.reshape(-1, 3).mean(axis=0) / 255.0 + 0.1


class SnapshotGateway:
    def __init__(self, snapshot=None, fail_load=False):
        self.snapshot = snapshot
        self.fail_load = fail_load
        self.saved = []

    def load_snapshot(self):
        if self.fail_load:
            raise GatewayError("HTTP 500 from http://backend/api/modelo", 500)
        return self.snapshot

    def save_snapshot(self, snapshot):
        self.saved.append(snapshot)
        self.snapshot = snapshot
        return {"message": "ok"}

    def close(self):
        pass


@pytest.fixture
def image_folder(tmp_path):
    folder = tmp_path / "D"
    folder.mkdir()
    for i in range(2):
        cv2.imwrite(str(folder / f"{i}.png"), np.full((8, 8, 3), 60 * (i + 1), dtype=np.uint8))
    return folder


def _patch_session(monkeypatch, gateway):
    def build_session(settings, camera=None):
        return TrainerSession(
            classifier=KNNClassifier(k=settings.knn_k),
            extractor=MeanColorExtractor(),
            gateway=gateway,
            camera=camera,
        )

    monkeypatch.setattr(cli, "build_session", build_session)


def test_batch_train_aborts_when_saved_model_cannot_be_loaded(monkeypatch, image_folder):
    gateway = SnapshotGateway(snapshot=dict(SAVED), fail_load=True)
    _patch_session(monkeypatch, gateway)

    rc = asyncio.run(cli.batch_train(ClientSettings(), "D", image_folder))

    assert rc == 1
    assert gateway.saved == []
    assert sorted(gateway.snapshot) == ["A", "B", "C"]


def test_batch_train_adds_label_to_saved_model(monkeypatch, image_folder):
    gateway = SnapshotGateway(snapshot=dict(SAVED))
    _patch_session(monkeypatch, gateway)

    rc = asyncio.run(cli.batch_train(ClientSettings(), "d", image_folder))

    assert rc == 0
    assert sorted(gateway.saved[-1]) == ["A", "B", "C", "D"]
    assert gateway.saved[-1]["D"]["shape"] == [2, 3]


def test_batch_train_without_saved_model_starts_fresh(monkeypatch, image_folder):
    gateway = SnapshotGateway()
    _patch_session(monkeypatch, gateway)

    rc = asyncio.run(cli.batch_train(ClientSettings(), "D", image_folder))

    assert rc == 0
    assert list(gateway.saved[-1]) == ["D"]


def test_batch_train_arguments():
    args = build_parser().parse_args(["batch-train", "OLA", "photos/ola", "--no-load"])

    assert args.command == "batch-train"
    assert args.label == "OLA"
    assert args.folder == "photos/ola"
    assert args.no_load is True
    assert args.no_save is False


def test_frame_hub_hands_out_fresh_frames():
    class Capture:
        released = False

        def release(self):
            self.released = True

    capture = Capture()

    async def scenario():
        hub = FrameHub(capture)
        waiter = asyncio.create_task(hub.next_frame())
        await asyncio.sleep(0)
        frame = np.zeros((2, 2, 3), dtype=np.uint8)
        hub.publish(frame)
        received = await asyncio.wait_for(waiter, timeout=1)
        hub.release()
        return frame, received

    frame, received = asyncio.run(scenario())

    assert np.array_equal(frame, received)
    assert received is not frame
    assert capture.released
