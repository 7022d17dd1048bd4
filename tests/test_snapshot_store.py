import pytest

from signtalk.backend.storage import (
    EmptySnapshotError,
    SnapshotNotFoundError,
    SnapshotStore,
    SnapshotStoreError,
)


SNAPSHOT = {
    "A": {"values": [0.1, 0.2, 0.3], "shape": [1, 3]},
    "B": {"values": [1.0, 0.0, 0.5, 0.25, 0.75, 0.125], "shape": [2, 3]},
}


def test_save_then_load_round_trips(tmp_path):
    store = SnapshotStore(tmp_path / "models" / "snapshot.json")

    store.save(SNAPSHOT)

    assert store.exists()
    assert store.load() == SNAPSHOT


def test_load_without_snapshot_raises_not_found(tmp_path):
    store = SnapshotStore(tmp_path / "snapshot.json")

    assert not store.exists()
    with pytest.raises(SnapshotNotFoundError):
        store.load()


def test_save_replaces_previous_snapshot(tmp_path):
    store = SnapshotStore(tmp_path / "snapshot.json")
    store.save(SNAPSHOT)

    replacement = {"C": {"values": [9.0, 8.0, 7.0], "shape": [1, 3]}}
    store.save(replacement)

    assert store.load() == replacement


@pytest.mark.parametrize("empty", [{}, None, {"A": {"values": [], "shape": [0, 3]}}])
def test_empty_snapshot_is_rejected_and_keeps_previous(tmp_path, empty):
    store = SnapshotStore(tmp_path / "snapshot.json")
    store.save(SNAPSHOT)

    with pytest.raises(EmptySnapshotError):
        store.save(empty)

    assert store.load() == SNAPSHOT


def test_corrupt_file_is_an_io_error_not_missing(tmp_path):
    path = tmp_path / "snapshot.json"
    path.write_text("{not json", encoding="utf-8")
    store = SnapshotStore(path)

    with pytest.raises(SnapshotStoreError) as excinfo:
        store.load()

    assert not isinstance(excinfo.value, SnapshotNotFoundError)


def test_failed_save_leaves_no_temp_files(tmp_path):
    store = SnapshotStore(tmp_path / "snapshot.json")

    with pytest.raises(TypeError):
        store.save({"A": {"values": [object()], "shape": [1]}})

    assert list(tmp_path.iterdir()) == []
