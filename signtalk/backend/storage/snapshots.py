"""
Flat-file store for the serialized k-NN classifier dataset.

The snapshot is a JSON object mapping each label to ``{"values": [...],
"shape": [...]}``. Every save replaces the whole file; there is no merge and
no history.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Dict

from signtalk.backend.core.logging import get_logger

logger = get_logger(__name__)


class SnapshotStoreError(Exception):
    """Raised when the snapshot file cannot be read or written."""


class EmptySnapshotError(SnapshotStoreError):
    """Raised when an empty snapshot is submitted for saving."""


class SnapshotNotFoundError(SnapshotStoreError):
    """Raised when no snapshot has been saved yet."""


def is_empty_snapshot(snapshot) -> bool:
    """True for a missing/empty mapping or one holding an entry without values."""
    if not snapshot:
        return True
    return any(not entry or not entry.get("values") for entry in snapshot.values())


class SnapshotStore:
    """Stores the last-saved classifier snapshot at a fixed path."""

    def __init__(self, path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, snapshot: Dict[str, dict]) -> None:
        """
        Replace the stored snapshot.

        Args:
            snapshot: label -> {"values": [float], "shape": [int]}

        Raises:
            EmptySnapshotError: nothing to store; the previous file is untouched
            SnapshotStoreError: the file could not be written
        """
        if is_empty_snapshot(snapshot):
            raise EmptySnapshotError("Snapshot has no labelled examples")

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".snapshot-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(snapshot, f)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error("snapshot_save_failed", path=str(self.path), error=str(e))
            raise SnapshotStoreError(f"Could not write snapshot: {e}") from e

        logger.info("snapshot_saved", path=str(self.path), labels=len(snapshot))

    def load(self) -> Dict[str, dict]:
        """
        Read the stored snapshot.

        Raises:
            SnapshotNotFoundError: no snapshot was ever saved
            SnapshotStoreError: the file exists but cannot be read or decoded
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                snapshot = json.load(f)
        except FileNotFoundError as e:
            raise SnapshotNotFoundError("No snapshot saved") from e
        except (OSError, ValueError) as e:
            logger.error("snapshot_load_failed", path=str(self.path), error=str(e))
            raise SnapshotStoreError(f"Could not read snapshot: {e}") from e

        logger.info("snapshot_loaded", path=str(self.path), labels=len(snapshot))
        return snapshot
