"""
k-nearest-neighbour classifier over image feature vectors.

Wraps scikit-learn's ``KNeighborsClassifier`` behind the small surface the
trainer needs: add one example at a time, predict, and export/import the
whole example set as a JSON-friendly snapshot.
"""
import numpy as np
from sklearn.neighbors import KNeighborsClassifier

from signtalk.backend.core.logging import get_logger
from signtalk.client.config import KNN_K
from signtalk.client.errors import EmptyClassifierError

logger = get_logger(__name__)


class KNNClassifier:
    """
    Incremental k-NN classifier.

    Examples are kept per label as a (n_examples, n_features) float32 array.
    The scikit-learn model is refitted lazily on the first prediction after
    the example set changes.
    """

    def __init__(self, k=KNN_K):
        self.k = k
        self._examples = {}  # label -> np.ndarray (n, d)
        self._model = None
        self._dirty = True

    @property
    def num_features(self):
        for examples in self._examples.values():
            return examples.shape[1]
        return None

    @property
    def num_classes(self):
        return len(self._examples)

    def is_empty(self):
        return not self._examples

    def _as_vector(self, features):
        vector = np.asarray(features, dtype=np.float32).reshape(-1)
        if vector.size == 0:
            raise ValueError("Feature vector is empty")
        expected = self.num_features
        if expected is not None and vector.size != expected:
            raise ValueError(f"Expected {expected} features, got {vector.size}")
        return vector

    def add_example(self, features, label):
        """Append one labelled feature vector to the live example set."""
        vector = self._as_vector(features)
        label = str(label)
        if label in self._examples:
            self._examples[label] = np.vstack([self._examples[label], vector])
        else:
            self._examples[label] = vector[np.newaxis, :]
        self._dirty = True

    def class_example_count(self):
        """Number of stored examples per label."""
        return {label: int(examples.shape[0]) for label, examples in self._examples.items()}

    def _fit(self):
        X = np.concatenate(list(self._examples.values()), axis=0)
        y = np.concatenate([
            np.full(examples.shape[0], label, dtype=object)
            for label, examples in self._examples.items()
        ])
        n_neighbors = min(self.k, len(y))
        self._model = KNeighborsClassifier(n_neighbors=n_neighbors, metric="cosine", algorithm="brute")
        self._model.fit(X, y)
        self._dirty = False

    def predict(self, features):
        """
        Predict the label of a feature vector.

        Args:
            features: array-like of shape (n_features,) or (1, n_features)

        Returns:
            dict with:
                - predicted_class: str, winning label
                - confidence: float, share of the k neighbours voting for it (0-100)
                - all_confidences: dict, label -> confidence (0-100)
        """
        if self.is_empty():
            raise EmptyClassifierError("Classifier has no examples")

        vector = self._as_vector(features)
        if self._dirty or self._model is None:
            self._fit()

        probs = self._model.predict_proba(vector[np.newaxis, :])[0]
        idx = int(np.argmax(probs))
        all_confidences = {str(label): float(p) * 100.0 for label, p in zip(self._model.classes_, probs)}

        return {
            'predicted_class': str(self._model.classes_[idx]),
            'confidence': float(probs[idx]) * 100.0,
            'all_confidences': all_confidences
        }

    def export_dataset(self):
        """Flatten the example set to label -> {"values": [...], "shape": [n, d]}."""
        return {
            label: {
                'values': examples.reshape(-1).astype(float).tolist(),
                'shape': list(examples.shape)
            }
            for label, examples in self._examples.items()
        }

    def import_dataset(self, snapshot):
        """Replace the example set with the contents of a snapshot."""
        examples = {}
        num_features = None
        for label, entry in snapshot.items():
            values = np.asarray(entry['values'], dtype=np.float32)
            shape = [int(dim) for dim in entry['shape']]
            if len(shape) == 1:
                shape = [1] + shape
            try:
                array = values.reshape(shape)
            except ValueError as e:
                raise ValueError(f"Snapshot entry '{label}' does not match shape {shape}") from e
            if array.ndim != 2 or array.shape[0] == 0:
                raise ValueError(f"Snapshot entry '{label}' must be a non-empty 2-D example set")
            if num_features is not None and array.shape[1] != num_features:
                raise ValueError(f"Snapshot entry '{label}' has {array.shape[1]} features, expected {num_features}")
            num_features = array.shape[1]
            examples[str(label)] = array

        self._examples = examples
        self._model = None
        self._dirty = True
        logger.info("classifier_imported", labels=len(examples), counts=self.class_example_count())

    def clear(self):
        """Remove every example."""
        self._examples = {}
        self._model = None
        self._dirty = True

    def dispose(self):
        self.clear()
