import numpy as np
import pytest

from signtalk.client.classifier import KNNClassifier
from signtalk.client.errors import EmptyClassifierError


def _trained():
    clf = KNNClassifier(k=3)
    for vector in ([1.0, 0.0, 0.0], [0.9, 0.1, 0.0], [0.95, 0.0, 0.05]):
        clf.add_example(np.array(vector), "A")
    for vector in ([0.0, 1.0, 0.0], [0.1, 0.9, 0.0], [0.0, 0.95, 0.05]):
        clf.add_example(np.array(vector), "B")
    return clf


def test_predict_returns_label_and_percentage_confidence():
    clf = _trained()

    result = clf.predict([1.0, 0.05, 0.0])

    assert result["predicted_class"] == "A"
    assert result["confidence"] == pytest.approx(100.0)
    assert set(result["all_confidences"]) == {"A", "B"}
    assert sum(result["all_confidences"].values()) == pytest.approx(100.0)


def test_split_vote_lowers_confidence():
    clf = KNNClassifier(k=3)
    clf.add_example([1.0, 0.0], "A")
    clf.add_example([0.99, 0.01], "A")
    clf.add_example([0.0, 1.0], "B")

    result = clf.predict([1.0, 0.0])

    assert result["predicted_class"] == "A"
    assert result["confidence"] == pytest.approx(200.0 / 3)


def test_k_is_capped_by_number_of_examples():
    clf = KNNClassifier(k=5)
    clf.add_example([1.0, 0.0], "A")

    assert clf.predict([0.5, 0.5])["predicted_class"] == "A"


def test_predict_without_examples_raises():
    with pytest.raises(EmptyClassifierError):
        KNNClassifier().predict([1.0, 2.0])


def test_feature_size_must_stay_constant():
    clf = KNNClassifier()
    clf.add_example([1.0, 2.0, 3.0], "A")

    with pytest.raises(ValueError):
        clf.add_example([1.0, 2.0], "B")


def test_class_example_count():
    clf = _trained()
    clf.add_example([0.0, 0.0, 1.0], "C")

    assert clf.class_example_count() == {"A": 3, "B": 3, "C": 1}
    assert clf.num_classes == 3


def test_export_dataset_layout():
    clf = KNNClassifier()
    clf.add_example([1.0, 2.0, 3.0], "A")
    clf.add_example([4.0, 5.0, 6.0], "A")

    assert clf.export_dataset() == {"A": {"values": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0], "shape": [2, 3]}}


def test_import_replaces_examples_and_predicts():
    source = _trained()
    target = KNNClassifier()
    target.add_example([0.0, 0.0, 1.0], "C")

    target.import_dataset(source.export_dataset())

    assert target.class_example_count() == {"A": 3, "B": 3}
    assert target.predict([0.0, 1.0, 0.0])["predicted_class"] == "B"


def test_import_rejects_mismatched_shape():
    clf = KNNClassifier()
    clf.add_example([1.0, 2.0], "A")

    with pytest.raises(ValueError):
        clf.import_dataset({"A": {"values": [1.0, 2.0, 3.0], "shape": [2, 2]}})

    assert clf.class_example_count() == {"A": 1}


def test_clear_and_dispose_empty_the_classifier():
    clf = _trained()
    clf.clear()
    assert clf.is_empty()

    clf = _trained()
    clf.dispose()
    assert clf.class_example_count() == {}
