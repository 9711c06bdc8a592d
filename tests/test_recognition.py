"""Tests for identity matching and reference loading."""

import cv2
import numpy as np
import pytest

from conftest import StubDetector, StubEmbeddingBackend
from facecrop.detection import DetectedFace
from facecrop.recognition import (
    UNKNOWN_LABEL,
    FaceLabeler,
    FaceMatch,
    FaceMatcher,
    LabeledDescriptors,
    ReferenceLoadError,
    create_embedding_backend,
    load_labeled_descriptors,
)
from facecrop.recognition.embeddings import BaseEmbeddingBackend, crop_face


def _vec(*values):
    return np.array(values, dtype=np.float64)


@pytest.fixture
def matcher():
    return FaceMatcher([
        LabeledDescriptors("black-widow", [_vec(0, 0, 0, 0)]),
        LabeledDescriptors("captain-america", [_vec(1, 1, 1, 1)]),
    ], distance_threshold=0.6)


class TestFaceMatch:
    """Test cases for FaceMatch labels."""

    def test_label_with_distance(self):
        assert str(FaceMatch("black-widow", 0.41234)) == "black-widow (0.41)"

    def test_label_without_distance(self):
        assert FaceMatch("black-widow", 0.41).to_string(with_distance=False) == "black-widow"

    def test_unknown(self):
        match = FaceMatch(UNKNOWN_LABEL, 0.9)
        assert match.is_unknown
        assert str(match) == "unknown (0.9)"


class TestFaceMatcher:
    """Test cases for FaceMatcher."""

    def test_nearest_identity(self, matcher):
        match = matcher.find_best_match(_vec(0.1, 0, 0, 0))
        assert match.label == "black-widow"
        assert match.distance == pytest.approx(0.1)

    def test_other_identity(self, matcher):
        match = matcher.find_best_match(_vec(1, 1, 1, 0.8))
        assert match.label == "captain-america"

    def test_beyond_threshold_is_unknown(self, matcher):
        match = matcher.find_best_match(_vec(0.5, 0.5, 0.5, 0.5))
        assert match.label == UNKNOWN_LABEL
        assert match.distance == pytest.approx(1.0)

    def test_threshold_is_exclusive(self):
        m = FaceMatcher([LabeledDescriptors("a", [_vec(0, 0)])], distance_threshold=0.5)
        assert m.find_best_match(_vec(0.5, 0)).is_unknown

    def test_mean_distance_over_descriptors(self):
        m = FaceMatcher([LabeledDescriptors("a", [_vec(0, 0), _vec(0, 0.4)])], distance_threshold=0.6)
        match = m.find_best_match(_vec(0, 0.2))
        assert match.distance == pytest.approx(0.2)

    def test_default_threshold_from_config(self):
        m = FaceMatcher([LabeledDescriptors("a", [_vec(0, 0)])])
        assert m.distance_threshold == 0.6

    def test_requires_identities(self):
        with pytest.raises(ValueError):
            FaceMatcher([])

    def test_labeled_descriptors_require_descriptor(self):
        with pytest.raises(ValueError):
            LabeledDescriptors("empty", [])

    def test_labels(self, matcher):
        assert matcher.labels == ["black-widow", "captain-america"]


class TestEmbeddingBackends:
    """Test cases for descriptor backend helpers."""

    def test_euclidean_distance(self):
        assert BaseEmbeddingBackend.distance(_vec(0, 0), _vec(3, 4)) == pytest.approx(5.0)

    def test_crop_face_adds_margin_within_bounds(self):
        image = np.zeros((100, 100, 3), dtype=np.uint8)
        crop = crop_face(image, DetectedFace(x=0, y=40, width=50, height=50))
        assert crop.shape == (70, 60, 3)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_embedding_backend("invalid_backend")

    def test_known_backends_are_lazy(self):
        backend = create_embedding_backend("opencv_dnn")
        assert backend.name == "opencv_dnn"
        assert backend.embedding_dim == 128


class TestReferenceLoading:
    """Test cases for reference identity loading."""

    @pytest.fixture
    def reference_images(self, tmp_path):
        paths = {}
        for name in ("black-widow", "captain-america"):
            path = tmp_path / f"{name}.png"
            cv2.imwrite(str(path), np.full((120, 100, 3), 128, dtype=np.uint8))
            paths[name] = str(path)
        return [{"name": n, "path": p} for n, p in paths.items()]

    def test_loads_one_descriptor_per_identity(self, reference_images):
        detector = StubDetector([DetectedFace(x=10, y=10, width=50, height=50)])
        backend = StubEmbeddingBackend({10: _vec(1, 2, 3, 4)})

        labeled = load_labeled_descriptors(reference_images, detector, backend)

        assert [ld.label for ld in labeled] == ["black-widow", "captain-america"]
        np.testing.assert_array_equal(labeled[0].descriptors[0], _vec(1, 2, 3, 4))

    def test_no_face_is_an_error(self, reference_images):
        with pytest.raises(ReferenceLoadError, match="No face detected in black-widow"):
            load_labeled_descriptors(reference_images, StubDetector([]), StubEmbeddingBackend({}))

    def test_missing_image_is_an_error(self, tmp_path):
        items = [{"name": "ghost", "path": str(tmp_path / "missing.jpeg")}]
        with pytest.raises(ReferenceLoadError, match="ghost"):
            load_labeled_descriptors(items, StubDetector([]), StubEmbeddingBackend({}))


class TestFaceLabeler:
    """Test cases for end-to-end face labeling."""

    def test_labels_each_face(self, matcher, sample_image):
        faces = [
            DetectedFace(x=10, y=20, width=40, height=40, confidence=0.9),
            DetectedFace(x=200, y=20, width=40, height=40, confidence=0.8),
            DetectedFace(x=300, y=20, width=40, height=40, confidence=0.7),
        ]
        backend = StubEmbeddingBackend({
            10: _vec(0, 0, 0, 0.1),
            200: _vec(1, 1, 1, 1),
            300: _vec(5, 5, 5, 5),
        })
        labeler = FaceLabeler(StubDetector(faces), backend, matcher)

        results = labeler.label(sample_image)

        assert [r.label for r in results] == [
            "black-widow (0.1)",
            "captain-america (0.0)",
            "unknown (8.0)",
        ]
        assert results[0].bounding_box.to_dict() == {"x": 10.0, "y": 20.0, "width": 40.0, "height": 40.0}

    def test_face_without_descriptor_is_unknown(self, matcher, sample_image):
        labeler = FaceLabeler(
            StubDetector([DetectedFace(x=1, y=1, width=10, height=10)]),
            StubEmbeddingBackend({}),
            matcher,
        )
        result = labeler.label(sample_image)[0]
        assert result.match is None
        assert result.to_dict()["identity"] == UNKNOWN_LABEL

    def test_from_config(self, tmp_path):
        path = tmp_path / "ref.png"
        cv2.imwrite(str(path), np.zeros((50, 50, 3), dtype=np.uint8))

        from facecrop.constants import RecognitionConfig
        config = RecognitionConfig(
            distance_threshold=0.4,
            labeled_images=[{"name": "someone", "path": str(path)}],
        )
        labeler = FaceLabeler.from_config(
            config,
            detector=StubDetector([DetectedFace(x=5, y=5, width=20, height=20)]),
            backend=StubEmbeddingBackend({5: _vec(0, 0, 0, 0)}),
        )

        assert labeler.identities == ["someone"]
        assert labeler.matcher.distance_threshold == 0.4
