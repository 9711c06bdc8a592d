"""Tests for face detection backends and types."""

import numpy as np
import pytest

from conftest import StubDetector
from facecrop.detection import (
    DETECTION_BACKENDS,
    BoundingBox,
    DetectedFace,
    FaceDetector,
    HaarCascadeDetector,
)


class TestBoundingBox:
    """Test cases for BoundingBox."""

    def test_center(self):
        assert BoundingBox(10, 20, 30, 40).center == (25, 40)

    def test_normalized_round_trip(self):
        box = BoundingBox(200, 120, 160, 200)
        normalized = box.to_normalized(640, 480)

        assert normalized.x == pytest.approx(0.3125)
        assert normalized.height == pytest.approx(200 / 480)

        back = normalized.to_pixels(640, 480)
        assert (back.x, back.y, back.width, back.height) == pytest.approx((200, 120, 160, 200))

    def test_normalize_rejects_empty_image(self):
        with pytest.raises(ValueError):
            BoundingBox(0, 0, 1, 1).to_normalized(0, 10)


class TestDetectedFace:
    """Test cases for DetectedFace."""

    def test_box_and_area(self):
        face = DetectedFace(x=5, y=6, width=7, height=8, confidence=0.9)

        assert face.bbox == (5, 6, 7, 8)
        assert face.box == BoundingBox(5.0, 6.0, 7.0, 8.0)
        assert face.area == 56


class TestFaceDetector:
    """Test cases for the backend-selecting detector."""

    def test_invalid_backend(self):
        with pytest.raises(ValueError):
            FaceDetector(backend="invalid_backend")

    def test_available_backends(self):
        assert set(FaceDetector.available_backends()) == {"haar_cascade", "opencv_dnn"}
        assert set(DETECTION_BACKENDS) == set(FaceDetector.available_backends())

    def test_haar_blank_image_has_no_faces(self):
        detector = FaceDetector(backend="haar_cascade")

        assert detector.backend_name == "haar_cascade"
        assert isinstance(detector.detector, HaarCascadeDetector)
        assert detector.detect(np.zeros((200, 200, 3), dtype=np.uint8)) == []

    def test_detect_delegates_to_backend(self):
        detector = FaceDetector(backend="haar_cascade")
        detector.detector = StubDetector([DetectedFace(x=50, y=0, width=40, height=40)])

        faces = detector.detect(np.zeros((10, 10, 3), dtype=np.uint8))

        assert [f.bbox for f in faces] == [(50, 0, 40, 40)]
        assert detector.detector.calls == 1
