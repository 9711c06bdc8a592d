"""Tests for the command line interface."""

import json

import cv2
import numpy as np
import pytest

from conftest import StubDetector, StubEmbeddingBackend
from facecrop import cli
from facecrop.cloud import set_rekognition_client
from facecrop.constants import get_recognition_config
from facecrop.detection import DetectedFace
from facecrop.recognition import FaceLabeler, FaceMatcher, LabeledDescriptors, ReferenceLoadError


@pytest.fixture
def image_path(tmp_path, sample_image):
    path = tmp_path / "photo.png"
    cv2.imwrite(str(path), sample_image)
    return path


@pytest.fixture
def stub_detector(monkeypatch):
    detector = StubDetector([DetectedFace(x=150, y=100, width=50, height=50)])
    monkeypatch.setattr("facecrop.detection.FaceDetector", lambda backend=None: detector)
    return detector


class TestCropCommand:
    """Test cases for `facecrop crop`."""

    def test_writes_png(self, tmp_path, image_path, stub_detector):
        output = tmp_path / "out.png"

        with pytest.raises(SystemExit) as exc:
            cli.main(["crop", "--image", str(image_path), "--aspect", "4:5", "--output", str(output)])

        assert exc.value.code == 0
        assert stub_detector.calls == 1
        assert cv2.imread(str(output)).shape == (100, 80, 3)

    def test_invalid_aspect(self, tmp_path, image_path, stub_detector):
        with pytest.raises(SystemExit) as exc:
            cli.main(["crop", "--image", str(image_path), "--aspect", "wide", "--output", str(tmp_path / "x.png")])

        assert exc.value.code == 2
        assert stub_detector.calls == 0

    def test_missing_image(self, tmp_path, stub_detector):
        with pytest.raises(SystemExit) as exc:
            cli.main(["crop", "--image", str(tmp_path / "missing.jpg")])
        assert exc.value.code == 1


class TestDetectCommand:
    """Test cases for `facecrop detect`."""

    def test_draws_boxes(self, tmp_path, image_path, stub_detector):
        output = tmp_path / "boxes.png"

        with pytest.raises(SystemExit) as exc:
            cli.main(["detect", "--image", str(image_path), "--output", str(output)])

        assert exc.value.code == 0
        assert output.exists()


class TestParser:
    """Test cases for argument parsing."""

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main([])
        assert exc.value.code == 0
        assert "usage" in capsys.readouterr().out

    def test_crop_defaults(self):
        args = cli.build_parser().parse_args(["crop", "--image", "a.jpg"])
        assert args.output == "cropped-image.png"
        assert args.aspect is None

    def test_rejects_unknown_backend(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["detect", "--image", "a.jpg", "--backend", "mtcnn"])


class TestRecognizeCommand:
    """Test cases for `facecrop recognize`."""

    @pytest.fixture
    def captured(self, monkeypatch, stub_detector):
        configs = []

        def fake_from_config(cls, config=None, detector=None, backend=None):
            configs.append(config)
            matcher = FaceMatcher([LabeledDescriptors("someone", [np.zeros(4)])], config.distance_threshold)
            return cls(detector, StubEmbeddingBackend({150: np.zeros(4)}), matcher)

        monkeypatch.setattr(FaceLabeler, "from_config", classmethod(fake_from_config))
        return configs

    def test_threshold_does_not_change_shared_config(self, tmp_path, image_path, captured):
        output = tmp_path / "labeled.png"

        with pytest.raises(SystemExit) as exc:
            cli.main(["recognize", "--image", str(image_path), "--threshold", "0.3", "--output", str(output)])

        assert exc.value.code == 0
        assert captured[0].distance_threshold == 0.3
        assert get_recognition_config().distance_threshold == 0.6
        assert output.exists()

    def test_model_load_failure(self, monkeypatch, image_path, stub_detector):
        def failing_from_config(cls, *args, **kwargs):
            raise ReferenceLoadError("No face detected in black-widow")

        monkeypatch.setattr(FaceLabeler, "from_config", classmethod(failing_from_config))

        with pytest.raises(SystemExit) as exc:
            cli.main(["recognize", "--image", str(image_path)])
        assert exc.value.code == 1


class TestCloudDetectCommand:
    """Test cases for `facecrop cloud-detect`."""

    def test_prints_first_box(self, image_path, rekognition, capsys):
        client, stubber = rekognition
        set_rekognition_client(client)
        stubber.add_response(
            "detect_faces",
            {"FaceDetails": [{"BoundingBox": {"Left": 0.1, "Top": 0.2, "Width": 0.3, "Height": 0.4}}]},
        )

        with pytest.raises(SystemExit) as exc:
            cli.main(["cloud-detect", "--image", str(image_path)])

        assert exc.value.code == 0
        out = json.loads(capsys.readouterr().out)
        assert out["faceBoundingBox"] == {"x": 0.1, "y": 0.2, "width": 0.3, "height": 0.4}

    def test_service_error(self, image_path, rekognition):
        client, stubber = rekognition
        set_rekognition_client(client)
        stubber.add_client_error("detect_faces", service_error_code="InvalidImageFormatException")

        with pytest.raises(SystemExit) as exc:
            cli.main(["cloud-detect", "--image", str(image_path)])
        assert exc.value.code == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            cli.main(["cloud-detect", "--image", str(tmp_path / "missing.jpg")])
        assert exc.value.code == 1
