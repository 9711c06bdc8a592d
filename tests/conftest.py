"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from typing import Dict, List, Optional

import boto3
import cv2
import numpy as np
import pytest
from botocore.stub import Stubber

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from facecrop import api, cloud  # noqa: E402
from facecrop.detection import BaseFaceDetector, DetectedFace  # noqa: E402
from facecrop.recognition import BaseEmbeddingBackend  # noqa: E402


class StubDetector(BaseFaceDetector):
    """Detector returning a fixed list of faces."""

    def __init__(self, faces: Optional[List[DetectedFace]] = None):
        self.faces = list(faces or [])
        self.backend_name = "stub"
        self.calls = 0

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        self.calls += 1
        return list(self.faces)


class StubEmbeddingBackend(BaseEmbeddingBackend):
    """Descriptor backend that looks descriptors up by face x position."""

    def __init__(self, descriptors: Dict[int, np.ndarray]):
        self.descriptors = descriptors

    @property
    def name(self) -> str:
        return "stub"

    @property
    def embedding_dim(self) -> int:
        return 4

    def extract(self, face_image: np.ndarray) -> Optional[np.ndarray]:
        return np.zeros(self.embedding_dim)

    def describe(self, image: np.ndarray, face: DetectedFace) -> Optional[np.ndarray]:
        return self.descriptors.get(face.x)


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset module-level service handles between tests."""
    yield
    api.set_detector(None)
    api.set_labeler(None)
    cloud.set_rekognition_client(None)


@pytest.fixture
def sample_image():
    """Create a sample test image (height 300, width 400)."""
    return np.random.randint(0, 255, (300, 400, 3), dtype=np.uint8)


@pytest.fixture
def png_bytes(sample_image):
    """The sample image encoded as PNG."""
    ok, buffer = cv2.imencode(".png", sample_image)
    assert ok
    return buffer.tobytes()


@pytest.fixture
def rekognition():
    """Real boto3 Rekognition client with a botocore Stubber attached."""
    client = boto3.client(
        "rekognition",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber
