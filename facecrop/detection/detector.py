"""Unified face detector with configurable backend."""

from typing import List, Optional

import numpy as np

from .base import BaseFaceDetector
from .haar import HaarCascadeDetector
from .opencv_dnn import OpenCVDNNDetector
from .types import DetectedFace
from ..constants import get_detection_config


class FaceDetector(BaseFaceDetector):
    """Main face detector class with configurable backend.

    Default backend is opencv_dnn, the closest match to a small
    pretrained single-shot detector.
    """

    BACKENDS = {
        "haar_cascade": HaarCascadeDetector,
        "opencv_dnn": OpenCVDNNDetector,
    }

    def __init__(self, backend: Optional[str] = None, **kwargs):
        """Initialize face detector with specified backend.

        Args:
            backend: Detection backend to use (config default if None)
            **kwargs: Additional arguments for the detector
        """
        backend = backend or get_detection_config().backend
        if backend not in self.BACKENDS:
            raise ValueError(
                f"Unknown backend: {backend}. "
                f"Available: {list(self.BACKENDS.keys())}"
            )

        self.backend_name = backend
        self.detector = self.BACKENDS[backend](**kwargs)

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces in an image."""
        return self.detector.detect(image)

    @classmethod
    def available_backends(cls) -> List[str]:
        """Return list of available detection backends."""
        return list(cls.BACKENDS.keys())
