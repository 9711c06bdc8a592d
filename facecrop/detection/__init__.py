"""Face detection backends.

Available backends:
- haar_cascade: Fast, lightweight OpenCV Haar Cascades
- opencv_dnn: SSD ResNet, good balance of speed/accuracy (default)
"""

from .types import BoundingBox, DetectedFace
from .base import BaseFaceDetector
from .haar import HaarCascadeDetector
from .opencv_dnn import OpenCVDNNDetector
from .detector import FaceDetector

DETECTION_BACKENDS = FaceDetector.BACKENDS

__all__ = [
    "BoundingBox",
    "DetectedFace",
    "BaseFaceDetector",
    "HaarCascadeDetector",
    "OpenCVDNNDetector",
    "FaceDetector",
    "DETECTION_BACKENDS",
]
