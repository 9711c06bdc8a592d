"""Haar Cascade face detector."""

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .base import BaseFaceDetector
from .types import DetectedFace
from ..constants import get_detection_config

logger = logging.getLogger(__name__)


class HaarCascadeDetector(BaseFaceDetector):
    """Face detector using OpenCV Haar Cascades.

    Ships with OpenCV, so it needs no model download.
    """

    def __init__(
        self,
        scale_factor: Optional[float] = None,
        min_neighbors: Optional[int] = None,
        min_size: Optional[Tuple[int, int]] = None,
    ):
        """Initialize Haar Cascade detector.

        Args:
            scale_factor: Scale factor for multi-scale detection
            min_neighbors: Minimum neighbors for detection
            min_size: Minimum face size to detect
        """
        config = get_detection_config()
        self.scale_factor = scale_factor if scale_factor is not None else config.haar_scale_factor
        self.min_neighbors = min_neighbors if min_neighbors is not None else config.haar_min_neighbors
        self.min_size = min_size if min_size is not None else config.min_face_size

        cascade_path = cv2.data.haarcascades + "haarcascade_frontalface_default.xml"  # type: ignore
        self.cascade = cv2.CascadeClassifier(cascade_path)

        if self.cascade.empty():
            raise RuntimeError(f"Failed to load cascade from {cascade_path}")
        logger.info("Initialized Haar cascade face detector")

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces using Haar Cascade."""
        if len(image.shape) == 3:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        else:
            gray = image

        faces = self.cascade.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=tuple(self.min_size),
        )

        return [
            DetectedFace(x=int(x), y=int(y), width=int(w), height=int(h))
            for (x, y, w, h) in faces
        ]
