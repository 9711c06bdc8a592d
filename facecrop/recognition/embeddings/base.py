"""Base class for face descriptor backends."""

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from ...detection.types import DetectedFace

# Margin added around the face box before descriptor extraction
FACE_MARGIN = 0.2


def crop_face(image: np.ndarray, face: DetectedFace, margin: float = FACE_MARGIN) -> np.ndarray:
    """Crop a face from the image with a margin around it."""
    x, y, w, h = face.bbox
    margin_w = int(w * margin)
    margin_h = int(h * margin)
    x1 = max(0, x - margin_w)
    y1 = max(0, y - margin_h)
    x2 = min(image.shape[1], x + w + margin_w)
    y2 = min(image.shape[0], y + h + margin_h)
    return image[y1:y2, x1:x2]


class BaseEmbeddingBackend(ABC):
    """Abstract base class for face descriptor extraction."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of the embedding backend."""
        pass

    @property
    @abstractmethod
    def embedding_dim(self) -> int:
        """Return the dimensionality of the descriptor vector."""
        pass

    @abstractmethod
    def extract(self, face_image: np.ndarray) -> Optional[np.ndarray]:
        """Extract a descriptor from a face image.

        Args:
            face_image: BGR face image (cropped)

        Returns:
            Descriptor vector as numpy array, or None if extraction failed
        """
        pass

    def describe(self, image: np.ndarray, face: DetectedFace) -> Optional[np.ndarray]:
        """Extract the descriptor of a detected face in a full image."""
        face_image = crop_face(image, face)
        if face_image.size == 0:
            return None
        return self.extract(face_image)

    @staticmethod
    def distance(descriptor1: np.ndarray, descriptor2: np.ndarray) -> float:
        """Euclidean distance between two descriptors (lower is closer)."""
        return float(np.linalg.norm(np.asarray(descriptor1).ravel() - np.asarray(descriptor2).ravel()))
