"""Dlib face descriptor backend."""

import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from .base import BaseEmbeddingBackend

logger = logging.getLogger(__name__)


class DlibEmbeddingBackend(BaseEmbeddingBackend):
    """Face descriptors from dlib's ResNet face recognition model (128D).

    Descriptors of the same person sit within ~0.6 Euclidean distance.
    """

    MODEL_FILENAME = "dlib_face_recognition_resnet_model_v1.dat"
    PREDICTOR_FILENAMES = (
        "shape_predictor_68_face_landmarks.dat",
        "shape_predictor_5_face_landmarks.dat",
    )

    def __init__(self, model_path: Optional[str] = None, predictor_path: Optional[str] = None):
        """Initialize dlib embedding backend.

        Args:
            model_path: Path to dlib_face_recognition_resnet_model_v1.dat
                       If None, will try default locations
            predictor_path: Path to a dlib shape predictor
        """
        self._face_rec = None
        self._shape_predictor = None
        self._model_path = model_path
        self._predictor_path = predictor_path
        self._initialized = False

    @property
    def name(self) -> str:
        return "dlib"

    @property
    def embedding_dim(self) -> int:
        return 128

    @staticmethod
    def _find(candidates) -> Optional[str]:
        for loc in candidates:
            if loc and Path(str(loc)).exists():
                return str(loc)
        return None

    def _initialize(self) -> None:
        """Lazy initialization of dlib models."""
        if self._initialized:
            return
        import dlib

        model_file = self._find([
            self._model_path,
            Path("data/models/face_recognition") / self.MODEL_FILENAME,
            Path.home() / ".dlib" / self.MODEL_FILENAME,
        ])
        if not model_file:
            raise RuntimeError(
                "dlib face recognition model not found. "
                "Download from: http://dlib.net/files/dlib_face_recognition_resnet_model_v1.dat.bz2"
            )

        predictor_candidates = [self._predictor_path]
        for filename in self.PREDICTOR_FILENAMES:
            predictor_candidates.append(Path("data/models/face_recognition") / filename)
            predictor_candidates.append(Path.home() / ".dlib" / filename)
        predictor_file = self._find(predictor_candidates)
        if not predictor_file:
            raise RuntimeError("dlib shape predictor not found")

        self._face_rec = dlib.face_recognition_model_v1(model_file)
        self._shape_predictor = dlib.shape_predictor(predictor_file)
        self._initialized = True
        logger.info(f"Loaded dlib face recognition model from {model_file}")

    def extract(self, face_image: np.ndarray) -> Optional[np.ndarray]:
        """Extract 128D descriptor using dlib.

        Args:
            face_image: BGR face image (already cropped)

        Returns:
            128D descriptor vector
        """
        self._initialize()
        import dlib

        rgb = cv2.cvtColor(face_image, cv2.COLOR_BGR2RGB)
        h, w = rgb.shape[:2]
        shape = self._shape_predictor(rgb, dlib.rectangle(0, 0, w, h))
        descriptor = self._face_rec.compute_face_descriptor(rgb, shape)
        return np.array(descriptor)
