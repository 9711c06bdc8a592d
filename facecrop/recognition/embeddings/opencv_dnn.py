"""OpenCV DNN face descriptor backend using OpenFace."""

import logging
import urllib.request
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from .base import BaseEmbeddingBackend

logger = logging.getLogger(__name__)


class OpenCVDNNEmbeddingBackend(BaseEmbeddingBackend):
    """Face descriptors from the OpenFace model via OpenCV DNN (128D, unit length)."""

    MODEL_URL = (
        "https://raw.githubusercontent.com/pyannote/pyannote-data/master/openface.nn4.small2.v1.t7"
    )
    MODEL_FILENAME = "openface_nn4.small2.v1.t7"
    INPUT_SIZE = (96, 96)

    def __init__(self, model_path: Optional[str] = None):
        """Initialize OpenCV DNN embedding backend.

        Args:
            model_path: Path to OpenFace model file (.t7)
                       If None, will try the default location or download
        """
        self._net = None
        self._model_path = model_path

    @property
    def name(self) -> str:
        return "opencv_dnn"

    @property
    def embedding_dim(self) -> int:
        return 128

    def _initialize(self) -> None:
        """Lazy initialization of OpenFace model."""
        if self._net is not None:
            return

        model_file = Path(self._model_path) if self._model_path else (
            Path("data/models/face_recognition") / self.MODEL_FILENAME
        )
        if not model_file.exists():
            model_file.parent.mkdir(parents=True, exist_ok=True)
            logger.info(f"Downloading OpenFace model to {model_file}...")
            try:
                urllib.request.urlretrieve(self.MODEL_URL, str(model_file))
            except OSError as e:
                raise RuntimeError(f"Failed to download OpenFace model: {e}") from e

        self._net = cv2.dnn.readNetFromTorch(str(model_file))
        logger.info(f"Loaded OpenFace model from {model_file}")

    def extract(self, face_image: np.ndarray) -> Optional[np.ndarray]:
        """Extract 128D descriptor using OpenFace."""
        self._initialize()

        blob = cv2.dnn.blobFromImage(
            face_image,
            scalefactor=1.0 / 255,
            size=self.INPUT_SIZE,
            mean=(0, 0, 0),
            swapRB=True,
            crop=False,
        )
        self._net.setInput(blob)
        descriptor = self._net.forward().flatten()

        norm = np.linalg.norm(descriptor)
        if norm > 0:
            descriptor = descriptor / norm
        return descriptor
