"""Face labeling: detection, descriptors and identity matching."""

import logging
from typing import List, Optional

import numpy as np

from .embeddings import BaseEmbeddingBackend, create_embedding_backend
from .matcher import FaceMatcher
from .references import load_labeled_descriptors
from .types import FaceDetectionResult
from ..constants import RecognitionConfig, get_recognition_config
from ..detection import BaseFaceDetector, FaceDetector

logger = logging.getLogger(__name__)


class FaceLabeler:
    """Detects every face in an image and labels it with the nearest identity."""

    def __init__(
        self,
        detector: BaseFaceDetector,
        backend: BaseEmbeddingBackend,
        matcher: FaceMatcher,
    ):
        self.detector = detector
        self.backend = backend
        self.matcher = matcher

    @property
    def identities(self) -> List[str]:
        return self.matcher.labels

    def label(self, image: np.ndarray) -> List[FaceDetectionResult]:
        """Detect, describe and match all faces in a BGR image."""
        results = []
        for face in self.detector.detect(image):
            descriptor = self.backend.describe(image, face)
            match = self.matcher.find_best_match(descriptor) if descriptor is not None else None
            results.append(FaceDetectionResult(face.box, descriptor, match))

        logger.info(f"Labeled {len(results)} face(s): {[r.label for r in results]}")
        return results

    @classmethod
    def from_config(
        cls,
        config: Optional[RecognitionConfig] = None,
        detector: Optional[BaseFaceDetector] = None,
        backend: Optional[BaseEmbeddingBackend] = None,
    ) -> "FaceLabeler":
        """Build a labeler, loading the configured reference identities.

        Raises:
            ReferenceLoadError: If a reference image cannot be described.
        """
        config = config or get_recognition_config()
        detector = detector or FaceDetector()
        backend = backend or create_embedding_backend(config.embedding_backend)

        labeled = load_labeled_descriptors(config.labeled_images, detector, backend)
        matcher = FaceMatcher(labeled, config.distance_threshold)
        return cls(detector, backend, matcher)
