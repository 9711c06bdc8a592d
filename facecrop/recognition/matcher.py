"""Nearest-identity matching over face descriptors."""

import logging
from typing import Iterable, List, Optional

import numpy as np

from .embeddings.base import BaseEmbeddingBackend
from .types import UNKNOWN_LABEL, FaceMatch, LabeledDescriptors
from ..constants import get_recognition_config

logger = logging.getLogger(__name__)


class FaceMatcher:
    """Match descriptors against labeled reference descriptors.

    The distance to an identity is the mean Euclidean distance to each of
    its reference descriptors. A descriptor whose best distance is not
    below the threshold is labeled ``unknown``.
    """

    def __init__(
        self,
        labeled_descriptors: Iterable[LabeledDescriptors],
        distance_threshold: Optional[float] = None,
    ):
        self.labeled_descriptors: List[LabeledDescriptors] = list(labeled_descriptors)
        if not self.labeled_descriptors:
            raise ValueError("FaceMatcher needs at least one labeled identity")

        if distance_threshold is None:
            distance_threshold = get_recognition_config().distance_threshold
        self.distance_threshold = distance_threshold

    @property
    def labels(self) -> List[str]:
        return [ld.label for ld in self.labeled_descriptors]

    def compute_mean_distance(self, query: np.ndarray, descriptors: List[np.ndarray]) -> float:
        distances = [BaseEmbeddingBackend.distance(query, d) for d in descriptors]
        return float(np.mean(distances))

    def match_descriptor(self, query: np.ndarray) -> FaceMatch:
        """Return the nearest identity regardless of threshold."""
        matches = [
            FaceMatch(ld.label, self.compute_mean_distance(query, ld.descriptors))
            for ld in self.labeled_descriptors
        ]
        return min(matches, key=lambda m: m.distance)

    def find_best_match(self, query: np.ndarray) -> FaceMatch:
        """Return the nearest identity, or ``unknown`` beyond the threshold."""
        best = self.match_descriptor(query)
        if best.distance < self.distance_threshold:
            return best
        logger.debug(f"Closest identity {best.label} at {best.distance:.3f} is beyond threshold")
        return FaceMatch(UNKNOWN_LABEL, best.distance)
