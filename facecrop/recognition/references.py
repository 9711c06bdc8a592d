"""Loading of the reference identities used for labeling."""

import logging
from pathlib import Path
from typing import Dict, Iterable, List

import cv2

from .embeddings.base import BaseEmbeddingBackend
from .types import LabeledDescriptors
from ..detection.base import BaseFaceDetector

logger = logging.getLogger(__name__)


class ReferenceLoadError(RuntimeError):
    """A reference identity could not be turned into a descriptor."""


def load_labeled_descriptors(
    labeled_images: Iterable[Dict[str, str]],
    detector: BaseFaceDetector,
    backend: BaseEmbeddingBackend,
) -> List[LabeledDescriptors]:
    """Compute one reference descriptor per labeled image.

    Args:
        labeled_images: Items with ``name`` and ``path`` keys
        detector: Detector used to locate the face in each image
        backend: Descriptor backend

    Raises:
        ReferenceLoadError: If any image is unreadable or holds no face.
    """
    result = []
    for item in labeled_images:
        name = item["name"]
        path = Path(item["path"])

        image = cv2.imread(str(path))
        if image is None:
            raise ReferenceLoadError(f"Could not load reference image for {name}: {path}")

        faces = detector.detect(image)
        if not faces:
            raise ReferenceLoadError(f"No face detected in {name}")

        face = max(faces, key=lambda f: (f.confidence, f.area))
        descriptor = backend.describe(image, face)
        if descriptor is None:
            raise ReferenceLoadError(f"Could not compute descriptor for {name}")

        result.append(LabeledDescriptors(name, [descriptor]))
        logger.info(f"Loaded reference identity {name} from {path}")

    return result
