"""Face recognition: descriptors, reference identities and matching."""

from .types import UNKNOWN_LABEL, FaceDetectionResult, FaceMatch, LabeledDescriptors
from .matcher import FaceMatcher
from .references import ReferenceLoadError, load_labeled_descriptors
from .recognizer import FaceLabeler
from .embeddings import (
    BaseEmbeddingBackend,
    DlibEmbeddingBackend,
    OpenCVDNNEmbeddingBackend,
    EMBEDDING_BACKENDS,
    create_embedding_backend,
)

__all__ = [
    "UNKNOWN_LABEL",
    "FaceDetectionResult",
    "FaceMatch",
    "LabeledDescriptors",
    "FaceMatcher",
    "ReferenceLoadError",
    "load_labeled_descriptors",
    "FaceLabeler",
    "BaseEmbeddingBackend",
    "DlibEmbeddingBackend",
    "OpenCVDNNEmbeddingBackend",
    "EMBEDDING_BACKENDS",
    "create_embedding_backend",
]
