"""Face descriptor backends."""

from .base import BaseEmbeddingBackend, crop_face
from .dlib import DlibEmbeddingBackend
from .opencv_dnn import OpenCVDNNEmbeddingBackend

EMBEDDING_BACKENDS = {
    "dlib": DlibEmbeddingBackend,
    "opencv_dnn": OpenCVDNNEmbeddingBackend,
}


def create_embedding_backend(name: str, **kwargs) -> BaseEmbeddingBackend:
    """Instantiate a descriptor backend by name."""
    if name not in EMBEDDING_BACKENDS:
        raise ValueError(
            f"Unknown embedding backend: {name}. "
            f"Available: {list(EMBEDDING_BACKENDS.keys())}"
        )
    return EMBEDDING_BACKENDS[name](**kwargs)


__all__ = [
    "BaseEmbeddingBackend",
    "DlibEmbeddingBackend",
    "OpenCVDNNEmbeddingBackend",
    "EMBEDDING_BACKENDS",
    "create_embedding_backend",
    "crop_face",
]
