"""Centralized constants and configuration loader.

This module provides access to configuration values and sensible defaults
for all processing constants used throughout the application. Values are
loaded from config/config.yaml when available, otherwise defaults are used.
AWS settings are read from the process environment.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"

# Aspect ratio presets offered to users
ASPECT_PRESETS: Dict[str, float] = {
    "1:1": 1.0,
    "4:5": 0.8,
    "16:9": 16 / 9,
}

DEFAULT_LABELED_IMAGES: List[Dict[str, str]] = [
    {"name": "black-widow", "path": "data/labeled-images/black-widow.jpeg"},
    {"name": "captain-america", "path": "data/labeled-images/captain-america.jpeg"},
]


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Uses default if None.

    Returns:
        Configuration dictionary.
    """
    path = config_path or DEFAULT_CONFIG_PATH

    try:
        if path.exists():
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load config from {path}: {e}")

    return {}


def _get_nested(config: Dict, *keys: str, default: Any = None) -> Any:
    """Get nested config value with default fallback."""
    value = config
    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
        else:
            return default
        if value is None:
            return default
    return value


# ============================================================
# Crop Constants
# ============================================================

@dataclass
class CropConfig:
    """Crop derivation constants."""
    # Crop size relative to the face box along the dominant axis
    face_scale: float = 2.0
    # Aspect ratio used when the caller does not pick one
    default_aspect: str = "1:1"
    # Filename offered for downloads
    download_filename: str = "cropped-image.png"

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "CropConfig":
        """Create from config dictionary."""
        crop = _get_nested(config, "crop") or {}

        return cls(
            face_scale=float(crop.get("face_scale", 2.0)),
            default_aspect=str(crop.get("default_aspect", "1:1")),
            download_filename=crop.get("download_filename", "cropped-image.png"),
        )


# ============================================================
# Detection Constants
# ============================================================

@dataclass
class DetectionConfig:
    """Face detection constants."""
    backend: str = "opencv_dnn"
    # SSD detector
    input_size: Tuple[int, int] = (300, 300)
    mean_values: Tuple[float, float, float] = (104.0, 177.0, 123.0)
    confidence_threshold: float = 0.5
    nms_threshold: float = 0.3
    min_face_size: Tuple[int, int] = (20, 20)
    # Haar cascade
    haar_scale_factor: float = 1.1
    haar_min_neighbors: int = 5

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DetectionConfig":
        """Create from config dictionary."""
        det = _get_nested(config, "detection") or {}
        haar = det.get("haar", {})

        return cls(
            backend=det.get("backend", "opencv_dnn"),
            input_size=tuple(det.get("input_size", [300, 300])),
            mean_values=tuple(det.get("mean_values", [104.0, 177.0, 123.0])),
            confidence_threshold=det.get("confidence_threshold", 0.5),
            nms_threshold=det.get("nms_threshold", 0.3),
            min_face_size=tuple(det.get("min_face_size", [20, 20])),
            haar_scale_factor=haar.get("scale_factor", 1.1),
            haar_min_neighbors=haar.get("min_neighbors", 5),
        )


# ============================================================
# Recognition Constants
# ============================================================

@dataclass
class RecognitionConfig:
    """Identity matching constants."""
    embedding_backend: str = "dlib"
    # Euclidean distance below which a descriptor matches an identity
    distance_threshold: float = 0.6
    labeled_images: List[Dict[str, str]] = field(
        default_factory=lambda: [dict(item) for item in DEFAULT_LABELED_IMAGES]
    )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RecognitionConfig":
        """Create from config dictionary."""
        rec = _get_nested(config, "recognition") or {}
        labeled = rec.get("labeled_images") or DEFAULT_LABELED_IMAGES

        return cls(
            embedding_backend=rec.get("embedding_backend", "dlib"),
            distance_threshold=rec.get("distance_threshold", 0.6),
            labeled_images=[dict(item) for item in labeled],
        )


# ============================================================
# API Constants
# ============================================================

@dataclass
class ApiConfig:
    """HTTP server constants."""
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ApiConfig":
        """Create from config dictionary."""
        api = _get_nested(config, "api") or {}

        return cls(
            host=api.get("host", "0.0.0.0"),
            port=int(api.get("port", 8000)),
            cors_origins=list(api.get("cors_origins", ["*"])),
        )


@dataclass
class RekognitionConfig:
    """AWS Rekognition client settings, read from the environment."""
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None

    @classmethod
    def from_env(cls) -> "RekognitionConfig":
        """Create from AWS_* environment variables."""
        return cls(
            region=os.environ.get("AWS_REGION"),
            access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
            secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
        )


# ============================================================
# Global Config Instance (lazy loaded)
# ============================================================

class Config:
    """Global configuration singleton."""

    _instance: Optional["Config"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._load()
        return cls._instance

    def _load(self) -> None:
        """Load configuration from file."""
        self._config = load_config()
        self._reset()

    def _reset(self) -> None:
        self._crop: Optional[CropConfig] = None
        self._detection: Optional[DetectionConfig] = None
        self._recognition: Optional[RecognitionConfig] = None
        self._api: Optional[ApiConfig] = None

    def reload(self, config_path: Optional[Path] = None) -> None:
        """Reload configuration from file."""
        self._config = load_config(config_path)
        self._reset()

    @property
    def crop(self) -> CropConfig:
        """Get crop config."""
        if self._crop is None:
            self._crop = CropConfig.from_config(self._config)
        return self._crop

    @property
    def detection(self) -> DetectionConfig:
        """Get detection config."""
        if self._detection is None:
            self._detection = DetectionConfig.from_config(self._config)
        return self._detection

    @property
    def recognition(self) -> RecognitionConfig:
        """Get recognition config."""
        if self._recognition is None:
            self._recognition = RecognitionConfig.from_config(self._config)
        return self._recognition

    @property
    def api(self) -> ApiConfig:
        """Get API config."""
        if self._api is None:
            self._api = ApiConfig.from_config(self._config)
        return self._api

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a config value by key path."""
        return _get_nested(self._config, *keys, default=default)


def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()


# Convenience accessors
def get_crop_config() -> CropConfig:
    """Get crop configuration."""
    return get_config().crop


def get_detection_config() -> DetectionConfig:
    """Get detection configuration."""
    return get_config().detection


def get_recognition_config() -> RecognitionConfig:
    """Get recognition configuration."""
    return get_config().recognition


def get_api_config() -> ApiConfig:
    """Get API configuration."""
    return get_config().api
