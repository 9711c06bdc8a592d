"""OpenCV DNN face detector."""

import logging
import urllib.request
from pathlib import Path
from typing import List, Optional, Tuple, Union

import cv2
import numpy as np

from .base import BaseFaceDetector
from .types import DetectedFace
from ..constants import get_detection_config

logger = logging.getLogger(__name__)

DEFAULT_MODEL_DIR = Path("data") / "models" / "face_detection"


class OpenCVDNNDetector(BaseFaceDetector):
    """Face detector using OpenCV DNN module with pre-trained SSD model.

    Pros: Good accuracy, comes with OpenCV, no extra dependencies
    Cons: Needs model files (auto-downloads)
    """

    MODEL_URL = "https://raw.githubusercontent.com/opencv/opencv_3rdparty/dnn_samples_face_detector_20170830/res10_300x300_ssd_iter_140000.caffemodel"
    CONFIG_URL = "https://raw.githubusercontent.com/opencv/opencv/master/samples/dnn/face_detector/deploy.prototxt"

    def __init__(
        self,
        confidence_threshold: Optional[float] = None,
        model_path: Optional[Union[str, Path]] = None,
        config_path: Optional[Union[str, Path]] = None,
        input_size: Optional[Tuple[int, int]] = None,
        nms_threshold: Optional[float] = None,
    ):
        """Initialize OpenCV DNN face detector.

        Args:
            confidence_threshold: Minimum confidence for detections (uses config default if None)
            model_path: Path to model file
            config_path: Path to prototxt file
            input_size: Input size for the network (uses config default if None)
            nms_threshold: Non-maximum suppression threshold (uses config default if None)
        """
        det_config = get_detection_config()
        self.confidence_threshold = confidence_threshold if confidence_threshold is not None else det_config.confidence_threshold
        self.input_size = input_size if input_size is not None else det_config.input_size
        self.nms_threshold = nms_threshold if nms_threshold is not None else det_config.nms_threshold
        self._config = det_config

        self.net = self._load_model(model_path, config_path)
        logger.info("Initialized OpenCV DNN face detector")

    def _load_model(
        self,
        model_path: Optional[Union[str, Path]],
        config_path: Optional[Union[str, Path]],
    ) -> cv2.dnn.Net:
        """Load the DNN model, downloading it on first use."""
        model_path = Path(model_path) if model_path else DEFAULT_MODEL_DIR / "opencv_face_detector.caffemodel"
        config_path = Path(config_path) if config_path else DEFAULT_MODEL_DIR / "opencv_face_detector.prototxt"

        if not model_path.exists():
            logger.info(f"Downloading model to {model_path}...")
            self._download_file(self.MODEL_URL, model_path)

        if not config_path.exists():
            logger.info(f"Downloading config to {config_path}...")
            self._download_file(self.CONFIG_URL, config_path)

        net = cv2.dnn.readNetFromCaffe(str(config_path), str(model_path))
        net.setPreferableBackend(cv2.dnn.DNN_BACKEND_OPENCV)
        net.setPreferableTarget(cv2.dnn.DNN_TARGET_CPU)
        return net

    def _download_file(self, url: str, path: Path) -> None:
        """Download a file from URL."""
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            urllib.request.urlretrieve(url, str(path))
            logger.info(f"Downloaded to {path}")
        except OSError as e:
            raise RuntimeError(f"Failed to download model from {url}: {e}") from e

    def detect(self, image: np.ndarray) -> List[DetectedFace]:
        """Detect faces using OpenCV DNN with NMS.

        Faces come back sorted by confidence, highest first.
        """
        h, w = image.shape[:2]

        blob = cv2.dnn.blobFromImage(
            image, 1.0, tuple(self.input_size),
            tuple(self._config.mean_values),
            swapRB=False, crop=False,
        )
        self.net.setInput(blob)
        detections = self.net.forward()

        boxes = []
        confidences = []
        min_face_w, min_face_h = self._config.min_face_size

        for i in range(detections.shape[2]):
            confidence = float(detections[0, 0, i, 2])
            if confidence <= self.confidence_threshold:
                continue

            x1 = int(np.clip(detections[0, 0, i, 3], 0, 1) * w)
            y1 = int(np.clip(detections[0, 0, i, 4], 0, 1) * h)
            x2 = int(np.clip(detections[0, 0, i, 5], 0, 1) * w)
            y2 = int(np.clip(detections[0, 0, i, 6], 0, 1) * h)

            box_w = x2 - x1
            box_h = y2 - y1
            if box_w < min_face_w or box_h < min_face_h:
                continue

            boxes.append([x1, y1, box_w, box_h])
            confidences.append(confidence)

        detected = []
        if boxes:
            indices = cv2.dnn.NMSBoxes(boxes, confidences, self.confidence_threshold, self.nms_threshold)
            for i in np.array(indices).flatten():
                x, y, width, height = boxes[int(i)]
                detected.append(DetectedFace(
                    x=x, y=y, width=width, height=height,
                    confidence=confidences[int(i)],
                ))

        detected.sort(key=lambda f: f.confidence, reverse=True)
        return detected
