"""Face bounding-box detection through AWS Rekognition."""

import base64
import logging
import re
from typing import List, Optional

import boto3

from .constants import RekognitionConfig
from .detection.types import BoundingBox

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,")

# Long-lived client, created on first use
_rekognition_client = None


def decode_image_payload(image: str) -> bytes:
    """Decode a data URL or bare base64 string into image bytes.

    Line breaks from MIME-wrapped encoders are ignored.

    Raises:
        ValueError: If the payload is not valid base64.
    """
    data = _DATA_URL_PREFIX.sub("", image.strip(), count=1)
    data = "".join(data.split())
    return base64.b64decode(data, validate=True)


def create_rekognition_client(config: Optional[RekognitionConfig] = None):
    """Create a Rekognition client from AWS_* environment settings."""
    config = config or RekognitionConfig.from_env()
    return boto3.client(
        "rekognition",
        region_name=config.region,
        aws_access_key_id=config.access_key_id,
        aws_secret_access_key=config.secret_access_key,
    )


def get_rekognition_client():
    """Get or create the shared Rekognition client."""
    global _rekognition_client
    if _rekognition_client is None:
        _rekognition_client = create_rekognition_client()
    return _rekognition_client


def set_rekognition_client(client) -> None:
    """Replace the shared Rekognition client."""
    global _rekognition_client
    _rekognition_client = client


def _to_box(detail: dict) -> Optional[BoundingBox]:
    box = detail.get("BoundingBox")
    if not box:
        return None
    return BoundingBox(
        x=box.get("Left"),
        y=box.get("Top"),
        width=box.get("Width"),
        height=box.get("Height"),
    )


def _detect_faces(image_bytes: bytes, client=None) -> List[dict]:
    client = client or get_rekognition_client()
    response = client.detect_faces(
        Image={"Bytes": image_bytes},
        Attributes=["DEFAULT"],
    )
    details = response.get("FaceDetails", [])
    logger.info(f"Rekognition found {len(details)} face(s)")
    return details


def detect_first_face(image: str, client=None) -> Optional[BoundingBox]:
    """Decode an image payload and return the first face's box, if any.

    The box is passed through from Rekognition unchanged, in [0, 1] units
    relative to the image size.

    Raises:
        ValueError: If the payload is not valid base64.
        botocore.exceptions.BotoCoreError, botocore.exceptions.ClientError:
            If the service call fails.
    """
    details = _detect_faces(decode_image_payload(image), client)
    if not details:
        return None
    return _to_box(details[0])
