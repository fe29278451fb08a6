"""
Image decoding and detector input preparation.

Turns staged image bytes into the ``[1, 3, H, W]`` float32 tensor the detector
expects: decode, resize to the detector input size, convert BGR to RGB and
normalize each channel with ImageNet statistics.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import cv2
import numpy as np

from algorithms.remap import RESIZE_FILL, RESIZE_STRETCH, visible_window
from models.job import ImageFormat
from ops.errors import DecodeFailure


def read_image(path: str, image_format: ImageFormat) -> np.ndarray:
    """
    Read and decode an image file as a BGR ``uint8`` array.

    Raises:
        DecodeFailure: The file cannot be read, its bytes do not match the
            declared format, or OpenCV cannot decode them.
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise DecodeFailure(f"unable to open image {path}: {e}") from e
    return decode_image(data, image_format)


def decode_image(data: bytes, image_format: ImageFormat) -> np.ndarray:
    """Decode raw bytes of the declared format into a BGR ``uint8`` array."""
    if not data:
        raise DecodeFailure("image is empty")
    if not image_format.matches(data):
        raise DecodeFailure(f"image bytes are not {image_format.value}")

    buf = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    if image is None or image.size == 0:
        raise DecodeFailure("unable to decode image")
    return image


def resize_for_detector(
    image: np.ndarray,
    width: int,
    height: int,
    resize_mode: str = RESIZE_FILL,
) -> np.ndarray:
    """
    Resize an image to the detector input size with bilinear filtering.

    ``fill`` crops the centered window that the remapper projects back onto,
    then resizes it; ``stretch`` resizes the whole image directly.
    """
    if resize_mode == RESIZE_STRETCH:
        return cv2.resize(image, (width, height), interpolation=cv2.INTER_LINEAR)

    image_h, image_w = image.shape[:2]
    offset_x, offset_y, window_w, window_h = visible_window(
        image_w, image_h, width / height, resize_mode
    )
    x0 = int(round(offset_x))
    y0 = int(round(offset_y))
    x1 = max(x0 + 1, x0 + int(round(window_w)))
    y1 = max(y0 + 1, y0 + int(round(window_h)))
    cropped = image[y0:y1, x0:x1]
    return cv2.resize(cropped, (width, height), interpolation=cv2.INTER_LINEAR)


def normalize(
    image: np.ndarray,
    mean: Sequence[float],
    std: Sequence[float],
) -> np.ndarray:
    """
    Normalize a BGR ``uint8`` image into an RGB ``[1, 3, H, W]`` float32 tensor.

    Each channel becomes ``(pixel / 255 - mean[c]) / std[c]``.
    """
    rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB).astype(np.float32) / 255.0
    mean_arr = np.asarray(mean, dtype=np.float32).reshape(1, 1, 3)
    std_arr = np.asarray(std, dtype=np.float32).reshape(1, 1, 3)
    chw = ((rgb - mean_arr) / std_arr).transpose(2, 0, 1)
    return np.ascontiguousarray(chw[np.newaxis, ...], dtype=np.float32)


def prepare_input(
    image: np.ndarray,
    size: Tuple[int, int],
    mean: Sequence[float],
    std: Sequence[float],
    resize_mode: str = RESIZE_FILL,
) -> np.ndarray:
    """Resize and normalize a decoded image; ``size`` is ``(width, height)``."""
    width, height = size
    resized = resize_for_detector(image, width, height, resize_mode)
    return normalize(resized, mean, std)
