"""
Map normalized detector-space boxes back onto the source image.

The detector sees a fixed-size input whose aspect ratio usually differs from
the source image. How detector coordinates project back depends on how the
image was resized during preprocessing:

- ``fill``: the image is scaled to cover the detector input and the overflow on
  the longer axis is cropped symmetrically. Detector space then corresponds to
  a centered window of the source image.
- ``stretch``: the image is resized directly, distorting its aspect ratio.
  Detector space maps linearly onto the whole source image.

Preprocessing and remapping must use the same mode.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

RESIZE_FILL = "fill"
RESIZE_STRETCH = "stretch"
RESIZE_MODES = (RESIZE_FILL, RESIZE_STRETCH)

PixelBox = Tuple[int, int, int, int]


def visible_window(
    image_width: float,
    image_height: float,
    detector_ratio: float,
    resize_mode: str = RESIZE_FILL,
) -> Tuple[float, float, float, float]:
    """
    Return ``(offset_x, offset_y, window_width, window_height)``: the region of
    the source image, in pixels, that the detector input covers.
    """
    if resize_mode not in RESIZE_MODES:
        raise ValueError(f"Unknown resize mode: {resize_mode!r}")

    if resize_mode == RESIZE_STRETCH:
        return 0.0, 0.0, float(image_width), float(image_height)

    image_ratio = image_width / image_height
    if image_ratio > detector_ratio:
        scaled_width = detector_ratio * image_height
        return (image_width - scaled_width) / 2.0, 0.0, scaled_width, float(image_height)
    if image_ratio < detector_ratio:
        scaled_height = image_width / detector_ratio
        return 0.0, (image_height - scaled_height) / 2.0, float(image_width), scaled_height
    return 0.0, 0.0, float(image_width), float(image_height)


def to_pixel_box(
    box: Sequence[float],
    image_width: int,
    image_height: int,
    detector_ratio: float,
    resize_mode: str = RESIZE_FILL,
) -> PixelBox:
    """
    Project a normalized ``(x1, y1, x2, y2)`` box onto source-image pixels.

    Coordinates are truncated (not rounded) and clamped at zero.
    """
    offset_x, offset_y, window_w, window_h = visible_window(
        image_width, image_height, detector_ratio, resize_mode
    )
    coords = (
        box[0] * window_w + offset_x,
        box[1] * window_h + offset_y,
        box[2] * window_w + offset_x,
        box[3] * window_h + offset_y,
    )
    x1, y1, x2, y2 = (max(0, int(c)) for c in coords)
    return x1, y1, x2, y2


def map_boxes_to_pixels(
    boxes_with_confidences: Sequence[Tuple[Sequence[float], float]],
    image_width: int,
    image_height: int,
    detector_ratio: float,
    resize_mode: str = RESIZE_FILL,
) -> List[Tuple[PixelBox, float]]:
    """Remap every ``(box, confidence)`` pair, preserving order."""
    return [
        (
            to_pixel_box(box, image_width, image_height, detector_ratio, resize_mode),
            confidence,
        )
        for box, confidence in boxes_with_confidences
    ]
