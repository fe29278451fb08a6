"""
Box geometry: area, intersection-over-union and greedy non-maximum suppression.

Boxes are ``(x1, y1, x2, y2)`` with ``(x1, y1)`` the top-left and ``(x2, y2)``
the bottom-right corner. A box whose bottom-right corner lies above or to the
left of its top-left corner is degenerate and has zero area.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

# (x1, y1, x2, y2)
Box = Tuple[float, float, float, float]
ScoredBox = Tuple[Box, float]

# Positive additive constant to avoid divide-by-zero.
EPS = 1.0e-7


def bbox_area(box: Sequence[float]) -> float:
    """
    Calculate the area enclosed by a bounding box.

    Returns 0.0 for degenerate boxes (negative width or height).
    """
    width = box[2] - box[0]
    height = box[3] - box[1]
    if width < 0.0 or height < 0.0:
        return 0.0
    return width * height


def iou(box_a: Sequence[float], box_b: Sequence[float]) -> float:
    """Calculate the intersection-over-union metric for two bounding boxes."""
    # For disjoint boxes the overlap corners are inverted, which bbox_area
    # reports as zero.
    overlap = (
        max(box_a[0], box_b[0]),
        max(box_a[1], box_b[1]),
        min(box_a[2], box_b[2]),
        min(box_a[3], box_b[3]),
    )
    overlap_area = bbox_area(overlap)
    return overlap_area / (bbox_area(box_a) + bbox_area(box_b) - overlap_area + EPS)


def non_maximum_suppression(
    sorted_boxes_with_confidences: List[ScoredBox],
    max_iou: float,
) -> List[ScoredBox]:
    """
    Run greedy non-maximum suppression on candidate boxes.

    The candidates must be sorted in **ascending** order of confidence: the most
    confident remaining candidate is popped from the back. A candidate is kept
    only if its IoU with every already selected box is at most ``max_iou``.
    Candidates with confidences too low to be considered should be filtered
    out beforehand.

    The input list is not modified.

    Args:
        sorted_boxes_with_confidences: ``(box, confidence)`` pairs, ascending.
        max_iou: Overlap above which a candidate is suppressed.

    Returns:
        Selected ``(box, confidence)`` pairs in descending confidence order.
    """
    candidates = list(sorted_boxes_with_confidences)
    selected: List[ScoredBox] = []
    while candidates:
        box, confidence = candidates.pop()
        if all(iou(box, kept) <= max_iou for kept, _ in selected):
            selected.append((box, confidence))
    return selected
