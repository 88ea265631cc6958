"""Grouping of recognized words into horizontal text rows.

Rows are quantization buckets over the top edge of each word's box, not
a true text-line segmentation: two words a few pixels apart can fall on
either side of a bucket boundary.
"""

import math
from collections.abc import Iterable

from scantext.ocr.tesseract_engine import OCRWord
from scantext.utils.logger import get_logger

logger = get_logger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going towards +infinity."""
    return math.floor(value + 0.5)


def is_usable(word: OCRWord) -> bool:
    """Whether a word carries text the layout can place."""
    return bool(word.text and word.text.strip())


class RowClusterer:
    """Buckets words into rows keyed by ``round(y0 / band_height)``.

    Args:
        band_height: Vertical bucket size in pixels.
    """

    def __init__(self, band_height: int = 10) -> None:
        if band_height <= 0:
            raise ValueError("band_height must be positive")
        self.band_height = band_height

    def row_key(self, word: OCRWord) -> int:
        return round_half_up(word.bbox.y0 / self.band_height)

    def cluster(self, words: Iterable[OCRWord]) -> list[list[OCRWord]]:
        """Group words into rows ordered top to bottom.

        Words inside a row keep their input order; unusable words (empty
        or whitespace-only text) are dropped.

        Args:
            words: Recognized words in any order.

        Returns:
            Rows in ascending key order; empty when no word is usable.
        """
        buckets: dict[int, list[OCRWord]] = {}
        for word in words:
            if not is_usable(word):
                continue
            buckets.setdefault(self.row_key(word), []).append(word)

        rows = [buckets[key] for key in sorted(buckets)]
        logger.debug("Clustered words into %d rows", len(rows))
        return rows
