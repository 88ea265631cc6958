"""Choice of the best text rendering for a recognition result.

Geometry wins when any usable word is present, the plain-text column
heuristic covers text-only results, and the raw text is the last
resort. Output is empty only when the recognizer produced no text.
"""

from collections.abc import Mapping
from typing import Any

from scantext.ocr.tesseract_engine import OCRResult
from scantext.utils.config import LayoutConfig
from scantext.utils.logger import get_logger

from .clusterer import RowClusterer
from .columns import ColumnHeuristic
from .renderer import RowRenderer

logger = get_logger(__name__)


class ResultSelector:
    """Formats recognition results according to a layout configuration.

    Args:
        config: Layout tuning knobs. Defaults to ``LayoutConfig()``.
    """

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()
        self.clusterer = RowClusterer(self.config.band_height)
        self.renderer = RowRenderer(self.config.pixels_per_char, self.config.char_advance_px)
        self.columns = ColumnHeuristic(self.config.column_widths)

    def select(self, result: OCRResult) -> str:
        """Return the formatted text for one recognition result."""
        raw_text = (result.text or "").strip()
        rows = self.clusterer.cluster(result.words)

        if rows:
            logger.debug("Rendering %d rows from word geometry", len(rows))
            formatted = self.renderer.render(rows)
        elif raw_text:
            logger.debug("No usable words, applying column heuristic to raw text")
            formatted = self.columns.format(raw_text)
        else:
            formatted = ""

        if not formatted and raw_text:
            logger.warning("Formatted output empty, falling back to raw text")
            return raw_text
        return formatted


def format_recognition_result(
    result: OCRResult | Mapping[str, Any] | str,
    config: LayoutConfig | None = None,
) -> str:
    """Format recognizer output as layout-preserving text.

    Args:
        result: An OCRResult, a recognizer payload dict (see
            ``OCRResult.from_dict``), or a plain text blob.
        config: Layout tuning knobs.

    Returns:
        The formatted text.
    """
    if isinstance(result, str):
        result = OCRResult(text=result)
    elif not isinstance(result, OCRResult):
        result = OCRResult.from_dict(result)
    return ResultSelector(config).select(result)
