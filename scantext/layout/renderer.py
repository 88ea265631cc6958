"""Rendering of word rows as monospaced text lines.

Horizontal pixel gaps become runs of spaces. The mapping assumes a
fixed-width font advance and is a lossy but monotonic approximation of
the distance between words.
"""

from collections.abc import Iterable, Sequence

from scantext.ocr.tesseract_engine import OCRWord

from .clusterer import round_half_up


class RowRenderer:
    """Turns clustered rows into text.

    Args:
        pixels_per_char: Horizontal pixels represented by one space.
        char_advance_px: Assumed pixel width of one rendered character.
    """

    def __init__(self, pixels_per_char: int = 20, char_advance_px: int = 7) -> None:
        if pixels_per_char <= 0:
            raise ValueError("pixels_per_char must be positive")
        self.pixels_per_char = pixels_per_char
        self.char_advance_px = char_advance_px

    def render_row(self, row: Sequence[OCRWord]) -> str:
        """Render one row, left to right, with at least one space before each word.

        Args:
            row: Words of a single row, in any order.

        Returns:
            The line with trailing whitespace removed.
        """
        line = ""
        last_advance_x = 0
        # sorted() is stable, so words sharing x0 keep their input order
        for word in sorted(row, key=lambda w: w.bbox.x0):
            gap = max(1, round_half_up((word.bbox.x0 - last_advance_x) / self.pixels_per_char))
            line += " " * gap + word.text
            last_advance_x = word.bbox.x0 + len(word.text) * self.char_advance_px
        return line.rstrip()

    def render(self, rows: Iterable[Sequence[OCRWord]]) -> str:
        """Render all rows as one newline-joined block, stripped at both ends."""
        return "\n".join(self.render_row(row) for row in rows).strip()
