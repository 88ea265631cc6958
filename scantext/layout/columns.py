"""Column layout guesses for recognizer output without word geometry.

Lines that already carry column spacing are kept; single-spaced lines
with four or more fields are forced into fixed-width slots. This targets
short-label tabular data such as tickers or receipt lines and will
re-space ordinary prose that happens to have four or more words.
"""

import re
from collections.abc import Sequence

_LINE_BREAK = re.compile(r"\r?\n")
_COLUMNAR = re.compile(r"\t|\s{2,}")
_MIN_FIELDS = 4
_TAB = "    "


class ColumnHeuristic:
    """Fixed-width column formatter for plain text.

    Args:
        column_widths: Slot width per field index; the last width is
            reused for every field beyond the table.
    """

    def __init__(self, column_widths: Sequence[int] = (10, 10, 20, 10, 10)) -> None:
        if not column_widths:
            raise ValueError("column_widths must not be empty")
        self.column_widths = tuple(column_widths)

    def width_for(self, index: int) -> int:
        return self.column_widths[min(index, len(self.column_widths) - 1)]

    def format_line(self, line: str) -> str:
        if _COLUMNAR.search(line):
            return line.replace("\t", _TAB)

        fields = line.split()
        if len(fields) < _MIN_FIELDS:
            return line

        # fields at or over their slot width are not padded and may abut the next one
        out = [value.ljust(self.width_for(i)) for i, value in enumerate(fields)]
        return "".join(out).rstrip()

    def format(self, raw_text: str) -> str:
        """Format a raw text blob line by line.

        Args:
            raw_text: Text as returned by the recognizer.

        Returns:
            Formatted lines joined by newlines, stripped at both ends.
        """
        lines = [line.strip() for line in _LINE_BREAK.split(raw_text)]
        if lines and lines[0] == "":
            lines = lines[1:]
        return "\n".join(self.format_line(line) for line in lines).strip()
