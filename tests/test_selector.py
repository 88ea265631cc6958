"""Tests for result selection and format_recognition_result."""

import random
from unittest.mock import patch

import pytest

from scantext.layout.clusterer import round_half_up
from scantext.layout.selector import ResultSelector, format_recognition_result
from scantext.ocr.tesseract_engine import BoundingBox, OCRResult, OCRWord
from scantext.utils.config import LayoutConfig


def _make_word(text: str, x0: int = 0, y0: int = 0) -> OCRWord:
    return OCRWord(
        text=text,
        bbox=BoundingBox(x0=x0, y0=y0, x1=x0 + 7 * len(text), y1=y0 + 20),
    )


def _scattered_words(seed: int, count: int = 40) -> list[OCRWord]:
    rng = random.Random(seed)
    return [
        _make_word(f"w{i}", rng.randint(0, 800), rng.randint(0, 300))
        for i in range(count)
    ]


class TestResultSelector:
    """Tests for the rendering decision order."""

    def test_words_use_row_renderer(self) -> None:
        result = OCRResult(
            text="Total 12.50",
            words=[_make_word("Total", 0, 0), _make_word("12.50", 100, 2)],
        )
        assert ResultSelector().select(result) == "Total   12.50"

    def test_text_only_uses_column_heuristic(self) -> None:
        result = OCRResult(text="AAA 1.2 BBB 3.4\n", words=[])
        assert ResultSelector().select(result) == "AAA       1.2       BBB                 3.4"

    def test_unusable_words_fall_through_to_text(self) -> None:
        result = OCRResult(text="a b c", words=[_make_word("", 0, 0)])
        assert ResultSelector().select(result) == "a b c"

    def test_nothing_recognized(self) -> None:
        assert ResultSelector().select(OCRResult(text="", words=[])) == ""
        assert ResultSelector().select(OCRResult(text="  \n ", words=[])) == ""

    def test_empty_formatting_falls_back_to_raw_text(self) -> None:
        selector = ResultSelector()
        with patch.object(selector.columns, "format", return_value=""):
            assert selector.select(OCRResult(text="  raw words \n")) == "raw words"

    def test_empty_rendering_falls_back_to_raw_text(self) -> None:
        selector = ResultSelector()
        result = OCRResult(text="raw", words=[_make_word("raw")])
        with patch.object(selector.renderer, "render", return_value=""):
            assert selector.select(result) == "raw"

    def test_words_without_raw_text_still_render(self) -> None:
        result = OCRResult(text="", words=[_make_word("only", 0, 0)])
        assert ResultSelector().select(result) == "only"

    def test_layout_config_applied(self) -> None:
        config = LayoutConfig(pixels_per_char=10, char_advance_px=0)
        result = OCRResult(text="", words=[_make_word("a", 0), _make_word("b", 100)])
        assert ResultSelector(config).select(result) == "a" + " " * 10 + "b"


class TestFormatRecognitionResult:
    """Tests for the pure formatting entry point and its invariants."""

    def test_accepts_plain_text(self) -> None:
        assert format_recognition_result("x y z") == "x y z"

    def test_accepts_recognizer_payload(self) -> None:
        payload = {
            "text": "Total 12.50",
            "confidence": 91.0,
            "words": [
                {"text": "Total", "bbox": {"x0": 0, "y0": 0, "x1": 35, "y1": 20}},
                {"text": "12.50", "bbox": {"x0": 100, "y0": 2, "x1": 135, "y1": 22}},
            ],
        }
        assert format_recognition_result(payload) == "Total   12.50"

    def test_accepts_text_only_payload(self) -> None:
        assert format_recognition_result({"text": "hello"}) == "hello"

    @pytest.mark.parametrize(
        "raw",
        [
            "x",
            "  padded  ",
            "\n\nleading blank lines",
            "AAA  1.2   BBB   3.4   CCC",
            "a b c d e f g h",
            "\t\tx\t",
            "line one\r\nline two",
        ],
    )
    def test_non_empty_text_never_formats_to_empty(self, raw: str) -> None:
        assert format_recognition_result(raw) != ""

    @pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
    def test_every_word_once_in_row_then_x_order(self, seed: int) -> None:
        words = _scattered_words(seed)
        expected = [
            w.text
            for w in sorted(words, key=lambda w: (round_half_up(w.bbox.y0 / 10), w.bbox.x0))
        ]
        output = format_recognition_result(OCRResult(text="", words=words))
        assert output.split() == expected

    def test_deterministic(self) -> None:
        words = _scattered_words(42)
        first = format_recognition_result(OCRResult(text="", words=list(words)))
        second = format_recognition_result(OCRResult(text="", words=list(words)))
        assert first == second
        raw = "AAA 1.2 BBB 3.4 CCC\nfree text"
        assert format_recognition_result(raw) == format_recognition_result(raw)
