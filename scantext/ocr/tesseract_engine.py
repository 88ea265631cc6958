"""Tesseract OCR engine wrapper with word-level extraction.

Defines the token and result types shared by the layout package and
wraps pytesseract to produce them. Confidence values stay on
Tesseract's native 0-100 scale.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import pytesseract
from PIL import Image

from scantext.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class BoundingBox:
    """Pixel-space box given by its top-left and bottom-right corners."""

    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0


@dataclass(frozen=True)
class OCRWord:
    """A single recognized word with its position and confidence."""

    text: str
    bbox: BoundingBox
    confidence: float = 0.0
    block_num: int = 0
    line_num: int = 0
    word_num: int = 0


@dataclass
class OCRResult:
    """Complete recognizer output for one image.

    ``words`` is empty when the recognizer only produced a text blob.
    """

    text: str
    words: list[OCRWord] = field(default_factory=list)
    language: str = "eng"
    confidence: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], language: str = "eng") -> "OCRResult":
        """Build a result from a recognizer payload.

        Accepts ``{"text", "confidence", "words": [{"text", "bbox"}]}`` as
        well as the text-only ``{"text"}`` shape. Bounding boxes missing a
        corner default that corner to 0.

        Args:
            data: Decoded recognizer payload.
            language: Language code to record on the result.

        Returns:
            The equivalent OCRResult.
        """
        words: list[OCRWord] = []
        for item in data.get("words") or []:
            bbox = item.get("bbox") or {}
            words.append(
                OCRWord(
                    text=str(item.get("text") or ""),
                    bbox=BoundingBox(
                        x0=bbox.get("x0", 0),
                        y0=bbox.get("y0", 0),
                        x1=bbox.get("x1", 0),
                        y1=bbox.get("y1", 0),
                    ),
                    confidence=float(item.get("confidence") or 0.0),
                )
            )
        return cls(
            text=str(data.get("text") or ""),
            words=words,
            language=str(data.get("language") or language),
            confidence=float(data.get("confidence") or 0.0),
        )


class Recognizer(Protocol):
    """Anything that turns an image file into an OCRResult."""

    def recognize(self, image_path: Path | str, lang: str | None = None) -> OCRResult:
        ...


class TesseractEngine:
    """Wrapper around Tesseract OCR for document text extraction.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
        psm: Tesseract page segmentation mode.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
        psm: int = 3,
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang
        self.psm = psm

    def recognize(self, image_path: Path | str, lang: str | None = None) -> OCRResult:
        """Open an image file and run OCR on it.

        Args:
            image_path: Path to the image on disk.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            OCRResult for the image.
        """
        with Image.open(image_path) as image:
            image.load()
            return self.extract_text(image, lang=lang)

    def extract_text(self, image: Image.Image, lang: str | None = None) -> OCRResult:
        """Extract text from an image with word-level bounding boxes.

        Args:
            image: Input image.
            lang: OCR language code. Defaults to the engine default.

        Returns:
            OCRResult containing full text, word details, and confidence.
        """
        lang = lang or self.default_lang
        config = f"--psm {self.psm}"

        text = pytesseract.image_to_string(image, lang=lang, config=config)
        data = pytesseract.image_to_data(
            image,
            lang=lang,
            config=config,
            output_type=pytesseract.Output.DICT,
        )

        words: list[OCRWord] = []
        total_conf = 0.0

        for i in range(len(data["text"])):
            conf = float(data["conf"][i])
            word_text = str(data["text"][i]).strip()
            if conf < 0 or not word_text:
                continue

            left = int(data["left"][i])
            top = int(data["top"][i])
            words.append(
                OCRWord(
                    text=word_text,
                    bbox=BoundingBox(
                        x0=left,
                        y0=top,
                        x1=left + int(data["width"][i]),
                        y1=top + int(data["height"][i]),
                    ),
                    confidence=conf,
                    block_num=data["block_num"][i],
                    line_num=data["line_num"][i],
                    word_num=data["word_num"][i],
                )
            )
            total_conf += conf

        avg_conf = total_conf / len(words) if words else 0.0

        logger.info(
            "OCR extracted %d words with average confidence %.2f",
            len(words),
            avg_conf,
        )
        return OCRResult(
            text=text,
            words=words,
            language=lang,
            confidence=avg_conf,
        )
