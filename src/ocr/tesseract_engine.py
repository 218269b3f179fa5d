"""Tesseract OCR engine wrapper.

Runs recognition on a single page image and reports the text with an
average word confidence. Engine errors surface as ``ExtractionFailed``.
"""

from dataclasses import dataclass

import numpy as np
import pytesseract
from PIL import Image

from src.exceptions import ExtractionFailed
from src.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OCRResult:
    """Recognized text for one page."""

    text: str
    language: str
    confidence: float
    word_count: int = 0


class TesseractEngine:
    """Wrapper around Tesseract OCR for document text extraction.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        default_lang: Default OCR language code.
    """

    def __init__(
        self,
        tesseract_cmd: str | None = None,
        default_lang: str = "eng",
    ) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.default_lang = default_lang

    def check_available(self) -> bool:
        """Whether the Tesseract binary can be started."""
        try:
            pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as exc:
            logger.warning("Tesseract unavailable: %s", exc)
            return False
        return True

    def extract_text(
        self,
        image: np.ndarray,
        lang: str | None = None,
        psm: int = 6,
    ) -> OCRResult:
        """Recognize the text of one page image.

        Args:
            image: Page image as a numpy array.
            lang: OCR language code. Defaults to the engine default.
            psm: Tesseract page segmentation mode.

        Returns:
            OCRResult with the full text and average confidence.

        Raises:
            ExtractionFailed: If Tesseract is missing or fails on the image.
        """
        lang = lang or self.default_lang
        config = f"--psm {psm}"

        try:
            pil_image = Image.fromarray(image)
            text = pytesseract.image_to_string(pil_image, lang=lang, config=config)
            data = pytesseract.image_to_data(
                pil_image,
                lang=lang,
                config=config,
                output_type=pytesseract.Output.DICT,
            )
        except pytesseract.TesseractNotFoundError as exc:
            raise ExtractionFailed(f"Tesseract is not installed: {exc}") from exc
        except (pytesseract.TesseractError, RuntimeError, ValueError, TypeError) as exc:
            raise ExtractionFailed(f"Text recognition failed: {exc}") from exc

        confidences = [
            float(conf)
            for conf, word in zip(data["conf"], data["text"])
            if float(conf) > 0 and word.strip()
        ]
        avg_conf = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0

        logger.info(
            "OCR extracted %d words with average confidence %.2f",
            len(confidences),
            avg_conf,
        )
        return OCRResult(
            text=text,
            language=lang,
            confidence=avg_conf,
            word_count=len(confidences),
        )
