"""Text extraction for uploaded document images and PDFs.

Loads the upload, cleans each page, and runs Tesseract. Recognition is
blocking, so ``extract_async`` runs it in a worker thread under a
timeout to keep other uploads moving.
"""

import asyncio
import io
from pathlib import Path

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from src.exceptions import ExtractionFailed
from src.preprocessing.pipeline import PreprocessingPipeline
from src.utils.config import AppConfig
from src.utils.logger import get_logger

from .pdf_handler import PDFHandler, is_pdf
from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)

PAGE_BREAK = "\n\n--- Page Break ---\n\n"


class TextExtractor:
    """Image or PDF in, recognized UTF-8 text out.

    Args:
        config: Application configuration object.
        engine: OCR engine; built from ``config.ocr`` when omitted.
    """

    def __init__(
        self, config: AppConfig, engine: TesseractEngine | None = None
    ) -> None:
        self.config = config
        self.pdf_handler = PDFHandler(dpi=config.ocr.pdf_dpi)
        self.preprocessing = PreprocessingPipeline(config.preprocessing)
        self.engine = engine or TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            default_lang=config.ocr.default_lang,
        )

    def extract(self, source: Path | bytes, filename: str = "document") -> str:
        """Recognize the text of every page of a document.

        Args:
            source: Path to an image/PDF file, or its raw bytes.
            filename: Display name for logs.

        Returns:
            The recognized text; empty when nothing was recognized.

        Raises:
            ExtractionFailed: If the file cannot be read or OCR fails.
        """
        images = self._load_images(source)
        pages = []
        for image in images:
            try:
                processed = self.preprocessing.process(image)
            except (cv2.error, ValueError) as exc:
                raise ExtractionFailed(f"Image preprocessing failed: {exc}") from exc
            result = self.engine.extract_text(processed, psm=self.config.ocr.psm)
            pages.append(result.text)

        text = PAGE_BREAK.join(pages)
        logger.info(
            "Extracted %d characters from %d page(s) of %s",
            len(text.strip()),
            len(pages),
            filename,
        )
        return text

    async def extract_async(
        self, source: Path | bytes, filename: str = "document"
    ) -> str:
        """Run ``extract`` in a worker thread, bounded by the OCR timeout.

        Raises:
            ExtractionFailed: On any extraction failure or on timeout.
        """
        timeout = self.config.ocr.timeout_seconds
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self.extract, source, filename), timeout=timeout
            )
        except asyncio.TimeoutError as exc:
            raise ExtractionFailed(
                f"Text extraction timed out after {timeout:.0f}s for {filename}"
            ) from exc

    def _load_images(self, source: Path | bytes) -> list[np.ndarray]:
        if is_pdf(source):
            return self.pdf_handler.pdf_to_images(source)

        try:
            if isinstance(source, bytes):
                img = Image.open(io.BytesIO(source))
            else:
                img = Image.open(Path(source))
            img.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise ExtractionFailed(f"Unreadable image: {exc}") from exc
        # palette, alpha and 16-bit modes all normalize to 3 channels
        return [np.array(img.convert("RGB"))]
