"""PDF page rendering for scanned documents uploaded as PDF.

Bank statements and e-tickets often arrive as PDFs; each page is
rendered to an image before recognition.
"""

from pathlib import Path

import numpy as np
from pdf2image import convert_from_bytes, convert_from_path

from src.exceptions import ExtractionFailed
from src.utils.logger import get_logger

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"


def is_pdf(source: Path | bytes) -> bool:
    """Detect PDFs by magic bytes, or by suffix for paths."""
    if isinstance(source, bytes):
        return source[:4] == PDF_MAGIC
    return Path(source).suffix.lower() == ".pdf"


class PDFHandler:
    """Renders PDF pages to images.

    Args:
        dpi: Render resolution. Higher values improve OCR on small print
            at the cost of memory.
    """

    def __init__(self, dpi: int = 300) -> None:
        self.dpi = dpi

    def pdf_to_images(self, pdf_source: Path | bytes) -> list[np.ndarray]:
        """Render every page of a PDF.

        Args:
            pdf_source: Path to a PDF file or raw PDF bytes.

        Returns:
            Page images as RGB numpy arrays.

        Raises:
            ExtractionFailed: If the file is missing or cannot be rendered.
        """
        try:
            if isinstance(pdf_source, bytes):
                pil_images = convert_from_bytes(pdf_source, dpi=self.dpi)
            else:
                path = Path(pdf_source)
                if not path.exists():
                    raise ExtractionFailed(f"PDF file not found: {path}")
                pil_images = convert_from_path(str(path), dpi=self.dpi)
        except ExtractionFailed:
            raise
        except Exception as exc:
            raise ExtractionFailed(f"PDF conversion failed: {exc}") from exc

        images = [np.array(img.convert("RGB")) for img in pil_images]
        logger.info("Rendered %d PDF pages at %d DPI", len(images), self.dpi)
        return images
