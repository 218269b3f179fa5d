"""Scan cleanup applied to document photos before OCR.

Phone photos of passports and ID cards are usually colored, noisy and
unevenly lit. The pipeline converts to grayscale, smooths noise while
keeping character edges, evens out contrast, and binarizes.
"""

import cv2
import numpy as np

from src.utils.config import PreprocessingConfig
from src.utils.logger import get_logger

logger = get_logger(__name__)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert an RGB/RGBA or gray+alpha image to single-channel grayscale."""
    if image.ndim == 2:
        return image
    if image.shape[2] == 2:
        return image[:, :, 0]
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(image, cv2.COLOR_RGB2GRAY)


def denoise(image: np.ndarray, strength: int = 9) -> np.ndarray:
    """Edge-preserving bilateral smoothing."""
    return cv2.bilateralFilter(image, strength, 75, 75)


def enhance_contrast(
    image: np.ndarray, clip_limit: float = 2.0, tile_size: int = 8
) -> np.ndarray:
    """Local histogram equalization (CLAHE) for unevenly lit scans."""
    clahe = cv2.createCLAHE(clipLimit=clip_limit, tileGridSize=(tile_size, tile_size))
    return clahe.apply(image)


def binarize(image: np.ndarray, block_size: int = 31, offset: int = 10) -> np.ndarray:
    """Adaptive Gaussian thresholding to black text on white."""
    if block_size % 2 == 0:
        block_size += 1
    return cv2.adaptiveThreshold(
        image,
        255,
        cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY,
        block_size,
        offset,
    )


class PreprocessingPipeline:
    """Configurable cleanup pipeline for document page images.

    Args:
        config: Preprocessing configuration controlling which steps to apply.
    """

    def __init__(self, config: PreprocessingConfig) -> None:
        self.config = config

    def process(self, image: np.ndarray) -> np.ndarray:
        """Run the enabled steps and return a grayscale or binary image."""
        if image.dtype != np.uint8:
            image = cv2.normalize(image, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)

        result = to_grayscale(image)
        steps = ["grayscale"]

        if self.config.denoise_enabled:
            result = denoise(result, self.config.denoise_strength)
            steps.append("denoise")

        if self.config.contrast_enabled:
            result = enhance_contrast(
                result,
                clip_limit=self.config.clahe_clip_limit,
                tile_size=self.config.clahe_tile_size,
            )
            steps.append("contrast")

        if self.config.binarize_enabled:
            result = binarize(
                result,
                block_size=self.config.binarize_block_size,
                offset=self.config.binarize_offset,
            )
            steps.append("binarize")

        logger.debug("Preprocessed %s image: %s", image.shape, ", ".join(steps))
        return result
