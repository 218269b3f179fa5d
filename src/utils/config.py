"""Configuration management for the visa document intake system.

Loads and validates YAML configuration with sensible defaults for
preprocessing, OCR, scoring, and the required-document catalog.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class PreprocessingConfig(BaseModel):
    """Configuration for scan cleanup before OCR."""

    denoise_enabled: bool = True
    denoise_strength: int = 9
    contrast_enabled: bool = True
    clahe_clip_limit: float = 2.0
    clahe_tile_size: int = 8
    binarize_enabled: bool = True
    binarize_block_size: int = 31
    binarize_offset: int = 10


class OCRConfig(BaseModel):
    """Configuration for the Tesseract text extractor."""

    tesseract_cmd: str | None = None
    default_lang: str = "eng"
    psm: int = 6
    pdf_dpi: int = 300
    timeout_seconds: float = 60.0


class ScoringConfig(BaseModel):
    """Tier thresholds and the flight/visa date tolerance."""

    moderate_threshold: int = 40
    high_threshold: int = 80
    date_tolerance_ms: int = 86_400_000


class CatalogConfig(BaseModel):
    """Location of the required-document checklist."""

    required_documents_path: str = "configs/required_documents.yaml"


class ServerConfig(BaseModel):
    """Bind address for the intake API server."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Top-level application configuration."""

    preprocessing: PreprocessingConfig = Field(default_factory=PreprocessingConfig)
    ocr: OCRConfig = Field(default_factory=OCRConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
