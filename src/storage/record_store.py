"""Key-value record store used by the intake pipeline.

The pipeline only needs get/set semantics; persistence mechanics belong
to the concrete store. ``InMemoryRecordStore`` backs tests, the CLI and
the development API server.
"""

from abc import ABC, abstractmethod
from typing import Any

from src.utils.logger import get_logger

logger = get_logger(__name__)


class RecordStore(ABC):
    """Abstract key-value record store."""

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Return the record stored under ``key``, or ``None``."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous record."""

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """Return stored keys starting with ``prefix``."""


class InMemoryRecordStore(RecordStore):
    """Dictionary-backed record store."""

    def __init__(self) -> None:
        self._records: dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._records.get(key)

    def set(self, key: str, value: Any) -> None:
        logger.debug("Storing record %s", key)
        self._records[key] = value

    def keys(self, prefix: str = "") -> list[str]:
        return sorted(k for k in self._records if k.startswith(prefix))
