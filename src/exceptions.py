"""Exception hierarchy for the intake pipeline."""


class IntakeError(Exception):
    """Base class for all intake pipeline errors."""


class ExtractionFailed(IntakeError):
    """The recognition engine could not process an image.

    Raised for engine initialization failures, unreadable or corrupt
    files, and extraction timeouts. Empty recognized text is not an error.
    """


class RecordNotFound(IntakeError, LookupError):
    """A record id is unknown to the record store."""

    kind = "Record"

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"{self.kind} not found: {record_id}")


class DocumentNotFound(RecordNotFound):
    kind = "Document"


class ApplicationNotFound(RecordNotFound):
    kind = "Application"
