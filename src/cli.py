"""Command-line interface for document extraction and application scoring.

``extract`` runs one scanned document through OCR and its field parser.
``score`` computes the approval score for an application described in a
JSON file.
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from pathlib import Path

from src.applications.catalog import DocumentCatalog
from src.applications.models import (
    Document,
    DocumentStatus,
    DocumentType,
    VisaApplication,
)
from src.exceptions import ExtractionFailed
from src.extraction.fields import fields_from_dict, fields_to_dict
from src.ocr.text_extractor import TextExtractor
from src.pipeline.extractors import (
    extract_flight_ticket_data,
    extract_passport_data,
    extract_tax_id_data,
)
from src.scoring.approval import ApprovalScore, compute_approval_score
from src.utils.config import load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_EXTRACTORS = {
    DocumentType.PASSPORT: extract_passport_data,
    DocumentType.TAX_ID_CARD: extract_tax_id_data,
    DocumentType.FLIGHT_TICKET: extract_flight_ticket_data,
}


def extract_single(
    file_path: Path, document_type: DocumentType = DocumentType.PASSPORT
) -> dict[str, object]:
    """Recognize one document and return its parsed fields.

    Args:
        file_path: Path to the scanned document.
        document_type: Which field parser to apply.

    Returns:
        Dictionary with the filename and the parsed fields.

    Raises:
        ExtractionFailed: If the document cannot be recognized.
    """
    config = load_config()
    extractor = TextExtractor(config)
    fields = asyncio.run(_EXTRACTORS[document_type](file_path, extractor))
    return {"filename": file_path.name, "fields": fields_to_dict(fields)}


def _parse_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value)


def load_application(data: dict) -> tuple[VisaApplication, list[Document]]:
    """Build an application and its documents from a JSON description.

    The description holds ``start_date``/``end_date`` (ISO format) and a
    ``documents`` list of ``{type, status, extracted_fields?}`` entries.

    Raises:
        KeyError: If a required key is missing.
        ValueError: If a date, type or status is invalid.
    """
    application = VisaApplication(
        id=data.get("id", "cli"),
        customer_name=data.get("customer_name", ""),
        start_date=_parse_datetime(data["start_date"]),
        end_date=_parse_datetime(data["end_date"]),
        visa_type=data.get("visa_type", "UAE"),
    )
    documents = []
    for i, entry in enumerate(data.get("documents", [])):
        extracted = entry.get("extracted_fields")
        documents.append(
            Document(
                id=entry.get("id", f"doc-{i}"),
                application_id=application.id,
                type=DocumentType(entry["type"]),
                name=entry.get("name", entry["type"]),
                status=DocumentStatus(entry.get("status", "pending")),
                extracted_fields=fields_from_dict(extracted) if extracted else None,
            )
        )
    return application, documents


def score_application(data: dict, catalog: DocumentCatalog) -> ApprovalScore:
    """Score an application described as a JSON-compatible dict."""
    application, documents = load_application(data)
    checklist = catalog.get_required_documents_for_type(application.visa_type)
    return compute_approval_score(
        documents, checklist, application, load_config().scoring
    )


def _score_to_dict(score: ApprovalScore) -> dict[str, object]:
    result: dict[str, object] = {
        "score": score.score,
        "tier": str(score.tier),
        "message": score.message,
    }
    if score.date_check is not None:
        result["date_check"] = {
            "match": score.date_check.match,
            "message": score.date_check.message,
        }
    return result


def _write_output(payload: dict, output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Visa Document Intake",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    extract_parser = subparsers.add_parser(
        "extract", help="Extract fields from a scanned document"
    )
    extract_parser.add_argument("file", type=Path, help="Document file to process")
    extract_parser.add_argument(
        "-t",
        "--type",
        choices=[t.value for t in _EXTRACTORS],
        default=DocumentType.PASSPORT.value,
        dest="doc_type",
        help="Document type (default: passport)",
    )
    extract_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    score_parser = subparsers.add_parser(
        "score", help="Score an application described in a JSON file"
    )
    score_parser.add_argument("application", type=Path, help="Application JSON file")
    score_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    args = parser.parse_args(argv)

    setup_logging(load_config().log_level)

    if args.command == "extract":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = extract_single(args.file, DocumentType(args.doc_type))
        except ExtractionFailed as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(2)
        _write_output(result, args.output)
    elif args.command == "score":
        if not args.application.exists():
            print(f"Error: {args.application} does not exist", file=sys.stderr)
            sys.exit(1)
        config = load_config()
        catalog = DocumentCatalog(Path(config.catalog.required_documents_path))
        try:
            data = json.loads(args.application.read_text())
            score = score_application(data, catalog)
        except (KeyError, ValueError) as exc:
            print(f"Error: invalid application file: {exc}", file=sys.stderr)
            sys.exit(1)
        _write_output(_score_to_dict(score), args.output)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
