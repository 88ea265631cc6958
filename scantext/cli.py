"""Command-line interface for OCR jobs and history management.

Provides subcommands for formatting saved recognizer output, running
OCR on an image file, and listing or deleting a user's OCR records.
"""

import argparse
import json
import sys
from pathlib import Path

from scantext.db.session import Database
from scantext.errors import NotFoundOrForbidden, ScanTextError
from scantext.layout.selector import format_recognition_result
from scantext.ocr.document_processor import DocumentProcessor
from scantext.ocr.tesseract_engine import TesseractEngine
from scantext.records.lifecycle import RecordLifecycleManager
from scantext.records.store import RecordStore
from scantext.utils.config import AppConfig, load_config
from scantext.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def format_file(input_path: Path, config: AppConfig) -> str:
    """Format recognizer output stored in a file.

    A ``.json`` file holds a recognizer payload (``text``, optional
    ``confidence`` and ``words``); any other file is read as a raw text
    blob.

    Args:
        input_path: File with recognizer output.
        config: Application configuration.

    Returns:
        The formatted text.
    """
    if input_path.suffix.lower() == ".json":
        with open(input_path) as f:
            payload = json.load(f)
        return format_recognition_result(payload, config.layout)
    return format_recognition_result(input_path.read_text(), config.layout)


def _lifecycle(database: Database, config: AppConfig) -> RecordLifecycleManager:
    return RecordLifecycleManager(
        RecordStore(database), default_language=config.ocr.default_lang
    )


def recognize_file(
    file_path: Path,
    user_id: str,
    config: AppConfig,
    database: Database,
    language: str | None = None,
) -> dict[str, object]:
    """Run a full OCR job on an image and return the stored result.

    Args:
        file_path: Image to recognize.
        user_id: Owner of the new record.
        config: Application configuration.
        database: Connected database handle.
        language: OCR language code.

    Returns:
        Dictionary with the record id, text and confidence.
    """
    engine = TesseractEngine(
        tesseract_cmd=config.ocr.tesseract_cmd,
        default_lang=config.ocr.default_lang,
        psm=config.ocr.psm,
    )
    processor = DocumentProcessor(engine, _lifecycle(database, config), config.layout)
    result = processor.process(user_id, file_path, language)
    return {
        "record_id": result.record.id,
        "filename": file_path.name,
        "text": result.text,
        "confidence": result.confidence,
    }


def list_history(user_id: str, config: AppConfig, database: Database) -> list[dict[str, object]]:
    """Return a user's records as dictionaries, most recent first."""
    return [r.to_dict() for r in _lifecycle(database, config).list_for_user(user_id)]


def delete_record(record_id: int, user_id: str, config: AppConfig, database: Database) -> bool:
    """Delete a user's record; ``False`` when it was not found."""
    try:
        _lifecycle(database, config).delete(record_id, user_id)
    except NotFoundOrForbidden:
        return False
    return True


def _emit(output: str, destination: Path | None) -> None:
    if destination:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(output)
        print(f"Output written to {destination}")
    else:
        print(output)


def _run_with_database(args: argparse.Namespace, config: AppConfig) -> int:
    database = Database(config.database).connect()
    try:
        if args.command == "recognize":
            result = recognize_file(args.file, args.user, config, database, args.lang)
            _emit(json.dumps(result, indent=2), args.output)
        elif args.command == "history":
            print(json.dumps(list_history(args.user, config, database), indent=2))
        elif args.command == "delete":
            if not delete_record(args.record_id, args.user, config, database):
                print(f"Error: record {args.record_id} not found", file=sys.stderr)
                return 1
            print(f"Record {args.record_id} deleted")
    except ScanTextError as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        database.dispose()
    return 0


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="scantext OCR tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", type=Path, help="YAML configuration file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    format_parser = subparsers.add_parser(
        "format", help="Format saved recognizer output (JSON or text)"
    )
    format_parser.add_argument("input", type=Path, help="Recognizer output file")
    format_parser.add_argument("-o", "--output", type=Path, help="Output text file")

    recognize_parser = subparsers.add_parser("recognize", help="Run OCR on an image")
    recognize_parser.add_argument("file", type=Path, help="Image file to process")
    recognize_parser.add_argument("-u", "--user", required=True, help="Owning user id")
    recognize_parser.add_argument("-l", "--lang", help="OCR language code")
    recognize_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    history_parser = subparsers.add_parser("history", help="List a user's OCR records")
    history_parser.add_argument("-u", "--user", required=True, help="Owning user id")

    delete_parser = subparsers.add_parser("delete", help="Delete an OCR record")
    delete_parser.add_argument("record_id", type=int, help="Record id")
    delete_parser.add_argument("-u", "--user", required=True, help="Owning user id")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command == "format":
        if not args.input.exists():
            print(f"Error: {args.input} does not exist", file=sys.stderr)
            sys.exit(1)
        _emit(format_file(args.input, config), args.output)
    elif args.command == "recognize" and not args.file.exists():
        print(f"Error: {args.file} does not exist", file=sys.stderr)
        sys.exit(1)
    elif args.command in ("recognize", "history", "delete"):
        status = _run_with_database(args, config)
        if status:
            sys.exit(status)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
