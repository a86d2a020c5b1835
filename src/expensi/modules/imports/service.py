from __future__ import annotations

import logging
import time

from expensi.core.logging import (
    get_logger,
    log_event,
    log_exception,
    monotonic_ms,
    new_import_id,
    reset_import_context,
    set_import_context,
)
from expensi.modules.imports.models import ImportFileType, ParseResult, UploadedFile
from expensi.modules.imports.parsers.csv_parser import parse_csv
from expensi.modules.imports.parsers.excel import parse_excel
from expensi.modules.imports.parsers.json_parser import parse_json
from expensi.modules.imports.parsers.ofx import parse_ofx
from expensi.modules.imports.parsers.pdf import PdfExtractor, parse_pdf

logger = get_logger(__name__)

_MB = 1024 * 1024

EXTENSION_MAP: dict[str, ImportFileType] = {
    "csv": ImportFileType.CSV,
    "xlsx": ImportFileType.EXCEL,
    "xls": ImportFileType.EXCEL,
    "json": ImportFileType.JSON,
    "ofx": ImportFileType.OFX,
    "qfx": ImportFileType.OFX,
    "pdf": ImportFileType.PDF,
}

MAX_FILE_SIZES: dict[ImportFileType, int] = {
    ImportFileType.CSV: 10 * _MB,
    ImportFileType.EXCEL: 10 * _MB,
    ImportFileType.JSON: 5 * _MB,
    ImportFileType.OFX: 5 * _MB,
    ImportFileType.PDF: 20 * _MB,
}

FILE_TYPE_LABELS: dict[ImportFileType, str] = {
    ImportFileType.CSV: "CSV",
    ImportFileType.EXCEL: "Excel",
    ImportFileType.PDF: "PDF",
    ImportFileType.JSON: "JSON",
    ImportFileType.OFX: "OFX/QFX",
}

ACCEPTED_FILE_INPUT = ".csv,.xlsx,.xls,.json,.ofx,.qfx,.pdf"

UNSUPPORTED_FILE_MESSAGE = (
    "Unsupported file type. Accepted formats: CSV, Excel (.xlsx/.xls), PDF, JSON, OFX/QFX."
)


def get_file_type_label(file_type: ImportFileType) -> str:
    return FILE_TYPE_LABELS.get(file_type) or file_type.value.upper()


def detect_file_type(file: UploadedFile) -> ImportFileType | None:
    name = file.name or ""
    ext = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    return EXTENSION_MAP.get(ext)


def validate_file_size(file: UploadedFile, file_type: ImportFileType) -> str | None:
    limit = MAX_FILE_SIZES[file_type]
    if file.size > limit:
        return (
            f"File too large. Maximum size for {FILE_TYPE_LABELS[file_type]} "
            f"is {limit // _MB}MB."
        )
    return None


def parse_file(file: UploadedFile, *, pdf_extractor: PdfExtractor | None = None) -> ParseResult:
    """Detect the format, enforce its size limit and run the matching parser.

    Never raises: unsupported types, oversize files and parser crashes all come
    back as a result with a single row-0 error.
    """
    tokens = set_import_context(import_id=new_import_id(), filename=file.name)
    start = time.monotonic()
    try:
        log_event(logger, "import.start", byte_size=file.size)

        file_type = detect_file_type(file)
        if file_type is None:
            log_event(logger, "import.rejected", reason="unsupported_type")
            return ParseResult.failed(ImportFileType.CSV, UNSUPPORTED_FILE_MESSAGE)
        log_event(logger, "import.file_type", file_type=file_type.value)

        size_error = validate_file_size(file, file_type)
        if size_error:
            log_event(
                logger,
                "import.rejected",
                reason="too_large",
                file_type=file_type.value,
                limit_bytes=MAX_FILE_SIZES[file_type],
            )
            return ParseResult.failed(file_type, size_error)

        try:
            result = _dispatch(file, file_type, pdf_extractor=pdf_extractor)
        except Exception as e:
            log_exception(logger, "import.parser_error", file_type=file_type.value)
            return ParseResult.failed(
                file_type,
                f"Failed to parse {get_file_type_label(file_type)} file: "
                f"{str(e) or type(e).__name__}",
            )

        log_event(
            logger,
            "import.finish",
            level=logging.INFO if result.expenses else logging.WARNING,
            file_type=file_type.value,
            expenses=len(result.expenses),
            errors=len(result.errors),
            total_rows=result.total_rows,
            duration_ms=monotonic_ms(start),
        )
        return result
    finally:
        reset_import_context(tokens)


def _dispatch(
    file: UploadedFile, file_type: ImportFileType, *, pdf_extractor: PdfExtractor | None
) -> ParseResult:
    if file_type == ImportFileType.CSV:
        return parse_csv(file.text())
    if file_type == ImportFileType.EXCEL:
        return parse_excel(file.read())
    if file_type == ImportFileType.JSON:
        return parse_json(file.text())
    if file_type == ImportFileType.OFX:
        return parse_ofx(file.text())
    if file_type == ImportFileType.PDF:
        return parse_pdf(file.read(), extractor=pdf_extractor)
    raise ValueError(f"Unsupported parser kind: {file_type}")


def summarize_result(result: ParseResult) -> str:
    """One-line status for the reviewer after a parse."""
    count = len(result.expenses)
    if count == 0:
        return result.errors[0].message if result.errors else "No expenses found."
    plural = "" if count == 1 else "s"
    label = get_file_type_label(result.file_type)
    summary = f"Found {count} expense{plural} in {label} file."
    if result.errors:
        skipped = len(result.errors)
        summary += f" {skipped} row{'' if skipped == 1 else 's'} could not be imported."
    return summary
