from __future__ import annotations

from collections.abc import Callable
from io import BytesIO
from typing import Any

from pypdf import PdfReader

from expensi.core.config import settings
from expensi.core.logging import get_logger, log_event
from expensi.modules.imports import ai
from expensi.modules.imports.fields import clean_category, parse_amount, parse_date, today_iso
from expensi.modules.imports.models import ImportFileType, ParseResult, RawExpenseInput

logger = get_logger(__name__)

# Raw file bytes in, parse result out. Raises PdfExtractionError on failure.
PdfExtractor = Callable[[bytes], ParseResult]


class PdfExtractionError(RuntimeError):
    pass


def parse_pdf(body: bytes, *, extractor: PdfExtractor | None = None) -> ParseResult:
    """Shape the extraction capability's answer into a PDF parse result.

    Failures surface the capability's message verbatim as the only error.
    """
    extract = extractor or extract_pdf_expenses
    try:
        result = extract(body)
    except (PdfExtractionError, ai.AICapabilityError) as e:
        return ParseResult.failed(ImportFileType.PDF, str(e) or "Failed to parse PDF")

    return ParseResult(
        expenses=list(result.expenses),
        errors=list(result.errors),
        total_rows=result.total_rows or len(result.expenses),
        file_type=ImportFileType.PDF,
    )


def extract_pdf_expenses(body: bytes) -> ParseResult:
    """Default capability: pypdf text layer, then AI structuring."""
    if not ai.ai_available():
        raise PdfExtractionError(
            "AI is not configured. PDF parsing requires AI to extract expenses."
        )

    text = extract_text(body)
    if not text.strip():
        raise PdfExtractionError(
            "Could not extract text from PDF. The file may be image-based or empty."
        )
    truncated = text[: int(settings.pdf_max_chars or 0) or 8000]
    log_event(logger, "pdf.text_extracted", chars=len(text), sent_chars=len(truncated))

    items = ai.structure_pdf_text(truncated)
    expenses = [e for e in (_to_expense(item) for item in items) if e is not None]
    return ParseResult(expenses=expenses, total_rows=len(expenses), file_type=ImportFileType.PDF)


def extract_text(body: bytes) -> str:
    try:
        reader = PdfReader(BytesIO(body))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        raise PdfExtractionError(f"Failed to read PDF: {str(e) or type(e).__name__}") from e
    return "\n".join(pages)


def _to_expense(item: dict[str, Any]) -> RawExpenseInput | None:
    raw_desc = item.get("description")
    raw_amount = item.get("amount")
    if not raw_desc or not raw_amount:
        return None
    description = str(raw_desc).strip()
    amount = parse_amount(raw_amount) or 0
    if amount <= 0 or not description:
        return None
    raw_date = item.get("date")
    date = (parse_date(raw_date) if isinstance(raw_date, str) else None) or today_iso()
    category = clean_category(item["category"]) if isinstance(item.get("category"), str) else None
    notes = item.get("notes") if isinstance(item.get("notes"), str) else None
    return RawExpenseInput(
        description=description,
        amount=amount,
        date=date,
        category=category,
        notes=notes,
    )
