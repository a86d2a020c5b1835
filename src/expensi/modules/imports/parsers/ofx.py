"""OFX/QFX bank export parsing.

Transactions are pulled out of the file by a transaction source. Well-formed
files are read block by block with regular expressions; SGML-style exports
that never close their tags fall back to a line scanner. Both sources yield
plain tag dictionaries so the expense mapping below does not care which one
ran.
"""

from __future__ import annotations

import re

from expensi.modules.imports.fields import parse_amount, today_iso
from expensi.modules.imports.models import ImportFileType, ParseResult, RawExpenseInput, RowError

SKIPPED_TRANSACTION_TYPES = {"CREDIT", "DEP"}
TRANSACTION_TAGS = ("TRNTYPE", "TRNAMT", "NAME", "MEMO", "PAYEE", "DTPOSTED", "FITID")

_BLOCK_RE = re.compile(r"<STMTTRN>([\s\S]*?)</STMTTRN>", re.I)
_SGML_TAG_RE = re.compile(r"^<(\w+)>(.+)")
_CLOSING_TAG_RE = re.compile(r"</\w+>\s*$")
_BANK_PREFIX_RE = re.compile(r"^(POS |DEBIT |ACH |CHECK |WIRE )", re.I)
_WHITESPACE_RE = re.compile(r"\s+")
_OFX_DATE_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})")


class OfxTransactionSource:
    name = "base"

    def transactions(self, text: str) -> list[dict[str, str]]:  # pragma: no cover
        raise NotImplementedError


class BlockTagSource(OfxTransactionSource):
    """Reads every closed ``<STMTTRN>...</STMTTRN>`` block."""

    name = "blocks"

    def transactions(self, text: str) -> list[dict[str, str]]:
        out: list[dict[str, str]] = []
        for m in _BLOCK_RE.finditer(text):
            block = m.group(1)
            txn: dict[str, str] = {}
            for tag in TRANSACTION_TAGS:
                value = _tag_value(block, tag)
                if value:
                    txn[tag] = value
            out.append(txn)
        return out


class SgmlLineSource(OfxTransactionSource):
    """Line scanner for exports whose ``<STMTTRN>`` sections are never closed."""

    name = "sgml"

    def transactions(self, text: str) -> list[dict[str, str]]:
        lines = [ln.strip() for ln in text.split("\n")]
        out: list[dict[str, str]] = []
        i = 0
        while i < len(lines):
            if not lines[i].startswith("<STMTTRN>"):
                i += 1
                continue
            txn: dict[str, str] = {}
            i += 1
            while i < len(lines) and not _ends_section(lines[i]):
                m = _SGML_TAG_RE.match(lines[i])
                if m:
                    value = _CLOSING_TAG_RE.sub("", m.group(2)).strip()
                    txn.setdefault(m.group(1).upper(), value)
                i += 1
            out.append(txn)
        return out


def _ends_section(line: str) -> bool:
    return line.startswith(("<STMTTRN>", "</STMTTRN>", "</BANKTRANLIST>"))


def _tag_value(block: str, tag: str) -> str:
    m = re.search(rf"<{tag}>([^<\n]+)", block)
    return m.group(1).strip() if m else ""


DEFAULT_SOURCES: tuple[OfxTransactionSource, ...] = (BlockTagSource(), SgmlLineSource())


def read_transactions(
    text: str, sources: tuple[OfxTransactionSource, ...] = DEFAULT_SOURCES
) -> list[dict[str, str]]:
    """Return the transactions found by the first source that finds any."""
    for source in sources:
        txns = source.transactions(text)
        if txns:
            return txns
    return []


def parse_ofx(text: str) -> ParseResult:
    txns = read_transactions(text)
    if not txns:
        return ParseResult.failed(ImportFileType.OFX, "No transactions found in OFX/QFX file.")

    expenses: list[RawExpenseInput] = []
    errors: list[RowError] = []
    for row_number, txn in enumerate(txns, start=1):
        # Deposits are income, not expenses: dropped without an error.
        if txn.get("TRNTYPE", "").upper() in SKIPPED_TRANSACTION_TYPES:
            continue

        raw_amount = txn.get("TRNAMT", "")
        amount = parse_amount(raw_amount)
        name = txn.get("NAME") or txn.get("MEMO") or txn.get("PAYEE") or ""

        if amount is None or amount == 0:
            errors.append(RowError(row=row_number, message=f'Invalid amount: "{raw_amount}"'))
            continue
        if not name:
            errors.append(RowError(row=row_number, message="No description found in transaction"))
            continue

        expenses.append(
            RawExpenseInput(
                description=clean_description(name),
                amount=amount,
                date=parse_ofx_date(txn.get("DTPOSTED", "")) or today_iso(),
            )
        )

    return ParseResult(
        expenses=expenses,
        errors=errors,
        total_rows=len(txns),
        file_type=ImportFileType.OFX,
    )


def parse_ofx_date(value: str) -> str | None:
    """``YYYYMMDD[HHMMSS[.XXX][TZ]]`` -> ``YYYY-MM-DD`` using the first 8 characters."""
    m = _OFX_DATE_RE.match(value or "")
    if not m:
        return None
    y, mo, d = m.groups()
    return f"{y}-{mo}-{d}"


def clean_description(name: str) -> str:
    collapsed = _WHITESPACE_RE.sub(" ", name)
    return _BANK_PREFIX_RE.sub("", collapsed).strip()
