from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class ImportFileType(str, enum.Enum):
    CSV = "csv"
    EXCEL = "excel"
    PDF = "pdf"
    JSON = "json"
    OFX = "ofx"


@dataclass(frozen=True)
class RawExpenseInput:
    """A parser-produced candidate expense, not yet reviewed or stored."""

    description: str
    amount: float
    date: str
    category: str | None = None
    notes: str | None = None

    def with_category(self, category: str | None) -> RawExpenseInput:
        return dataclasses.replace(self, category=category)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "description": self.description,
            "amount": self.amount,
            "date": self.date,
        }
        if self.category is not None:
            out["category"] = self.category
        if self.notes is not None:
            out["notes"] = self.notes
        return out


@dataclass(frozen=True)
class RowError:
    row: int
    message: str


@dataclass
class ParseResult:
    expenses: list[RawExpenseInput] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    total_rows: int = 0
    file_type: ImportFileType = ImportFileType.CSV

    @classmethod
    def failed(cls, file_type: ImportFileType, message: str) -> ParseResult:
        return cls(expenses=[], errors=[RowError(row=0, message=message)], file_type=file_type)

    @property
    def ok(self) -> bool:
        return bool(self.expenses)

    def to_dict(self) -> dict[str, Any]:
        return {
            "expenses": [e.to_dict() for e in self.expenses],
            "errors": [{"row": e.row, "message": e.message} for e in self.errors],
            "totalRows": self.total_rows,
            "fileType": self.file_type.value,
        }


@dataclass(frozen=True)
class CategorizedRow:
    expense: RawExpenseInput
    ai_category: str | None = None
    ai_confidence: float | None = None

    @property
    def description(self) -> str:
        return self.expense.description

    @property
    def amount(self) -> float:
        return self.expense.amount

    @property
    def date(self) -> str:
        return self.expense.date


_FALLBACK_ENCODING = "latin-1"


@dataclass(frozen=True)
class UploadedFile:
    """In-memory upload: a name for type detection, a size for limits, and the body."""

    name: str
    body: bytes

    @classmethod
    def from_bytes(cls, name: str, body: bytes) -> UploadedFile:
        return cls(name=name, body=body)

    @classmethod
    def from_path(cls, path: str | Path) -> UploadedFile:
        p = Path(path)
        return cls(name=p.name, body=p.read_bytes())

    @property
    def size(self) -> int:
        return len(self.body)

    def read(self) -> bytes:
        return self.body

    def text(self) -> str:
        try:
            return self.body.decode("utf-8-sig")
        except UnicodeDecodeError:
            # latin-1 decodes any byte sequence.
            return self.body.decode(_FALLBACK_ENCODING)
