"""Bank statement import domain service.

Two formats are understood:

- OFX: every ``<STMTTRN>`` block yields date (``DTPOSTED``, YYYYMMDD),
  amount (``TRNAMT``) and memo (``MEMO``, falling back to ``NAME``).
- Delimited text (.csv): the first line is a header from which the
  delimiter (comma or semicolon) is sniffed; every other non-empty row
  starts with ``date,description,amount``. Rows wider than the header are
  folded back, so an unquoted "300,50" in a comma file still reads as a
  decimal comma.

Lines that cannot be read are skipped; a file that yields nothing at all is
a ParseError.
"""

import csv
import logging
import re
from decimal import Decimal, InvalidOperation
from pathlib import PurePath
from typing import TYPE_CHECKING

from cashbook.domain.entities import ItemOrigin, ReconciliationStatus, StatementLine
from cashbook.domain.errors import (
    ConflictError,
    NotFoundError,
    ParseError,
    reconciliation_already_completed,
    reconciliation_not_found,
)
from cashbook.utils.amount_parser import parse_statement_amount
from cashbook.utils.date_parser import parse_compact_date, parse_date

if TYPE_CHECKING:
    from cashbook.database.base import Database

logger = logging.getLogger(__name__)

MAX_STATEMENT_BYTES = 5 * 1024 * 1024
DEFAULT_MEMO = "Imported transaction"
DELIMITERS = ",;"

_OFX_BLOCK = re.compile(r"<STMTTRN>(.*?)</STMTTRN>", re.IGNORECASE | re.DOTALL)
_AMOUNT_HEAD = re.compile(r"-?(?:R?\$|[€£])?\s*-?\d[\d.]*")
_AMOUNT_TAIL = re.compile(r"\d{1,2}")


def _ofx_field(block: str, tag: str) -> str | None:
    match = re.search(rf"<{tag}>\s*([^<\r\n]*)", block, re.IGNORECASE)
    if match is None:
        return None
    value = match.group(1).strip()
    return value or None


def parse_ofx(text: str) -> list[StatementLine]:
    """Extract statement lines from OFX markup."""
    lines = []
    for block in _OFX_BLOCK.findall(text):
        posted = _ofx_field(block, "DTPOSTED")
        amount_text = _ofx_field(block, "TRNAMT")
        if posted is None or amount_text is None:
            logger.debug("Skipping OFX block without date or amount")
            continue
        try:
            posted_date = parse_compact_date(posted)
            amount = Decimal(amount_text)
        except (ValueError, InvalidOperation):
            logger.debug("Skipping OFX block with date=%r amount=%r", posted, amount_text)
            continue
        if not amount.is_finite():
            continue
        memo = _ofx_field(block, "MEMO") or _ofx_field(block, "NAME") or DEFAULT_MEMO
        lines.append(StatementLine(date=posted_date, amount=amount, memo=memo))
    return lines


def _sniff_delimiter(header: str) -> str:
    """Detect the delimiter from the header line, comma when undecidable."""
    try:
        return csv.Sniffer().sniff(header, delimiters=DELIMITERS).delimiter
    except csv.Error:
        return ","


def _split_extra_fields(row: list[str], width: int, delimiter: str) -> list[str]:
    """Fold a row wider than the header back into date, description, amount.

    Columns after the amount keep their position from the end of the row. In
    comma files an unquoted decimal comma ("300,50") splits the amount in
    two, which is rejoined; any other surplus belongs to the description.
    """
    trailing = width - 3
    body, tail = row[: len(row) - trailing], row[len(row) - trailing :]
    if (
        delimiter == ","
        and len(body) > 3
        and _AMOUNT_HEAD.fullmatch(body[-2].strip())
        and _AMOUNT_TAIL.fullmatch(body[-1].strip())
    ):
        amount = f"{body[-2].strip()},{body[-1].strip()}"
        description = body[1:-2]
    else:
        amount = body[-1]
        description = body[1:-1]
    return [body[0], delimiter.join(description), amount, *tail]


def parse_delimited(text: str) -> list[StatementLine]:
    """Extract statement lines from comma/semicolon separated text.

    The first line is a header and decides the delimiter. Every other row
    reads date, description and amount from its first three columns; any
    further columns (a running balance, say) are ignored.
    """
    header, _, body = text.partition("\n")
    header = header.rstrip("\r")
    delimiter = _sniff_delimiter(header)
    try:
        width = max(len(next(csv.reader([header], delimiter=delimiter), [])), 3)
        rows = list(csv.reader(body.splitlines(), delimiter=delimiter))
    except csv.Error as e:
        raise ParseError(f"Malformed delimited statement: {e}")

    lines = []
    for line_number, row in enumerate(rows, start=2):
        if not any(field.strip() for field in row):
            continue
        if len(row) < 3:
            logger.debug("Line %d: expected 3 fields, got %d", line_number, len(row))
            continue
        if len(row) > width:
            row = _split_extra_fields(row, width, delimiter)
        date_text, description, amount_text = (field.strip() for field in row[:3])
        try:
            line_date = parse_date(date_text)
            amount = parse_statement_amount(amount_text)
        except ValueError as e:
            logger.debug("Line %d skipped: %s", line_number, e)
            continue
        lines.append(StatementLine(date=line_date, amount=amount, memo=description or DEFAULT_MEMO))
    return lines


_PARSERS = {
    ".ofx": parse_ofx,
    ".csv": parse_delimited,
}


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def parse_statement(
    filename: str, content: bytes | str, max_bytes: int = MAX_STATEMENT_BYTES
) -> list[StatementLine]:
    """Parse a statement file by extension.

    Raises:
        ParseError: If the extension is unsupported, the file is too large
            or no line could be read
    """
    extension = PurePath(filename).suffix.lower()
    parser = _PARSERS.get(extension)
    if parser is None:
        supported = ", ".join(sorted(_PARSERS))
        raise ParseError(f"Unsupported statement format '{extension or filename}'. Supported: {supported}")

    raw = content.encode("utf-8") if isinstance(content, str) else content
    if len(raw) > max_bytes:
        raise ParseError(f"Statement file is larger than {max_bytes} bytes")

    lines = parser(_decode(raw))
    if not lines:
        raise ParseError(f"No transactions could be read from '{filename}'")
    return lines


class StatementImportService:
    """Service for loading bank statements into a reconciliation."""

    def __init__(self, db: "Database", max_bytes: int = MAX_STATEMENT_BYTES):
        """Initialize statement import service.

        Args:
            db: Database instance
            max_bytes: Largest statement file accepted
        """
        self.db = db
        self.max_bytes = max_bytes

    def import_statement(
        self, company_id: int, reconciliation_id: int, filename: str, content: bytes | str
    ) -> int:
        """Import a statement file as unreconciled statement items.

        Returns:
            Number of items created

        Raises:
            NotFoundError: If the reconciliation does not exist
            ConflictError: If the reconciliation is already reconciled
            ParseError: If the file cannot be parsed
        """
        reconciliation = self.db.get_reconciliation(company_id, reconciliation_id)
        if reconciliation is None:
            raise NotFoundError(reconciliation_not_found(reconciliation_id))
        if reconciliation.status == ReconciliationStatus.RECONCILED:
            raise ConflictError(reconciliation_already_completed(reconciliation_id))

        lines = parse_statement(filename, content, self.max_bytes)

        with self.db.unit_of_work():
            for line in lines:
                self.db.create_reconciliation_item(
                    company_id=company_id,
                    reconciliation_id=reconciliation_id,
                    description=line.memo,
                    value=line.amount,
                    origin=ItemOrigin.STATEMENT.value,
                    date=line.date,
                )

        logger.info(
            "Imported %d statement lines from %s into reconciliation %s",
            len(lines),
            filename,
            reconciliation_id,
        )
        return len(lines)
