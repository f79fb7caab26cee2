"""
Table recovery from the plain text of stock and sales PDF reports.

The text carries no layout, so each extractor finds the column header by its
keyword sequence, then walks the following lines, splitting them into columns
and assembling typed records. Rows that don't fit the expected shape are
dropped: the result is best-effort, never an exception for a single line.
"""

import logging
import re
import time
from abc import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

from . import settings
from .classifier import DocumentType, detect_document_type
from .normalizers import normalize_to_iso_date, to_integer, to_number
from .schemas import (
    ConversionResult,
    SalesConversion,
    SalesRecord,
    StockConversion,
    StockRecord,
)
from .text import DEFAULT_SPLITTER, ColumnSplitter, is_footer_line, sanitize_lines

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", SalesRecord, StockRecord)

# (prefix, row index) -> unique id
IdFactory = Callable[[str, int], str]

SALES_HEADER_PATTERN = re.compile(
    r"tanggal.+customer.+faktur.+kode.+(produk|barang).+qty.+(harga|jumlah|total)",
    re.IGNORECASE,
)
STOCK_HEADER_PATTERN = re.compile(
    r"kode.+nama.+kategori.+satuan.+gudang.+qty", re.IGNORECASE
)
DATE_PATTERN = re.compile(r"(\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4})|(\d{4}[/\-]\d{2}[/\-]\d{2})")
SALES_TOTAL_PATTERN = re.compile(r"^\s*(total|subtotal|grand total)", re.IGNORECASE)
STOCK_TOTAL_PATTERN = re.compile(r"^\s*(total|grand total)", re.IGNORECASE)
NUMERIC_CELL_PATTERN = re.compile(r"^(?:rp\.?\s*)?-?[\d.,]*\d[\d.,]*$", re.IGNORECASE)


def timestamp_id(prefix: str, index: int) -> str:
    """Default id factory: '<prefix>-<epoch ms>-<row index>'."""
    return f"{prefix}-{int(time.time() * 1000)}-{index}"


class TableExtractor(ABC, Generic[RecordT]):
    """
    Header detection and the line filter shared by both report types.
    Subclasses describe their header, their validity rules and how columns
    become a record.
    """

    header_pattern: re.Pattern
    total_pattern: re.Pattern
    min_line_length: int
    min_columns: int

    def __init__(
        self,
        splitter: ColumnSplitter | None = None,
        id_factory: IdFactory | None = None,
    ):
        self.splitter = splitter or DEFAULT_SPLITTER
        self.id_factory = id_factory or timestamp_id

    def find_header(self, lines: list[str]) -> int | None:
        for index, line in enumerate(lines):
            if self.header_pattern.search(line):
                return index
        return None

    def is_candidate(self, line: str) -> bool:
        if len(line) < self.min_line_length:
            return False
        if self.total_pattern.search(line) or is_footer_line(line):
            return False
        # Multi-page reports repeat the header on every page.
        return not self.header_pattern.search(line)

    def run(self, text: str) -> list[RecordT]:
        lines = sanitize_lines(text)
        header_index = self.find_header(lines)
        if header_index is None:
            logger.debug(f"{type(self).__name__}: no header found, scanning every line.")
            data_lines = lines
        else:
            data_lines = lines[header_index + 1 :]

        rows: list[RecordT] = []
        for line in data_lines:
            if not self.is_candidate(line):
                continue

            columns = self.splitter.split_columns(line)
            if len(columns) < self.min_columns:
                logger.debug(f"Skipping short row ({len(columns)} columns): {line!r}")
                continue

            record = self.build_record(columns, len(rows))
            if record is None:
                logger.debug(f"Skipping unusable row: {line!r}")
                continue
            rows.append(record)

        return rows

    @abstractmethod
    def build_record(self, columns: list[str], index: int) -> RecordT | None:
        """Assembles one record from split columns, or None to drop the row."""
        pass


class SalesExtractor(TableExtractor[SalesRecord]):
    """Rows of a "Laporan Penjualan": date, customer, invoice, code, name..., numbers."""

    header_pattern = SALES_HEADER_PATTERN
    total_pattern = SALES_TOTAL_PATTERN
    min_line_length = 5
    min_columns = 7
    leading_columns = 4
    max_numeric_columns = 4

    def is_candidate(self, line: str) -> bool:
        # Every real sales line carries a transaction date.
        return super().is_candidate(line) and bool(DATE_PATTERN.search(line))

    def _numeric_tail_length(self, columns: list[str]) -> int:
        limit = min(self.max_numeric_columns, len(columns) - self.leading_columns)
        length = 0
        while length < limit and NUMERIC_CELL_PATTERN.match(columns[-(length + 1)]):
            length += 1
        return length

    def build_record(self, columns: list[str], index: int) -> SalesRecord | None:
        tail_length = self._numeric_tail_length(columns)
        if tail_length < 2:
            return None

        tail = columns[-tail_length:]
        tanggal_raw, customer, faktur, kode_produk = columns[: self.leading_columns]
        middle = columns[self.leading_columns : len(columns) - tail_length]

        kode_produk = kode_produk.strip()
        if not kode_produk:
            return None

        qty = to_integer(tail[0])
        if tail_length == 4:
            harga_satuan = to_number(tail[1], 0)
            jumlah = to_number(tail[2], 0)
            total = to_number(tail[3], 0)
        elif tail_length == 3:
            harga_satuan = to_number(tail[1], 0)
            total = to_number(tail[2], 0)
            jumlah = total
        else:
            total = to_number(tail[1], 0)
            jumlah = total
            harga_satuan = total / qty if qty else 0

        date_match = DATE_PATTERN.search(tanggal_raw)
        nama_barang = " ".join(middle).strip()

        return SalesRecord(
            tanggal=normalize_to_iso_date(date_match.group(0) if date_match else tanggal_raw),
            customer=customer.strip() or "Unknown",
            faktur=faktur.strip() or self.id_factory("pdf-sale", index),
            kode_produk=kode_produk,
            nama_barang=nama_barang or kode_produk,
            qty=qty,
            harga_satuan=float(harga_satuan),
            jumlah=float(jumlah),
            total=float(total),
        )


class StockExtractor(TableExtractor[StockRecord]):
    """Rows of a "Daftar Saldo Stock": code, name..., category, unit, warehouse, qty."""

    header_pattern = STOCK_HEADER_PATTERN
    total_pattern = STOCK_TOTAL_PATTERN
    min_line_length = 4
    min_columns = 4

    def build_record(self, columns: list[str], index: int) -> StockRecord | None:
        # The header lists category -> unit -> warehouse -> qty, so pop in reverse.
        fields = list(columns)
        qty_field = fields.pop()
        gudang = fields.pop()
        satuan = fields.pop()
        kategori = fields.pop()
        if not fields:
            return None

        kode_produk = fields.pop(0).strip()
        if not kode_produk:
            return None
        nama_produk = " ".join(fields).strip()

        return StockRecord(
            kode_produk=kode_produk,
            nama_produk=nama_produk or kode_produk,
            kategori=kategori.strip() or settings.UNASSIGNED_CATEGORY,
            satuan=satuan.strip() or settings.PLACEHOLDER,
            gudang=gudang.strip() or settings.PLACEHOLDER,
            qty=to_integer(qty_field),
        )


EXTRACTOR_REGISTRY: dict[str, type[TableExtractor]] = {
    "sales": SalesExtractor,
    "stock": StockExtractor,
}


def extract_rows(
    document_type: DocumentType,
    text: str,
    splitter: ColumnSplitter | None = None,
    id_factory: IdFactory | None = None,
) -> list[SalesRecord] | list[StockRecord]:
    """Runs the extractor for a known document type. May return an empty list."""
    extractor = EXTRACTOR_REGISTRY[document_type](splitter=splitter, id_factory=id_factory)
    return extractor.run(text)


def classify_and_extract(
    text: str,
    splitter: ColumnSplitter | None = None,
    id_factory: IdFactory | None = None,
) -> ConversionResult | None:
    """
    Classifies the text and extracts its table.
    Returns None when the document type is unknown or no row could be recovered.
    """
    document_type = detect_document_type(text)
    if document_type is None:
        logger.warning("⚠️ Unable to detect document type.")
        return None

    rows = extract_rows(document_type, text, splitter=splitter, id_factory=id_factory)
    if not rows:
        logger.warning(f"⚠️ Detected a {document_type} report but no rows could be extracted.")
        return None

    if document_type == "sales":
        return SalesConversion(rows=rows)
    return StockConversion(rows=rows)
