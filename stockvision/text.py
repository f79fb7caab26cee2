import re
from abc import ABC, abstractmethod

_BULLETS = re.compile(r"[•▪·]")
_COLUMN_GAP = re.compile(r"\s{2,}")
_FOOTER = re.compile(r"(halaman|page\s+\d+|tanggal cetak|printed on)", re.IGNORECASE)


def sanitize_lines(text: str) -> list[str]:
    """
    Splits extracted PDF text into cleaned, non-empty lines.
    Tabs widen to four spaces so they still read as a column gap.
    """
    lines = []
    for raw_line in text.splitlines():
        line = raw_line.replace("\u00a0", " ").replace("\t", "    ")
        line = _BULLETS.sub("", line).strip()
        if line:
            lines.append(line)
    return lines


def is_footer_line(line: str) -> bool:
    """Page numbers and print-date stamps."""
    return bool(_FOOTER.search(line))


class ColumnSplitter(ABC):
    """
    Strategy that turns one text line into its column fields.
    Extractors only depend on this interface, so a layout-aware splitter can replace
    the whitespace heuristic without touching row assembly.
    """

    @abstractmethod
    def split_columns(self, line: str) -> list[str]:
        pass


class WhitespaceColumnSplitter(ColumnSplitter):
    """
    Pipes win when present; otherwise a gap of two or more spaces separates columns.
    Single spaces stay inside a field ("MW SHOPEE"), since PDF text extraction
    renders column gaps wider than word gaps.
    """

    def split_columns(self, line: str) -> list[str]:
        fields = line.split("|") if "|" in line else _COLUMN_GAP.split(line)
        return [field.strip() for field in fields if field.strip()]


DEFAULT_SPLITTER = WhitespaceColumnSplitter()


def split_columns(line: str) -> list[str]:
    return DEFAULT_SPLITTER.split_columns(line)
