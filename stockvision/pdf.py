import io
import logging
from typing import Callable

import pdfplumber
from pdfminer.psparser import PSException
from pdfplumber.utils.exceptions import PdfminerException

from .extractors import IdFactory, classify_and_extract
from .schemas import ConversionResult
from .text import ColumnSplitter

logger = logging.getLogger(__name__)


def extract_pdf_text(file_bytes: bytes) -> str:
    """Plain text of every page, joined by newlines. Scanned pages yield nothing."""
    pages = []
    with pdfplumber.open(io.BytesIO(file_bytes)) as pdf:
        for page in pdf.pages:
            text = page.extract_text(x_tolerance=3, y_tolerance=3)
            if text and text.strip():
                pages.append(text)
    return "\n".join(pages)


def convert_pdf(
    file_bytes: bytes,
    file_name: str | None = None,
    text_extractor: Callable[[bytes], str] = extract_pdf_text,
    splitter: ColumnSplitter | None = None,
    id_factory: IdFactory | None = None,
) -> ConversionResult | None:
    """
    Turns an uploaded stock or sales PDF into typed rows.
    Returns None when the file can't be read, the report type can't be recognized
    or no table was found.
    """
    label = file_name or "PDF buffer"
    try:
        text = text_extractor(file_bytes)
    except (PdfminerException, PSException) as e:
        logger.error(f"❌ Could not read {label} as a PDF. Reason: {e}")
        return None

    if not text.strip():
        logger.warning(f"⚠️ No extractable text in {label}. Scanned PDFs are not supported.")
        return None

    result = classify_and_extract(text, splitter=splitter, id_factory=id_factory)
    if result is None:
        logger.warning(f"⚠️ Could not convert {label}. Please verify the template.")
        return None

    logger.info(f"✅ Parsed {result.count} {result.type} rows from {label}")
    return result
