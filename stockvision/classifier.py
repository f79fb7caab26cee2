import logging
from typing import Literal

from . import settings

logger = logging.getLogger(__name__)

DocumentType = Literal["sales", "stock"]


def _keyword_hits(snippet: str, keywords: list[str]) -> int:
    return sum(1 for keyword in keywords if keyword in snippet)


def detect_document_type(text: str) -> DocumentType | None:
    """
    Labels extracted report text as a sales ledger or a stock ledger.

    Each keyword set scores one point per keyword present in the head of the
    document. A tie falls back to the two report titles we know
    ("Daftar Saldo Stock", "Penjualan"); no signal at all returns None.
    """
    snippet = text[: settings.CLASSIFIER_SCAN_LIMIT].lower()
    sales_hits = _keyword_hits(snippet, settings.SALES_KEYWORDS)
    stock_hits = _keyword_hits(snippet, settings.STOCK_KEYWORDS)
    logger.debug(f"Keyword hits: sales={sales_hits}, stock={stock_hits}")

    if sales_hits == 0 and stock_hits == 0:
        return None

    if sales_hits == stock_hits:
        if settings.STOCK_ANCHOR in snippet:
            return "stock"
        if settings.SALES_ANCHOR in snippet:
            return "sales"
        return None

    return "sales" if sales_hits > stock_hits else "stock"
