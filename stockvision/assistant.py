"""
Prompt construction for the inventory assistant and the call to the Gemini
text-generation API. The model itself is an external service.
"""

import logging
from typing import Literal, TypedDict

import requests

from . import settings
from .schemas import SalesRecord, StockRecord, StockVisionError

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I could not generate a response right now."


class AssistantError(StockVisionError):
    pass


class ChatTurn(TypedDict):
    role: Literal["user", "assistant"]
    content: str


def build_prompt(
    question: str,
    history: list[ChatTurn],
    stock: list[StockRecord],
    sales: list[SalesRecord],
) -> str:
    stock_context = "\n".join(
        f"{r.kode_produk} ({r.nama_produk}) | qty {r.qty} | gudang {r.gudang} | kategori {r.kategori}"
        for r in stock[: settings.PROMPT_RECORD_LIMIT]
    )
    sales_context = "\n".join(
        f"{s.tanggal} | {s.customer} bought {s.qty} of {s.kode_produk} ({s.nama_barang}) totaling {s.total}"
        for s in sales[: settings.PROMPT_RECORD_LIMIT]
    )
    conversation = "\n".join(
        f"{turn['role'].upper()}: {turn['content']}"
        for turn in history[-settings.PROMPT_HISTORY_LIMIT :]
    )

    return f"""
You are Sakura, a helpful assistant for the Aomori Vision inventory platform. Use the provided stock and sales data to answer user questions. Be concise and cite quantities or figures when available. If data is insufficient, explain what is missing.

Recent conversation:
{conversation or "No prior conversation."}

Stock dataset snapshot:
{stock_context or "No stock records available."}

Sales dataset snapshot:
{sales_context or "No sales records available."}

User question: {question}

Respond with actionable guidance grounded in the data above.
""".strip()


def ask_assistant(
    question: str,
    history: list[ChatTurn],
    stock: list[StockRecord],
    sales: list[SalesRecord],
    api_key: str | None = None,
    model: str | None = None,
    session: requests.Session | None = None,
) -> str:
    """Sends the grounded prompt to Gemini and returns the joined reply text."""
    api_key = api_key or settings.GEMINI_API_KEY
    if not api_key:
        raise AssistantError("Missing GEMINI_API_KEY environment variable.")

    question = (question or "").strip()
    if not question:
        raise AssistantError("Prompt is required.")

    prompt = build_prompt(question, history, stock, sales)
    url = f"{settings.GEMINI_ENDPOINT}/{model or settings.GEMINI_MODEL}:generateContent"
    payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    http = session or requests
    try:
        response = http.post(
            url, params={"key": api_key}, json=payload, timeout=settings.REQUEST_TIMEOUT
        )
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Gemini API request failed: {e}")
        raise AssistantError("Gemini API request failed.") from e
    except ValueError as e:
        raise AssistantError("Gemini API returned a non-JSON response.") from e

    parts = [
        (part.get("text") or "").strip()
        for candidate in data.get("candidates") or []
        for part in (candidate.get("content") or {}).get("parts") or []
    ]
    text = "\n\n".join(part for part in parts if part).strip()
    return text or FALLBACK_REPLY
