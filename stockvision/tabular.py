"""
Maps spreadsheet, CSV and JSON exports onto stock and sales records.

Decoding is pandas' job; this module only finds the right column for each
field by its known aliases (marketplace exports rarely agree on headers) and
coerces the cell values.
"""

import json
import logging
import math
from pathlib import Path
from typing import Any

import pandas as pd

from . import settings
from .extractors import IdFactory, timestamp_id
from .normalizers import normalize_to_iso_date, to_integer, to_number
from .schemas import SalesRecord, StockRecord
from .utils import load_csv

logger = logging.getLogger(__name__)

STOCK_ALIASES = {
    "kode_produk": ["kode_produk", "sku", "product_code", "kode"],
    "nama_produk": ["nama_produk", "nama_barang", "product_name", "nama"],
    "kategori": ["kategori", "category"],
    "satuan": ["satuan", "unit"],
    "gudang": ["gudang", "warehouse"],
    "qty": ["qty", "jumlah", "quantity", "stock", "saldo"],
}

SALES_ALIASES = {
    "kode_produk": ["kode_produk", "sku", "product_code", "kode"],
    "tanggal": ["tanggal", "date", "order_date"],
    "customer": ["customer", "buyer"],
    "faktur": ["faktur", "invoice", "order_id"],
    "nama_barang": ["nama_barang", "nama_produk", "product_name", "nama"],
    "qty": ["qty", "quantity", "jumlah"],
    "harga_satuan": ["harga_satuan", "unit_price", "price"],
    "jumlah": ["jumlah", "subtotal", "line_total"],
    "total": ["total", "total_amount", "grand_total"],
}


def _header_key(header: Any) -> str:
    return str(header).strip().lower().replace(" ", "_")


def find_column(headers: list[Any], aliases: list[str]) -> Any | None:
    """First header matching an alias, ignoring case, spaces and underscores."""
    by_key = {}
    for header in headers:
        key = _header_key(header)
        by_key.setdefault(key, header)
        by_key.setdefault(key.replace("_", ""), header)

    for alias in aliases:
        for candidate in (alias, alias.replace("_", "")):
            if candidate in by_key:
                return by_key[candidate]
    return None


def _cell(row: dict, column: Any | None) -> Any | None:
    if column is None:
        return None
    value = row.get(column)
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def _text(value: Any | None, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def normalize_stock_frame(df: pd.DataFrame) -> list[StockRecord]:
    columns = {
        field: find_column(list(df.columns), aliases)
        for field, aliases in STOCK_ALIASES.items()
    }
    records = []
    for row in df.to_dict("records"):
        kode = _text(_cell(row, columns["kode_produk"]), "")
        if not kode:
            continue
        records.append(
            StockRecord(
                kode_produk=kode,
                nama_produk=_text(_cell(row, columns["nama_produk"]), kode),
                kategori=_text(_cell(row, columns["kategori"]), settings.UNASSIGNED_CATEGORY),
                satuan=_text(_cell(row, columns["satuan"]), settings.PLACEHOLDER),
                gudang=_text(_cell(row, columns["gudang"]), settings.PLACEHOLDER),
                qty=to_integer(_cell(row, columns["qty"])),
            )
        )
    return records


def normalize_sales_frame(
    df: pd.DataFrame, id_factory: IdFactory | None = None
) -> list[SalesRecord]:
    id_factory = id_factory or timestamp_id
    columns = {
        field: find_column(list(df.columns), aliases)
        for field, aliases in SALES_ALIASES.items()
    }
    records = []
    for index, row in enumerate(df.to_dict("records")):
        kode = _text(_cell(row, columns["kode_produk"]), "")
        if not kode:
            continue
        records.append(
            SalesRecord(
                tanggal=normalize_to_iso_date(_cell(row, columns["tanggal"])),
                customer=_text(_cell(row, columns["customer"]), "Unknown"),
                faktur=_text(_cell(row, columns["faktur"]), "") or id_factory("sale", index),
                kode_produk=kode,
                nama_barang=_text(_cell(row, columns["nama_barang"]), kode),
                qty=to_integer(_cell(row, columns["qty"])),
                harga_satuan=float(to_number(_cell(row, columns["harga_satuan"]), 0)),
                jumlah=float(to_number(_cell(row, columns["jumlah"]), 0)),
                total=float(to_number(_cell(row, columns["total"]), 0)),
            )
        )
    return records


def load_table(path: Path) -> pd.DataFrame | None:
    """Decodes a CSV, Excel (.xlsx) or JSON (array of objects) export into a DataFrame."""
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return load_csv(path)

    try:
        if suffix == ".xlsx":
            return pd.read_excel(path)
        if suffix == ".json":
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
            if isinstance(payload, dict):
                payload = payload.get("data", [payload])
            return pd.DataFrame(payload)
    except (OSError, ValueError) as e:
        logger.error(f"ERROR: Could not read {path.name}. Reason: {e}")
        return None

    logger.error(f"ERROR: Unsupported file type: {path.name}")
    return None
