"""
Links stock and sales records by product code and derives the dashboard figures.

Everything is recomputed from the two dataset snapshots on each call; the
inputs are never modified and the returned summary is immutable.
"""

import logging
from datetime import date, datetime
from typing import Callable, Iterable

import pandas as pd

from . import settings
from .normalizers import parse_flexible_date, to_number
from .schemas import (
    DashboardSummary,
    LinkedProduct,
    NamedValue,
    SalesRecord,
    StockRecord,
    Totals,
    TrendPoint,
)

logger = logging.getLogger(__name__)


def _clamped(value) -> int | float:
    return max(to_number(value, 0), 0)


def sale_value(sale: SalesRecord) -> float:
    """Best-effort monetary value: total, else line subtotal, else qty x unit price, else 0."""
    total = to_number(sale.total)
    if total is not None:
        return total

    jumlah = to_number(sale.jumlah)
    if jumlah is not None:
        return jumlah

    qty = to_number(sale.qty)
    unit_price = to_number(sale.harga_satuan)
    if qty is not None and unit_price is not None:
        return qty * unit_price

    return 0


def fold_stock(stock: Iterable[StockRecord]) -> dict[str, StockRecord]:
    """
    One record per product code. Quantities of repeated codes (one row per
    warehouse) are summed after clamping; the last row's descriptive fields win.
    """
    folded: dict[str, StockRecord] = {}
    for record in stock:
        existing = folded.get(record.kode_produk)
        qty = max(record.qty, 0)
        if existing is not None:
            qty += existing.qty
        folded[record.kode_produk] = record.model_copy(update={"qty": qty})
    return folded


def group_sales(sales: Iterable[SalesRecord]) -> dict[str, list[SalesRecord]]:
    grouped: dict[str, list[SalesRecord]] = {}
    for sale in sales:
        grouped.setdefault(sale.kode_produk, []).append(sale)
    return grouped


def link_products(
    stock_by_code: dict[str, StockRecord], sales_by_code: dict[str, list[SalesRecord]]
) -> list[LinkedProduct]:
    """Builds one LinkedProduct per code seen in either dataset (stock codes first)."""
    codes = list(stock_by_code)
    codes.extend(code for code in sales_by_code if code not in stock_by_code)

    products = []
    for code in codes:
        transactions = sales_by_code.get(code, [])
        stock_record = stock_by_code.get(code)
        if stock_record is None:
            stock_record = StockRecord(
                kode_produk=code,
                nama_produk=transactions[0].nama_barang if transactions else "",
                kategori=settings.UNASSIGNED_CATEGORY,
                satuan=settings.PLACEHOLDER,
                gudang=settings.PLACEHOLDER,
                qty=0,
            )

        total_sales = int(sum(_clamped(sale.qty) for sale in transactions))
        products.append(
            LinkedProduct(
                **stock_record.model_dump(),
                total_sales=total_sales,
                remaining=stock_record.qty - total_sales,
                transactions=tuple(transactions),
            )
        )
    return products


def reference_month(sales: Iterable[SalesRecord], today: date | None = None) -> date:
    """The month of the most recent parseable sale, or of today when none parses."""
    latest: datetime | None = None
    for sale in sales:
        sale_date = parse_flexible_date(sale.tanggal)
        if sale_date is not None and (latest is None or sale_date > latest):
            latest = sale_date
    if latest is None:
        return today or date.today()
    return latest.date()


def monthly_sales(sales: Iterable[SalesRecord], reference: date) -> list[SalesRecord]:
    selected = []
    for sale in sales:
        sale_date = parse_flexible_date(sale.tanggal)
        if sale_date is None:
            continue
        if (sale_date.year, sale_date.month) == (reference.year, reference.month):
            selected.append(sale)
    return selected


def aggregate_by(
    products: list[LinkedProduct], key: Callable[[LinkedProduct], str]
) -> list[NamedValue]:
    """Sums clamped quantities per key, largest first (ties keep first-seen order)."""
    if not products:
        return []

    df = pd.DataFrame(
        {
            "name": [key(product) for product in products],
            "value": [max(product.qty, 0) for product in products],
        }
    )
    grouped = df.groupby("name", sort=False)["value"].sum().reset_index()
    grouped = grouped.sort_values("value", ascending=False, kind="stable")
    return [
        NamedValue(name=str(row["name"]), value=int(row["value"]))
        for row in grouped.to_dict("records")
    ]


def sales_trend(sales: Iterable[SalesRecord]) -> list[TrendPoint]:
    """Daily sales value. Sales whose date can't be parsed are left out."""
    points = []
    for sale in sales:
        sale_date = parse_flexible_date(sale.tanggal)
        if sale_date is None:
            continue
        points.append({"date": sale_date.date().isoformat(), "value": float(sale_value(sale))})

    if not points:
        return []

    df = pd.DataFrame(points)
    daily = df.groupby("date", sort=True)["value"].sum().reset_index()
    return [
        TrendPoint(date=str(row["date"]), value=float(row["value"]))
        for row in daily.to_dict("records")
    ]


def reconcile(
    stock: list[StockRecord], sales: list[SalesRecord], today: date | None = None
) -> DashboardSummary:
    """
    Joins the stock and sales datasets into the dashboard summary.
    Empty inputs give an all-zero summary. `today` only matters when no sale date parses.
    """
    stock_by_code = fold_stock(stock)
    sales_by_code = group_sales(sales)
    products = link_products(stock_by_code, sales_by_code)

    stock_qty = sum(max(product.qty, 0) for product in products)

    reference = reference_month(sales, today=today)
    this_month = monthly_sales(sales, reference)
    monthly_qty = int(sum(_clamped(sale.qty) for sale in this_month))
    monthly_value = float(sum(max(sale_value(sale), 0) for sale in this_month))

    best_sellers = sorted(products, key=lambda p: p.total_sales, reverse=True)[
        : settings.BEST_SELLER_LIMIT
    ]
    low_stock = sorted(
        (
            p
            for p in products
            if p.qty < settings.LOW_STOCK_THRESHOLD
            or p.remaining < settings.LOW_STOCK_THRESHOLD
        ),
        key=lambda p: p.remaining,
    )[: settings.LOW_STOCK_LIMIT]

    logger.debug(
        f"Reconciled {len(products)} products "
        f"(reference month {reference:%Y-%m}, {len(this_month)} sales this month)."
    )

    return DashboardSummary(
        totals=Totals(
            stock_qty=stock_qty,
            monthly_sales_qty=monthly_qty,
            monthly_sales_value=monthly_value,
        ),
        best_sellers=best_sellers,
        low_stock=low_stock,
        stock_by_category=aggregate_by(
            products, lambda p: p.kategori or settings.UNKNOWN_CATEGORY
        ),
        sales_trend=sales_trend(sales),
        warehouse_distribution=aggregate_by(
            products, lambda p: p.gudang or settings.UNKNOWN_WAREHOUSE
        ),
        products=products,
    )
