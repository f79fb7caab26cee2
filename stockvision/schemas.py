from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class StockVisionError(Exception):
    """Base class for errors surfaced to callers as a whole-operation failure."""


class PayloadValidationError(StockVisionError):
    """A full dataset replace was rejected; carries the first validation failure."""

    def __init__(self, dataset: str, error: ValidationError):
        first = error.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        self.dataset = dataset
        self.location = location
        self.detail = first["msg"]
        super().__init__(f"Invalid {dataset} payload at '{location}': {first['msg']}")


class StockRecord(BaseModel):
    """
    One row of a stock ledger ("Daftar Saldo Stock").
    The field names are the wire-level JSON contract shared with the storage layer.
    """

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    kode_produk: str
    nama_produk: str
    kategori: str
    satuan: str
    gudang: str
    qty: int


class SalesRecord(BaseModel):
    """One sales transaction line. `tanggal` holds an ISO 8601 date string."""

    model_config = ConfigDict(extra="forbid", strict=True, frozen=True)

    tanggal: str
    customer: str
    faktur: str
    kode_produk: str
    nama_barang: str
    qty: int
    harga_satuan: float
    jumlah: float
    total: float


class LinkedProduct(BaseModel):
    """A stock record joined with every sale of the same product code."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    kode_produk: str
    nama_produk: str
    kategori: str
    satuan: str
    gudang: str
    qty: int
    total_sales: int = Field(default=0, ge=0, alias="totalSales")
    # Negative when more units were sold than the ledger holds.
    remaining: int
    transactions: tuple[SalesRecord, ...] = ()


class NamedValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: int


class TrendPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    value: float


class Totals(BaseModel):
    """
    Headline figures of the dashboard.
    `monthly_sales_qty` is the number of units sold in the reference month
    (the month of the most recent sale), not stock left after those sales.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    stock_qty: int = Field(default=0, alias="stockQty")
    monthly_sales_qty: int = Field(default=0, alias="monthlySalesQty")
    monthly_sales_value: float = Field(default=0.0, alias="monthlySalesValue")


class DashboardSummary(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    totals: Totals = Field(default_factory=Totals)
    best_sellers: list[LinkedProduct] = Field(default_factory=list, alias="bestSellers")
    low_stock: list[LinkedProduct] = Field(default_factory=list, alias="lowStock")
    stock_by_category: list[NamedValue] = Field(
        default_factory=list, alias="stockByCategory"
    )
    sales_trend: list[TrendPoint] = Field(default_factory=list, alias="salesTrend")
    warehouse_distribution: list[NamedValue] = Field(
        default_factory=list, alias="warehouseDistribution"
    )
    products: list[LinkedProduct] = Field(default_factory=list)


class SalesConversion(BaseModel):
    type: Literal["sales"] = "sales"
    rows: list[SalesRecord]

    @property
    def count(self) -> int:
        return len(self.rows)


class StockConversion(BaseModel):
    type: Literal["stock"] = "stock"
    rows: list[StockRecord]

    @property
    def count(self) -> int:
        return len(self.rows)


ConversionResult = Union[SalesConversion, StockConversion]

_STOCK_PAYLOAD = TypeAdapter(list[StockRecord])
_SALES_PAYLOAD = TypeAdapter(list[SalesRecord])


def validate_stock_payload(payload: Any) -> list[StockRecord]:
    """Validates a full stock dataset. Nothing is accepted unless every row is valid."""
    try:
        return _STOCK_PAYLOAD.validate_python(payload)
    except ValidationError as e:
        raise PayloadValidationError("stock", e) from e


def validate_sales_payload(payload: Any) -> list[SalesRecord]:
    """Validates a full sales dataset. Nothing is accepted unless every row is valid."""
    try:
        return _SALES_PAYLOAD.validate_python(payload)
    except ValidationError as e:
        raise PayloadValidationError("sales", e) from e
