import pytest

from stockvision.schemas import SalesRecord, StockRecord
from stockvision.storage import DataStore, FileTier, MemoryCache

SALES_REPORT = """LAPORAN PENJUALAN
Periode Oktober 2025
Tanggal  Customer  Faktur  Kode Produk  Nama Barang  Qty  Harga  Jumlah  Total
01/10/2025  MW SHOPEE  JL-050222  BN02-12H  BONEKA 12 INC HIJAU  1  44.900  44.900  44.900
02/10/2025  TOKOPEDIA  JL-050223  BN02-13H  BONEKA 13 INC  2  44.900  89.800  89.800
    lanjutan keterangan tanpa tanggal
03/10/2025  SHOPEE  JL-050224  KP-01  KIPAS  ANGIN  3  100.000  300.000  300.000
Total  6  434.700
Halaman 1 dari 1
"""

STOCK_REPORT = """DAFTAR SALDO STOCK
Per 01/10/2025
Kode  Nama Produk  Kategori  Satuan  Gudang  Qty
1006-12F  1006 12 INC FANTA  SOFT12  PCS  51B  3
1006-12M  1006 12 INC MERAH  SOFT12  PCS  51B  -2
Kode  Nama Produk  Kategori  Satuan  Gudang  Qty
BN02-12H  BONEKA  PCS  52A  10
Grand Total  11
Printed on 01/10/2025
"""


def _stock(kode_produk, qty, kategori="SOFT12", gudang="51B", nama_produk=None, satuan="PCS"):
    return StockRecord(
        kode_produk=kode_produk,
        nama_produk=nama_produk or kode_produk,
        kategori=kategori,
        satuan=satuan,
        gudang=gudang,
        qty=qty,
    )


def _sale(
    kode_produk,
    qty,
    tanggal="2025-10-01",
    total=None,
    harga_satuan=44900.0,
    jumlah=None,
    faktur=None,
    customer="MW SHOPEE",
    nama_barang=None,
):
    subtotal = qty * harga_satuan
    return SalesRecord(
        tanggal=tanggal,
        customer=customer,
        faktur=faktur or f"JL-{kode_produk}-{tanggal}-{qty}",
        kode_produk=kode_produk,
        nama_barang=nama_barang or kode_produk,
        qty=qty,
        harga_satuan=harga_satuan,
        jumlah=subtotal if jumlah is None else jumlah,
        total=subtotal if total is None else total,
    )


@pytest.fixture
def make_stock():
    return _stock


@pytest.fixture
def make_sale():
    return _sale


@pytest.fixture
def sequential_ids():
    """Deterministic stand-in for the timestamp id factory."""
    issued = []

    def factory(prefix, index):
        issued.append((prefix, index))
        return f"{prefix}-test-{index}"

    factory.issued = issued
    return factory


@pytest.fixture
def memory_cache():
    cache = MemoryCache()
    yield cache
    cache.reset()


@pytest.fixture
def file_store(tmp_path, memory_cache):
    return DataStore(memory_cache, file_tier=FileTier(tmp_path / "data"))
