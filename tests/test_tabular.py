import json

import pandas as pd

from stockvision.tabular import (
    find_column,
    load_table,
    normalize_sales_frame,
    normalize_stock_frame,
)


def test_find_column_ignores_case_spaces_and_underscores():
    headers = ["No", "Kode Produk", "NAMA_BARANG", "OrderID"]
    assert find_column(headers, ["kode_produk", "sku"]) == "Kode Produk"
    assert find_column(headers, ["nama_barang"]) == "NAMA_BARANG"
    assert find_column(headers, ["order_id"]) == "OrderID"
    assert find_column(headers, ["gudang", "warehouse"]) is None


def test_find_column_prefers_alias_order():
    assert find_column(["Kode", "SKU"], ["kode_produk", "sku", "kode"]) == "SKU"


def test_stock_csv_export(tmp_path):
    path = tmp_path / "stock_export.csv"
    path.write_text(
        "SKU,Product Name,Category,Unit,Warehouse,Stock\n"
        'A1,Kipas Angin,ELEKTRONIK,PCS,G1,"1.250"\n'
        ",Tanpa Kode,ELEKTRONIK,PCS,G1,3\n"
        "B2,,,,,\n",
        encoding="utf-8",
    )

    records = normalize_stock_frame(load_table(path))

    assert [r.kode_produk for r in records] == ["A1", "B2"]
    kipas, bare = records
    assert kipas.qty == 1250
    assert kipas.gudang == "G1"
    assert (bare.nama_produk, bare.kategori, bare.satuan, bare.gudang, bare.qty) == (
        "B2",
        "UNASSIGNED",
        "-",
        "-",
        0,
    )


def test_stock_excel_export(tmp_path):
    path = tmp_path / "stock.xlsx"
    pd.DataFrame(
        [{"Kode": "X9", "Nama": "Boneka", "Kategori": "BONEKA", "Satuan": "PCS", "Gudang": "52A", "Qty": 7}]
    ).to_excel(path, index=False)

    (record,) = normalize_stock_frame(load_table(path))

    assert record.kode_produk == "X9"
    assert record.qty == 7


def test_sales_json_export(tmp_path, sequential_ids):
    path = tmp_path / "orders.json"
    path.write_text(
        json.dumps(
            {
                "data": [
                    {"order_date": 45931, "buyer": "Shopee", "sku": "A1", "quantity": "2", "price": "44.900", "total_amount": 89800},
                    {"order_date": "not a date", "sku": "", "quantity": 1},
                    {"order_date": "2025-10-02T10:00:00+07:00", "sku": "B2", "quantity": 1, "invoice": "INV-9"},
                ]
            }
        ),
        encoding="utf-8",
    )

    records = normalize_sales_frame(load_table(path), id_factory=sequential_ids)

    first, second = records
    assert first.tanggal == "2025-10-01"
    assert first.customer == "Shopee"
    assert first.faktur == "sale-test-0"
    assert first.nama_barang == "A1"
    assert (first.qty, first.harga_satuan, first.total) == (2, 44900.0, 89800.0)
    assert first.jumlah == 0.0
    assert second.tanggal == "2025-10-02"
    assert second.customer == "Unknown"
    assert second.faktur == "INV-9"
    assert sequential_ids.issued == [("sale", 0)]


def test_sales_csv_with_day_first_dates(tmp_path):
    path = tmp_path / "sales.csv"
    path.write_text(
        "Tanggal,Customer,Faktur,Kode Produk,Nama Barang,Qty,Harga Satuan,Jumlah,Total\n"
        '01/10/2025,MW SHOPEE,JL-050222,BN02-12H,BONEKA 12 INC HIJAU,1,"44.900,00","44.900","44.900"\n',
        encoding="utf-8",
    )

    (record,) = normalize_sales_frame(load_table(path))

    assert record.tanggal == "2025-10-01"
    assert record.harga_satuan == 44900.0
    assert record.jumlah == 44900.0


def test_unreadable_tables(tmp_path):
    broken = tmp_path / "broken.json"
    broken.write_text("[{", encoding="utf-8")
    assert load_table(broken) is None

    other = tmp_path / "notes.txt"
    other.write_text("hello", encoding="utf-8")
    assert load_table(other) is None


def test_legacy_xls_workbook_is_not_decoded(tmp_path):
    path = tmp_path / "stock.xls"
    path.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504)

    assert load_table(path) is None
