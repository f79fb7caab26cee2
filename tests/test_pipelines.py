import json

import pytest

from stockvision import pipeline, settings
from stockvision.pipelines.sales import SalesPipeline
from stockvision.pipelines.stock import StockPipeline
from stockvision.schemas import SalesConversion, StockConversion
from stockvision.utils import get_date_suffix_for_filename

STOCK_CSV = (
    "Kode,Nama Produk,Kategori,Satuan,Gudang,Qty\n"
    "1006-12F,1006 12 INC FANTA,SOFT12,PCS,51B,3\n"
    "BN02-12H,BONEKA 12 INC HIJAU,BONEKA,PCS,52A,12\n"
)


@pytest.fixture
def dirs(tmp_path):
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    return input_dir, tmp_path / "output"


def test_stock_pipeline_replaces_the_dataset(monkeypatch, dirs, file_store):
    input_dir, output_dir = dirs
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", True)
    (input_dir / "stock_2025-10-01.csv").write_text(STOCK_CSV, encoding="utf-8")

    ran = StockPipeline(store=file_store, input_dir=input_dir, output_dir=output_dir).run()

    assert ran is True
    assert [r.qty for r in file_store.get_stock()] == [3, 12]
    suffix = get_date_suffix_for_filename()
    assert (output_dir / f"stock_dataset_{suffix}.csv").exists()
    exported = json.loads((output_dir / f"stock_dataset_{suffix}.json").read_text(encoding="utf-8"))
    assert exported[1]["kode_produk"] == "BN02-12H"


def test_newest_report_wins(dirs, file_store, sequential_ids):
    input_dir, output_dir = dirs
    header = "Tanggal,Customer,Faktur,Kode Produk,Qty,Total\n"
    (input_dir / "sales_2025-09-01.csv").write_text(
        header + "01/09/2025,OLD,JL-1,A1,9,900\n", encoding="utf-8"
    )
    (input_dir / "sales_2025-10-01.csv").write_text(
        header + "01/10/2025,NEW,,A1,2,200\n", encoding="utf-8"
    )

    sales_pipeline = SalesPipeline(
        store=file_store, input_dir=input_dir, output_dir=output_dir, id_factory=sequential_ids
    )

    assert sales_pipeline.run() is True
    assert sales_pipeline.source.name == "sales_2025-10-01.csv"
    (sale,) = file_store.get_sales()
    assert (sale.customer, sale.faktur, sale.qty) == ("NEW", "sale-test-0", 2)


def test_missing_input_leaves_the_store_alone(dirs, file_store, make_stock):
    input_dir, output_dir = dirs
    file_store.set_stock([make_stock("KEEP", 1).model_dump()])

    assert StockPipeline(store=file_store, input_dir=input_dir, output_dir=output_dir).run() is False
    assert [r.kode_produk for r in file_store.get_stock()] == ["KEEP"]
    assert not output_dir.exists()


def test_pdf_report_goes_through_the_classifier(monkeypatch, dirs, file_store, make_sale):
    input_dir, output_dir = dirs
    (input_dir / "sales_2025-10-02.pdf").write_bytes(b"%PDF-1.4")
    calls = []

    def fake_convert(file_bytes, file_name=None):
        calls.append((file_bytes, file_name))
        return SalesConversion(rows=[make_sale("A1", 1)])

    monkeypatch.setattr(pipeline, "convert_pdf", fake_convert)
    monkeypatch.setattr(settings, "SAVE_JSON_OUTPUT", False)

    assert SalesPipeline(store=file_store, input_dir=input_dir, output_dir=output_dir).run() is True
    assert calls == [(b"%PDF-1.4", "sales_2025-10-02.pdf")]
    assert [s.kode_produk for s in file_store.get_sales()] == ["A1"]
    assert list(output_dir.glob("*.json")) == []


def test_pdf_of_the_other_report_type_is_rejected(monkeypatch, dirs, file_store, make_stock):
    input_dir, output_dir = dirs
    (input_dir / "sales_2025-10-02.pdf").write_bytes(b"%PDF-1.4")
    monkeypatch.setattr(
        pipeline,
        "convert_pdf",
        lambda file_bytes, file_name=None: StockConversion(rows=[make_stock("A1", 1)]),
    )

    assert SalesPipeline(store=file_store, input_dir=input_dir, output_dir=output_dir).run() is False
    assert file_store.get_sales() == []


def test_unrecognized_pdf_is_skipped(monkeypatch, dirs, file_store):
    input_dir, output_dir = dirs
    (input_dir / "stock_2025-10-02.pdf").write_bytes(b"%PDF-1.4")
    monkeypatch.setattr(pipeline, "convert_pdf", lambda file_bytes, file_name=None: None)

    assert StockPipeline(store=file_store, input_dir=input_dir, output_dir=output_dir).run() is False


def test_transform_rejects_invalid_records(dirs, file_store, make_stock):
    input_dir, output_dir = dirs
    stock_pipeline = StockPipeline(store=file_store, input_dir=input_dir, output_dir=output_dir)
    bad = make_stock("A1", 1).model_copy(update={"qty": "1"})

    assert stock_pipeline.transform([make_stock("A1", 1)]) == [make_stock("A1", 1).model_dump()]
    assert stock_pipeline.transform([bad]) is None


def test_corrupt_pdf_does_not_stop_the_run(dirs, file_store, make_stock):
    input_dir, output_dir = dirs
    file_store.set_stock([make_stock("KEEP", 1).model_dump()])
    (input_dir / "stock_2025-10-01.pdf").write_bytes(b"garbage")

    assert StockPipeline(store=file_store, input_dir=input_dir, output_dir=output_dir).run() is False
    assert [r.kode_produk for r in file_store.get_stock()] == ["KEEP"]


def test_legacy_xls_export_is_not_picked_up(dirs, file_store):
    input_dir, output_dir = dirs
    (input_dir / "stock_2025-10-01.xls").write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1")

    assert StockPipeline(store=file_store, input_dir=input_dir, output_dir=output_dir).run() is False
    assert file_store.get_stock() == []
