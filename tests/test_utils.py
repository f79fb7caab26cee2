import os
from datetime import date

from stockvision.utils import find_latest_report, load_csv


def test_find_latest_report_uses_the_filename_date(tmp_path):
    for name in ("sales_2025-09-30.csv", "sales_2025-10-01.pdf", "sales_2025-12-01.txt", "stock_2026-01-01.csv"):
        (tmp_path / name).write_text("x", encoding="utf-8")

    path, report_date = find_latest_report(tmp_path, "sales_", (".csv", ".pdf"))

    assert path.name == "sales_2025-10-01.pdf"
    assert report_date == date(2025, 10, 1)


def test_find_latest_report_falls_back_to_mtime(tmp_path):
    older = tmp_path / "stock_a.csv"
    newer = tmp_path / "stock_b.csv"
    older.write_text("x", encoding="utf-8")
    newer.write_text("x", encoding="utf-8")
    os.utime(older, (1_700_000_000, 1_700_000_000))
    os.utime(newer, (1_750_000_000, 1_750_000_000))

    path, _ = find_latest_report(tmp_path, "stock_")

    assert path == newer


def test_find_latest_report_without_candidates(tmp_path):
    assert find_latest_report(tmp_path / "missing", "stock_") is None
    assert find_latest_report(tmp_path, "stock_") is None


def test_load_csv_falls_back_to_latin1(tmp_path):
    path = tmp_path / "stock.csv"
    path.write_bytes("kode,nama\nA1,Caf\xe9 Latte\n".encode("latin-1"))

    df = load_csv(path)

    assert df.loc[0, "nama"] == "Caf\xe9 Latte"


def test_load_csv_keeps_cells_as_text(tmp_path):
    path = tmp_path / "stock.csv"
    path.write_text("kode,qty\n007,0010\n", encoding="utf-8")

    df = load_csv(path)

    assert df.loc[0, "kode"] == "007"
    assert df.loc[0, "qty"] == "0010"


def test_load_csv_missing_or_empty(tmp_path):
    assert load_csv(tmp_path / "nope.csv") is None
    empty = tmp_path / "empty.csv"
    empty.write_text("", encoding="utf-8")
    assert load_csv(empty) is None
