"""Tests for the CSV export writer."""
from __future__ import annotations

import csv
from datetime import datetime

from app.retrieval.export import ExportWriter


def _read_back(path):
    with path.open("r", encoding="utf-8-sig", newline="") as handle:
        return list(csv.reader(handle))


def test_write_round_trips_tricky_values(tmp_path):
    rows = [
        {"Họ và tên": 'Nguyễn Văn "Ba"', "Ghi chú": "a, b, c"},
        {"Họ và tên": "Trần Thị Bình", "Ghi chú": "dòng 1\ndòng 2"},
        {"Họ và tên": "", "Ghi chú": '""'},
    ]
    writer = ExportWriter(tmp_path)

    url = writer.write(rows)

    assert url is not None and url.startswith("/downloads/") and url.endswith(".csv")
    path = tmp_path / url.rsplit("/", 1)[-1]
    records = _read_back(path)
    assert records[0] == ["Họ và tên", "Ghi chú"]
    assert [dict(zip(records[0], r)) for r in records[1:]] == rows


def test_every_field_is_quoted_and_quotes_doubled(tmp_path):
    writer = ExportWriter(tmp_path)
    url = writer.write([{"Tên": 'Anh "Ba"', "Tuổi": "30"}])
    raw = (tmp_path / url.rsplit("/", 1)[-1]).read_text(encoding="utf-8-sig")
    assert raw == '"Tên","Tuổi"\n"Anh ""Ba""","30"\n'


def test_header_comes_from_first_row(tmp_path, personnel_rows):
    rows = [personnel_rows[0], {"Mã NV": "NV009", "Extra": "ignored"}]
    url = ExportWriter(tmp_path).write(rows)
    records = _read_back(tmp_path / url.rsplit("/", 1)[-1])
    assert records[0] == list(personnel_rows[0].keys())
    assert records[2][0] == "NV009"
    assert records[2][1:] == [""] * (len(records[0]) - 1)


def test_empty_rows_produce_no_file(tmp_path):
    writer = ExportWriter(tmp_path / "downloads")
    assert writer.write([]) is None
    assert not (tmp_path / "downloads").exists()


def test_names_are_unique_and_time_based(tmp_path, personnel_rows):
    fixed = datetime(2024, 5, 17, 8, 30, 0, 123456)
    writer = ExportWriter(tmp_path, url_prefix="/files/", clock=lambda: fixed)

    first = writer.write(personnel_rows, prefix="personnel")
    second = writer.write(personnel_rows, prefix="personnel")

    assert first != second
    assert first.startswith("/files/personnel-20240517-083000-123456-")
    assert len(list(tmp_path.glob("*.csv"))) == 2
