from __future__ import annotations

from pathlib import Path

import pytest

from jp_geocoder.common.errors import MalformedCoordinate, MalformedRecord
from jp_geocoder.ingest.parser import LocationFileReader, parse_coordinate, parse_location_file, parse_row

HEADER = "pref,muni,addr1,addr2,block,c5,c6,c7,c8,lat,lon\n"


def _write(tmp_path: Path, body: str, name: str = "input.csv", encoding: str = "utf-8") -> Path:
    path = tmp_path / name
    path.write_text(HEADER + body, encoding=encoding)
    return path


def test_parse_row_reads_address_block_and_coordinates():
    row = ["東京都", "千代田区", "丸の内", "", "", "x", "y", "z", "w", "35.681236", "139.767125"]

    record = parse_row(row)

    assert record.prefecture == "東京都"
    assert record.municipality == "千代田区"
    assert record.address_1 == "丸の内"
    assert record.address_2 == ""
    assert record.block_lot == ""
    assert record.latitude == 35.681236
    assert record.longitude == 139.767125


def test_parse_row_ignores_columns_past_longitude():
    row = ["大阪府", "大阪市北区", "梅田", "三丁目", "1", "", "", "", "", "34.7025", "135.4959", "extra", "more"]
    assert parse_row(row).longitude == 135.4959


def test_parse_row_rejects_short_row_with_length():
    with pytest.raises(MalformedRecord) as excinfo:
        parse_row(["東京都", "千代田区", "丸の内"], line_number=4)

    assert excinfo.value.row_length == 3
    assert excinfo.value.line_number == 4
    assert excinfo.value.error_code == "MALFORMED_RECORD"


@pytest.mark.parametrize("raw", ["abc", "", "nan", "inf", "1,5", "35.6N", "0x10", "3_5", "３５.６８１２３６", "٣٥.٦"])
def test_parse_coordinate_rejects_non_decimal(raw: str):
    with pytest.raises(MalformedCoordinate) as excinfo:
        parse_coordinate(raw, "latitude")
    assert excinfo.value.field == "latitude"
    assert excinfo.value.value == raw


def test_parse_coordinate_accepts_signs_exponents_and_padding():
    assert parse_coordinate(" -33.5 ", "latitude") == -33.5
    assert parse_coordinate("+1.2e1", "longitude") == 12.0
    assert parse_coordinate("90", "latitude") == 90.0


def test_parse_coordinate_rejects_out_of_range():
    with pytest.raises(MalformedCoordinate):
        parse_coordinate("95", "latitude")
    with pytest.raises(MalformedCoordinate):
        parse_coordinate("-180.5", "longitude")


def test_parse_location_file_discards_header_and_blank_lines(tmp_path: Path):
    path = _write(
        tmp_path,
        "東京都,千代田区,丸の内,,,,,,,35.681236,139.767125\n"
        "\n"
        "東京都,千代田区,大手町,一丁目,3,,,,,35.684621,139.764512\n",
    )

    records = parse_location_file(path)

    assert [r.address_1 for r in records] == ["丸の内", "大手町"]


def test_parse_location_file_header_only_yields_nothing(tmp_path: Path):
    assert parse_location_file(_write(tmp_path, "")) == []


def test_parse_location_file_empty_file_is_malformed(tmp_path: Path):
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(MalformedRecord) as excinfo:
        parse_location_file(path)
    assert excinfo.value.row_length == 0


def test_one_bad_row_rejects_the_whole_file(tmp_path: Path):
    path = _write(
        tmp_path,
        "東京都,千代田区,丸の内,,,,,,,35.681236,139.767125\n"
        "東京都,千代田区,大手町,,,,,,,north,139.764512\n",
    )

    with pytest.raises(MalformedCoordinate) as excinfo:
        parse_location_file(path)
    assert excinfo.value.line_number == 3


def test_parse_location_file_tolerates_bom(tmp_path: Path):
    path = _write(tmp_path, "北海道,札幌市中央区,北一条西,二丁目,1,,,,,43.0621,141.3544\n", encoding="utf-8-sig")
    assert parse_location_file(path)[0].prefecture == "北海道"


def test_undecodable_file_is_malformed(tmp_path: Path):
    path = tmp_path / "sjis.csv"
    path.write_bytes((HEADER + "東京都,千代田区,丸の内,,,,,,,35.68,139.76\n").encode("shift_jis"))

    with pytest.raises(MalformedRecord):
        parse_location_file(path, encoding="utf-8")


def test_shift_jis_is_readable_when_configured(tmp_path: Path):
    path = tmp_path / "sjis.csv"
    path.write_bytes((HEADER + "東京都,千代田区,丸の内,,,,,,,35.68,139.76\n").encode("shift_jis"))

    assert parse_location_file(path, encoding="shift_jis")[0].municipality == "千代田区"


def test_reader_is_restartable(tmp_path: Path):
    path = _write(tmp_path, "東京都,千代田区,丸の内,,,,,,,35.681236,139.767125\n")
    reader = LocationFileReader(path)

    first = iter(reader)
    next(first)

    assert list(reader) == list(reader)
    assert len(list(reader)) == 1


def test_full_width_coordinates_reject_the_file(tmp_path: Path):
    path = _write(tmp_path, "東京都,千代田区,丸の内,,,,,,,３５.６８１２３６,139.767125\n")

    with pytest.raises(MalformedCoordinate) as excinfo:
        parse_location_file(path)
    assert excinfo.value.line_number == 2
