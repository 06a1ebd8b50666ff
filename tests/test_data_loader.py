import pytest

from gamestats.csv_codec import CsvFormatError, encode_daily_statistics
from gamestats.data_loader import parse_daily_statistics, parse_retention, read_text


def test_read_text_drops_bom():
    assert read_text("\ufeff日期,x".encode("utf-8")) == "日期,x"
    assert read_text(b"date,x") == "date,x"


def test_parse_daily_statistics(round_record):
    data = encode_daily_statistics([round_record]).encode("utf-8")
    records = parse_daily_statistics(data)

    assert len(records) == 1
    assert records[0].date == "2024-03-01"
    assert records[0].total_revenue == pytest.approx(2000.0)


def test_parse_daily_statistics_rejects_bad_shape():
    with pytest.raises(CsvFormatError):
        parse_daily_statistics("日期,新增用户\n2024-03-01,1".encode("utf-8"))


def test_parse_daily_statistics_rejects_non_utf8():
    with pytest.raises(UnicodeDecodeError):
        parse_daily_statistics(b"\xff\xfe\x00bad")


def test_parse_retention_gives_daily_records_newest_first():
    data = "date,newUsers,day1\n2024-01-01,10,50%\n2024-01-02,20,-\n合计,30,50%".encode("utf-8")
    records = parse_retention(data)

    assert [r.date for r in records] == ["2024-01-02", "2024-01-01"]
    assert records[1].retention == {1: pytest.approx(50.0)}
