import io

import pandas as pd
import pytest

from ingestion01.csv_ingestion import ingest, parse_date
from utils.schema_utils import SchemaValidationError
from utils.series_utils import InputError


def _write(tmp_path, text, name="upload.csv"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_iso_upload(tmp_path):
    rows = "\n".join(f"2024-03-{day:02d},{100 + day}" for day in range(1, 11))
    path = _write(tmp_path, "Date,Demand\n" + rows)

    series = ingest(path)

    assert list(series.columns) == ["date", "demand"]
    assert len(series) == 10
    assert series["demand"].iloc[0] == 101.0
    assert series["date"].is_monotonic_increasing


def test_us_dates_two_digit_year_and_sorting(tmp_path):
    text = (
        "order_date,Units Sold,sales_qty\n"
        "1/9/24,9,0\n1/1/24,1,0\n1/2/24,2,0\n1/3/24,3,0\n"
        "1/4/24,4,0\n1/5/24,5,0\n1/6/24,6,0\n"
    )

    series = ingest(io.StringIO(text), rename_map={"demand": ["units_sold"]})

    assert series["date"].iloc[0] == pd.Timestamp("2024-01-01")
    assert series["date"].iloc[-1] == pd.Timestamp("2024-01-09")
    assert list(series["demand"]) == [1, 2, 3, 4, 5, 6, 9]


def test_demand_column_detected_by_keyword():
    text = "Date,Store,Quantity\n" + "\n".join(
        f"2024-01-0{d},A,{d * 10}" for d in range(1, 8)
    )

    series = ingest(io.StringIO(text))

    assert list(series["demand"]) == [10, 20, 30, 40, 50, 60, 70]


def test_invalid_rows_are_skipped():
    text = "date,demand\n" + "\n".join(
        [f"2024-01-{d:02d},{d}" for d in range(1, 9)]
        + ["2024-01-20,-4", "2024-01-21,abc", "20240122,5", "2024-02-30,7"]
    )

    series = ingest(io.StringIO(text))

    assert len(series) == 8


def test_duplicate_dates_are_summed():
    text = "date,demand\n2024-01-01,5\n2024-01-01,7\n" + "\n".join(
        f"2024-01-0{d},1" for d in range(2, 8)
    )

    series = ingest(io.StringIO(text))

    assert len(series) == 7
    assert series["demand"].iloc[0] == 12


def test_fewer_than_seven_days_rejected():
    text = "date,demand\n" + "\n".join(f"2024-01-0{d},1" for d in range(1, 7))

    with pytest.raises(InputError, match="at least 7 days"):
        ingest(io.StringIO(text))


def test_missing_columns_rejected():
    text = "day,value\n2024-01-01,1\n"

    with pytest.raises(SchemaValidationError):
        ingest(io.StringIO(text))


def test_header_only_rejected():
    with pytest.raises(InputError):
        ingest(io.StringIO("date,demand\n"))


@pytest.mark.parametrize(
    "value, expected",
    [
        ("3/7/2024", pd.Timestamp("2024-03-07")),
        ("3/7/24", pd.Timestamp("2024-03-07")),
        ("2024-03-07", pd.Timestamp("2024-03-07")),
        ("20240307", None),
        ("13/40/2024", None),
        ("", None),
    ],
)
def test_parse_date(value, expected):
    assert parse_date(value) == expected
