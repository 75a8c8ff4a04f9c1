"""
Tests de utilidades de fechas.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.shared.utils.datetime_utils import DateTimeUtils


def test_iso_strings_with_z_suffix_are_utc() -> None:
    assert DateTimeUtils.from_iso_string("2024-03-01T10:00:00.000Z") == datetime(
        2024, 3, 1, 10, 0, tzinfo=timezone.utc
    )


def test_iso_offsets_are_converted_to_utc() -> None:
    dt = DateTimeUtils.from_iso_string("2024-03-01T12:00:00+02:00")

    assert dt == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
    assert dt.utcoffset() == timedelta(0)


@pytest.mark.parametrize("raw", [None, "", "   ", "mañana", 20240301])
def test_invalid_iso_values_return_none(raw) -> None:
    assert DateTimeUtils.from_iso_string(raw) is None


def test_ensure_utc_marks_naive_values() -> None:
    assert DateTimeUtils.ensure_utc(datetime(2024, 1, 1)).tzinfo == timezone.utc


def test_epoch_seconds_and_milliseconds() -> None:
    expected = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    seconds = int(expected.timestamp())

    assert DateTimeUtils.from_epoch(seconds) == expected
    assert DateTimeUtils.from_epoch(str(seconds)) == expected
    assert DateTimeUtils.from_epoch(str(seconds * 1000)) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "nan", "inf"])
def test_invalid_epochs_return_none(raw) -> None:
    assert DateTimeUtils.from_epoch(raw) is None
