"""
Unit tests for the Watermark Store.
"""

import logging
import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from review_relay.models.review import EPOCH
from review_relay.utils.watermark import WatermarkStore, format_watermark, parse_watermark


def test_missing_file_is_epoch_zero():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = WatermarkStore(os.path.join(tmpdir, "lastRunTimestamp.txt"))
        assert store.load() == EPOCH


def test_save_then_load():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "lastRunTimestamp.txt")
        store = WatermarkStore(path)
        instant = datetime(2024, 6, 1, 12, 30, 15, 999, tzinfo=timezone.utc)

        assert store.save(instant) is True

        with open(path) as f:
            assert f.read() == "2024-06-01T12:30:15+00:00"
        assert store.load() == instant.replace(microsecond=0)


def test_garbage_file_is_epoch_zero_with_warning(caplog):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "lastRunTimestamp.txt")
        with open(path, "w") as f:
            f.write("not a date at all")

        with caplog.at_level(logging.WARNING):
            assert WatermarkStore(path).load() == EPOCH

        assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_empty_file_is_epoch_zero():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "lastRunTimestamp.txt")
        open(path, "w").close()
        assert WatermarkStore(path).load() == EPOCH


def test_unreadable_path_is_epoch_zero():
    with tempfile.TemporaryDirectory() as tmpdir:
        # A directory where the file should be cannot be read as text
        assert WatermarkStore(tmpdir).load() == EPOCH


def test_save_failure_is_reported_not_raised(caplog):
    with tempfile.TemporaryDirectory() as tmpdir:
        blocker = os.path.join(tmpdir, "blocker")
        with open(blocker, "w") as f:
            f.write("x")
        store = WatermarkStore(os.path.join(blocker, "lastRunTimestamp.txt"))

        with caplog.at_level(logging.ERROR):
            assert store.save(datetime.now(timezone.utc)) is False

        assert any(r.levelno == logging.ERROR for r in caplog.records)


def test_save_creates_parent_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "state", "lastRunTimestamp.txt")
        assert WatermarkStore(path).save(EPOCH) is True
        assert os.path.exists(path)


def test_parse_accepts_z_suffix_and_naive_values():
    assert parse_watermark("2024-06-01T12:00:00Z") == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)
    assert parse_watermark("2024-06-01T12:00:00") == datetime(2024, 6, 1, 12, tzinfo=timezone.utc)


def test_format_normalizes_to_utc():
    pacific = timezone(timedelta(hours=-7))
    assert format_watermark(datetime(2024, 6, 1, 5, 0, tzinfo=pacific)) == "2024-06-01T12:00:00+00:00"


def test_out_of_range_after_utc_shift_is_epoch_zero(caplog):
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "lastRunTimestamp.txt")
        for value in ("9999-12-31T23:00:00-05:00", "0001-01-01T00:00:00+01:00"):
            with open(path, "w") as f:
                f.write(value)

            with caplog.at_level(logging.WARNING):
                assert WatermarkStore(path).load() == EPOCH

        assert any(r.levelno == logging.WARNING for r in caplog.records)


def test_parse_rejects_out_of_range_instant_as_value_error():
    with pytest.raises(ValueError):
        parse_watermark("9999-12-31T23:00:00-05:00")


def test_permission_error_on_exists_is_epoch_zero():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = WatermarkStore(os.path.join(tmpdir, "lastRunTimestamp.txt"))

        with patch.object(Path, "exists", side_effect=PermissionError("denied")):
            assert store.load() == EPOCH
