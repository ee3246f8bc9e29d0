import errno
import os
import time as stdtime

import pytest

from moonlet import oslib


def test_date_utc_format():
    assert oslib.date("!%Y-%m-%d %H:%M:%S", 0) == "1970-01-01 00:00:00"


def test_date_utc_table_epoch():
    assert oslib.date("!*t", 0) == {
        "sec": 0,
        "min": 0,
        "hour": 0,
        "day": 1,
        "month": 1,
        "year": 1970,
        "wday": 5,
        "yday": 1,
        "isdst": False,
    }


def test_date_trailing_percent_is_literal():
    assert oslib.date("!abc%", 0) == "abc%"


def test_date_plain_text_is_copied():
    assert oslib.date("!hello", 12345) == "hello"


def test_date_rejects_non_number_time():
    with pytest.raises(TypeError, match="number expected"):
        oslib.date("%c", {})


def test_time_round_trip_through_date_table():
    stamp = 1_000_000
    assert oslib.time(oslib.date("*t", stamp)) == float(stamp)


def test_time_default_hour_is_noon():
    base = {"year": 2000, "month": 6, "day": 15}
    assert oslib.time(base) == oslib.time(dict(base, hour=12))


def test_time_missing_field():
    with pytest.raises(ValueError, match="field 'day' missing in date table"):
        oslib.time({"year": 2000, "month": 1})


def test_time_requires_table():
    with pytest.raises(TypeError, match="table expected"):
        oslib.time(5)


def test_time_now_close_to_clock():
    now = oslib.time()
    assert abs(now - stdtime.time()) < 5


def test_difftime():
    assert oslib.difftime(10, 4) == 6.0
    assert oslib.difftime(7) == 7.0


def test_getenv(monkeypatch):
    monkeypatch.setenv("MOONLET_TEST_VAR", "value")
    assert oslib.getenv("MOONLET_TEST_VAR") == "value"
    monkeypatch.delenv("MOONLET_TEST_VAR")
    assert oslib.getenv("MOONLET_TEST_VAR") is None


def test_remove_file(tmp_path):
    target = tmp_path / "f.txt"
    target.write_text("x")
    assert oslib.remove(str(target)) is True
    assert not target.exists()


def test_remove_missing(tmp_path):
    target = str(tmp_path / "missing")
    result = oslib.remove(target)
    assert result[0] is None
    assert result[1].startswith(target + ": ")
    assert result[2] == errno.ENOENT


def test_rename(tmp_path):
    src = tmp_path / "a"
    dst = tmp_path / "b"
    src.write_text("payload")
    assert oslib.rename(str(src), str(dst)) is True
    assert dst.read_text() == "payload"
    assert not src.exists()


def test_rename_missing_reports_source(tmp_path):
    src = str(tmp_path / "nope")
    result = oslib.rename(src, str(tmp_path / "other"))
    assert result[0] is None
    assert result[1].startswith(src)


def test_tmpname_creates_file():
    name = oslib.tmpname()
    try:
        assert os.path.exists(name)
        assert os.path.getsize(name) == 0
    finally:
        os.remove(name)


def test_execute_returns_status():
    assert oslib.execute("exit 3") == 3
    assert oslib.execute("exit 0") == 0


def test_setlocale_invalid_category():
    with pytest.raises(ValueError, match="invalid option"):
        oslib.setlocale(None, "bogus")


def test_setlocale_set_and_query():
    original = oslib.setlocale(None, "numeric")
    try:
        assert oslib.setlocale("C", "numeric") == "C"
        assert oslib.setlocale(None, "numeric") == "C"
    finally:
        oslib.setlocale(original, "numeric")


def test_setlocale_unknown_locale():
    assert oslib.setlocale("no_such_locale_xyz", "numeric") is None


def test_exit_raises_system_exit():
    with pytest.raises(SystemExit) as info:
        oslib.exit(3)
    assert info.value.code == 3


def test_clock_is_monotonic():
    first = oslib.clock()
    second = oslib.clock()
    assert 0 <= first <= second