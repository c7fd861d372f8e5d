import os
import sys

import pytest

from moonkit import oslib


def test_clock_is_non_decreasing():
    first = oslib.clock()
    second = oslib.clock()
    assert 0.0 <= first <= second


def test_date_utc_epoch():
    assert oslib.date("!%Y-%m-%d", 0) == "1970-01-01"


def test_date_utc_table_at_epoch():
    fields = oslib.date("!*t", 0)
    assert fields["year"] == 1970
    assert fields["month"] == 1
    assert fields["day"] == 1
    assert fields["hour"] == 0
    assert fields["yday"] == 1
    # 1970-01-01 was a Thursday; Sunday counts as 1.
    assert fields["wday"] == 5


def test_date_literal_text_and_percent():
    assert oslib.date("!year %Y %%", 0) == "year 1970 %"


def test_date_accepts_integral_float():
    assert oslib.date("!%Y", 0.0) == oslib.date("!%Y", 0)


def test_date_rejects_fractional_time():
    with pytest.raises(TypeError):
        oslib.date("!%Y", 1.5)


def test_date_invalid_specifier():
    with pytest.raises(ValueError, match="invalid conversion specifier '%Q'"):
        oslib.date("%Q", 0)


def test_date_two_char_specifier_accepted():
    assert oslib.date("!%Ey", 0) == oslib.date("!%y", 0)


def test_date_invalid_two_char_specifier():
    with pytest.raises(ValueError, match="invalid conversion specifier"):
        oslib.date("%Ez", 0)


def test_time_round_trips_through_local_table():
    stamp = 1_000_000_000
    fields = oslib.date("*t", stamp)
    assert oslib.time(fields) == stamp


def test_time_normalises_fields_in_place():
    fields = {"year": 2000, "month": 1, "day": 32, "hour": 12}
    oslib.time(fields)
    assert fields["month"] == 2
    assert fields["day"] == 1
    assert fields["year"] == 2000


def test_time_defaults_hour_to_noon():
    fields = {"year": 2000, "month": 6, "day": 15}
    oslib.time(fields)
    assert fields["hour"] == 12
    assert fields["min"] == 0


def test_time_missing_field():
    with pytest.raises(ValueError, match="field 'day' missing in date table"):
        oslib.time({"year": 2000})


def test_time_non_integer_field():
    with pytest.raises(ValueError, match="field 'day' is not an integer"):
        oslib.time({"year": 2000, "month": 1, "day": 1.5})


def test_time_out_of_bound_field():
    with pytest.raises(ValueError, match="field 'day' is out-of-bound"):
        oslib.time({"year": 2000, "month": 1, "day": 2**40})


def test_time_requires_table():
    with pytest.raises(TypeError):
        oslib.time([2000, 1, 1])


def test_time_without_arguments_is_current():
    before = oslib.time()
    assert abs(oslib.time() - before) <= 1


def test_difftime():
    assert oslib.difftime(10, 3) == 7.0
    with pytest.raises(TypeError):
        oslib.difftime(1.5, 0)


def test_execute_reports_exit_status():
    cmd = f'"{sys.executable}" -c "import sys; sys.exit(3)"'
    assert oslib.execute(cmd) == (False, "exit", 3)


def test_execute_success():
    cmd = f'"{sys.executable}" -c "pass"'
    assert oslib.execute(cmd) == (True, "exit", 0)


def test_execute_without_command_checks_shell():
    assert oslib.execute() is True


def test_getenv(monkeypatch):
    monkeypatch.setenv("MOONKIT_TEST_VAR", "value")
    monkeypatch.delenv("MOONKIT_ABSENT_VAR", raising=False)
    assert oslib.getenv("MOONKIT_TEST_VAR") == "value"
    assert oslib.getenv("MOONKIT_ABSENT_VAR") is None


def test_remove_file(tmp_path):
    target = tmp_path / "f.txt"
    target.write_text("x")
    assert oslib.remove(str(target)) is True
    assert not target.exists()


def test_remove_empty_directory(tmp_path):
    target = tmp_path / "d"
    target.mkdir()
    assert oslib.remove(str(target)) is True
    assert not target.exists()


def test_remove_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        oslib.remove(str(tmp_path / "missing"))


def test_rename(tmp_path):
    src = tmp_path / "a.txt"
    dst = tmp_path / "b.txt"
    src.write_text("data")
    assert oslib.rename(str(src), str(dst)) is True
    assert dst.read_text() == "data"
    assert not src.exists()


def test_rename_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        oslib.rename(str(tmp_path / "nope"), str(tmp_path / "other"))


def test_tmpname_creates_unique_files():
    first = oslib.tmpname()
    second = oslib.tmpname()
    try:
        assert first != second
        assert os.path.exists(first)
        assert os.path.basename(first).startswith("lua_")
    finally:
        os.remove(first)
        os.remove(second)


def test_setlocale_c_numeric():
    assert oslib.setlocale("C", "numeric") == "C"
    assert oslib.setlocale(None, "numeric") == "C"


def test_setlocale_unknown_locale_returns_none():
    assert oslib.setlocale("no_such_locale_xyz", "numeric") is None


def test_setlocale_invalid_category():
    with pytest.raises(ValueError, match="invalid option"):
        oslib.setlocale(None, "bogus")


@pytest.mark.parametrize(
    "status, expected", [(None, 0), (True, 0), (False, 1), (7, 7)]
)
def test_exit_codes(status, expected):
    with pytest.raises(SystemExit) as info:
        oslib.exit(status)
    assert info.value.code == expected


def test_exit_rejects_non_number():
    with pytest.raises(TypeError):
        oslib.exit("abc")