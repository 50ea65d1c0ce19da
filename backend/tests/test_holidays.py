import datetime as dt

from capacity.services.timeline.holidays import Country, coerce_country, easter_sunday, holidays_for_year, is_holiday


def test_easter():
    assert easter_sunday(2025) == dt.date(2025, 4, 20)
    assert easter_sunday(2026) == dt.date(2026, 4, 5)


def test_czech_holidays():
    days = holidays_for_year(2025, Country.cz)
    assert dt.date(2025, 4, 18) in days  # Good Friday
    assert dt.date(2025, 4, 21) in days  # Easter Monday
    assert dt.date(2025, 10, 28) in days
    assert dt.date(2025, 1, 6) not in days
    assert len(days) == 13


def test_slovak_holidays():
    days = holidays_for_year(2025, Country.sk)
    assert dt.date(2025, 1, 6) in days
    assert dt.date(2025, 8, 29) in days
    assert dt.date(2025, 10, 28) not in days
    assert len(days) == 15


def test_is_holiday():
    assert is_holiday(dt.date(2025, 10, 28), "CZ")
    assert not is_holiday(dt.date(2025, 10, 28), None)
    assert not is_holiday(dt.date(2025, 10, 29), "CZ")


def test_coerce_country():
    assert coerce_country("sk") is Country.sk
    assert coerce_country(None) is None
    assert coerce_country(Country.cz) is Country.cz
