import datetime as dt
from enum import Enum
from functools import lru_cache


class Country(str, Enum):
    cz = "CZ"
    sk = "SK"


# (month, day) rules; Good Friday and Easter Monday are added per year
_FIXED_HOLIDAYS: dict[Country, tuple[tuple[int, int], ...]] = {
    Country.cz: (
        (1, 1),    # Nový rok
        (5, 1),    # Svátek práce
        (5, 8),    # Den vítězství
        (7, 5),    # Cyril a Metoděj
        (7, 6),    # Jan Hus
        (9, 28),   # Den české státnosti
        (10, 28),  # Vznik samostatného československého státu
        (11, 17),  # Den boje za svobodu a demokracii
        (12, 24),
        (12, 25),
        (12, 26),
    ),
    Country.sk: (
        (1, 1),
        (1, 6),    # Zjavenie Pána
        (5, 1),
        (5, 8),
        (7, 5),
        (8, 29),   # Výročie SNP
        (9, 1),    # Deň Ústavy SR
        (9, 15),   # Sedembolestná Panna Mária
        (11, 1),
        (11, 17),
        (12, 24),
        (12, 25),
        (12, 26),
    ),
}


def coerce_country(value: "Country | str | None") -> Country | None:
    if value is None or isinstance(value, Country):
        return value
    return Country(str(value).strip().upper())


def easter_sunday(year: int) -> dt.date:
    # anonymous Gregorian computus
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return dt.date(year, month, day + 1)


@lru_cache(maxsize=64)
def holidays_for_year(year: int, country: Country = Country.cz) -> frozenset[dt.date]:
    country = coerce_country(country)
    days = {dt.date(year, m, d) for m, d in _FIXED_HOLIDAYS[country]}
    easter = easter_sunday(year)
    days.add(easter - dt.timedelta(days=2))
    days.add(easter + dt.timedelta(days=1))
    return frozenset(days)


def is_holiday(day: dt.date, country: "Country | str | None" = Country.cz) -> bool:
    country = coerce_country(country)
    if country is None:
        return False
    return day in holidays_for_year(day.year, country)
