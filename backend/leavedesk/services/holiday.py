"""Swiss public holiday calendar, per year and canton.

Each year combines the national fixed dates, the feasts that move with
Easter, the federal fast Monday and a canton-specific list of fixed dates.
"""

from __future__ import annotations

from datetime import date, timedelta
from functools import cache
from typing import NamedTuple

from leavedesk.models.enums import CantonCode


class Holiday(NamedTuple):
    """A named public holiday."""

    date: date
    name: str


# (month, day, name)
_FIXED_HOLIDAYS: tuple[tuple[int, int, str], ...] = (
    (1, 1, "Nouvel An"),
    (1, 2, "Saint-Berchtold"),
    (8, 1, "Fête nationale"),
    (12, 25, "Noël"),
)

_CANTON_HOLIDAYS: dict[CantonCode, tuple[tuple[int, int, str], ...]] = {
    CantonCode.VD: ((5, 1, "Fête du Travail"),),
    CantonCode.GE: (
        (5, 1, "Fête du Travail"),
        (9, 14, "Jeûne genevois"),
        (12, 12, "Restauration de la République"),
    ),
    CantonCode.FR: ((5, 1, "Fête du Travail"), (11, 1, "Toussaint")),
    CantonCode.VS: ((5, 1, "Fête du Travail"), (8, 15, "Assomption"), (11, 1, "Toussaint")),
    CantonCode.NE: ((3, 1, "Indépendance neuchâteloise"), (5, 1, "Fête du Travail")),
    CantonCode.ZH: ((5, 1, "Fête du Travail"), (9, 17, "Knabenschiessen")),
    CantonCode.BE: ((5, 1, "Fête du Travail"), (11, 1, "Toussaint")),
    CantonCode.TI: ((3, 19, "Saint Joseph"), (6, 29, "Saint Pierre et Saint Paul")),
    CantonCode.JU: ((5, 1, "Fête du Travail"), (6, 23, "Fête du peuple jurassien")),
}

# Offsets from Easter Sunday.
_EASTER_FEASTS: tuple[tuple[int, str], ...] = (
    (-2, "Vendredi Saint"),
    (1, "Lundi de Pâques"),
    (39, "Ascension"),
    (50, "Lundi de Pentecôte"),
    (60, "Fête-Dieu"),
)


def easter_sunday(year: int) -> date:
    """Return Easter Sunday of the Gregorian calendar (Meeus/Jones/Butcher)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def federal_fast_monday(year: int) -> date:
    """Return the Monday following the third Sunday of September."""
    first = date(year, 9, 1)
    first_sunday = first + timedelta(days=(6 - first.weekday()) % 7)
    return first_sunday + timedelta(weeks=2, days=1)


def holidays_for_year(year: int, canton: CantonCode | str = CantonCode.VD) -> list[Holiday]:
    """List the public holidays of ``year`` in ``canton``, in definition order."""
    canton = CantonCode(canton)
    easter = easter_sunday(year)

    result = [Holiday(date(year, month, day), name) for month, day, name in _FIXED_HOLIDAYS]
    result.extend(Holiday(easter + timedelta(days=offset), name) for offset, name in _EASTER_FEASTS)
    result.append(Holiday(federal_fast_monday(year), "Jeûne fédéral"))
    result.extend(Holiday(date(year, month, day), name) for month, day, name in _CANTON_HOLIDAYS.get(canton, ()))
    return result


@cache
def holiday_dates(year: int, canton: CantonCode | str = CantonCode.VD) -> frozenset[date]:
    """Return the set of holiday dates for a year and canton."""
    return frozenset(h.date for h in holidays_for_year(year, canton))


def holiday_name(day: date, canton: CantonCode | str = CantonCode.VD) -> str | None:
    """Return the holiday name for ``day``, or None when it is an ordinary day."""
    for holiday in holidays_for_year(day.year, canton):
        if holiday.date == day:
            return holiday.name
    return None


def is_holiday(day: date, canton: CantonCode | str = CantonCode.VD) -> bool:
    """Return True when ``day`` is a public holiday in ``canton``."""
    return day in holiday_dates(day.year, CantonCode(canton))
