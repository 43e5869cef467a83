from datetime import date, datetime


def uk_tax_year(when: date | datetime) -> int:
    """UK fiscal year (6 April to 5 April), named by the calendar year it ends in."""
    day = when.date() if isinstance(when, datetime) else when
    if day > date(day.year, 4, 5):
        return day.year + 1
    return day.year
