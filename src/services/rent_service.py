"""Rent due-date calculations."""

from datetime import date

from dateutil.relativedelta import relativedelta


def next_rent_date(*, today: date, rent_day: int) -> date:
    """Return the next rent due date on or after ``today``.

    When today is the rent day itself, today is returned; the following month's
    date is used only once the rent day has strictly passed.
    """
    this_month = today.replace(day=rent_day)
    if today <= this_month:
        return this_month
    return this_month + relativedelta(months=1)


def days_until_rent(*, today: date | None = None, rent_day: int) -> int:
    """Number of whole days from ``today`` until rent is due (0 on the rent day)."""
    today = today or date.today()
    return (next_rent_date(today=today, rent_day=rent_day) - today).days
