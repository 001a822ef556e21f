from datetime import date

from dateutil.relativedelta import relativedelta

from .formatting import to_date

WINDOW_MONTHS = 3


def _birthday_in(year: int, birth: date) -> date:
    try:
        return date(year, birth.month, birth.day)
    except ValueError:
        # 29/02 em ano não bissexto cai em 01/03
        return date(year, 3, 1)


def next_birthday(birth_date, today: date | None = None) -> date | None:
    """Aniversário deste ano, ou do próximo se o deste ano já passou."""
    birth = to_date(birth_date)
    if birth is None:
        return None
    today = today or date.today()
    this_year = _birthday_in(today.year, birth)
    if this_year < today:
        return _birthday_in(today.year + 1, birth)
    return this_year


def upcoming_birthdays(clients, today: date | None = None, months: int = WINDOW_MONTHS) -> list:
    """Clientes com aniversário antes de hoje + ``months`` meses, do mais próximo ao mais distante."""
    today = today or date.today()
    limit = today + relativedelta(months=months)
    out = []
    for c in clients:
        nxt = next_birthday(c.get("birth_date"), today)
        if nxt is None or not nxt < limit:
            continue
        out.append({**c, "next_birthday": nxt, "days_until": (nxt - today).days})
    return sorted(out, key=lambda c: c["days_until"])
