from datetime import date

from gestao.birthdays import next_birthday, upcoming_birthdays


def test_next_birthday_rolls_over_to_next_year():
    assert next_birthday("1990-02-15", date(2024, 3, 1)) == date(2025, 2, 15)


def test_birthday_today_stays_this_year():
    assert next_birthday(date(1990, 3, 1), date(2024, 3, 1)) == date(2024, 3, 1)


def test_leap_day_in_common_year():
    assert next_birthday(date(2000, 2, 29), date(2023, 1, 10)) == date(2023, 3, 1)


def test_window_of_three_months_sorted_by_days_left():
    today = date(2024, 3, 1)
    clients = [
        {"id": 1, "name": "Ana", "birth_date": date(1990, 2, 15)},
        {"id": 2, "name": "Bia", "birth_date": date(1985, 5, 20)},
        {"id": 3, "name": "Caio", "birth_date": date(1970, 3, 5)},
        {"id": 4, "name": "Duda", "birth_date": date(1980, 6, 1)},
        {"id": 5, "name": "Edu", "birth_date": None},
    ]
    found = upcoming_birthdays(clients, today)
    assert [c["name"] for c in found] == ["Caio", "Bia"]
    assert found[0]["days_until"] == 4
    assert found[1]["next_birthday"] == date(2024, 5, 20)
