from datetime import date, datetime

import pytest

from sellerfin.services.periods import (
    custom_period,
    filter_by_period,
    get_default_periods,
    month_coverage,
    period_for,
)

TODAY = date(2024, 3, 15)


def test_default_periods():
    periods = {p.key: p for p in get_default_periods(TODAY)}

    assert (periods["mes_atual"].start, periods["mes_atual"].end) == (date(2024, 3, 1), date(2024, 3, 31))
    assert (periods["mes_anterior"].start, periods["mes_anterior"].end) == (date(2024, 2, 1), date(2024, 2, 29))
    assert periods["ultimos_3_meses"].start == date(2024, 1, 1)
    assert periods["ultimos_6_meses"].start == date(2023, 10, 1)
    assert (periods["ano_atual"].start, periods["ano_atual"].end) == (date(2024, 1, 1), date(2024, 12, 31))
    assert periods["mes_atual"].label == "Mês Atual"


def test_period_for_unknown_key():
    assert period_for("mes_anterior", TODAY).start == date(2024, 2, 1)
    with pytest.raises(ValueError):
        period_for("semana", TODAY)


def test_custom_period_requires_ordered_dates():
    period = custom_period(date(2024, 1, 10), date(2024, 1, 20))
    assert period.label == "10/01/2024 - 20/01/2024"
    assert period.days == 11
    with pytest.raises(ValueError):
        custom_period(date(2024, 2, 1), date(2024, 1, 1))


@pytest.mark.parametrize("start, end, expected", [
    (date(2024, 3, 1), date(2024, 3, 31), 1.0),
    (date(2024, 2, 1), date(2024, 2, 29), 1.0),
    (date(2024, 1, 1), date(2024, 3, 31), 3.0),
    (date(2024, 4, 1), date(2024, 4, 15), 0.5),
    (date(2024, 1, 1), date(2024, 12, 31), 12.0),
])
def test_month_coverage(start, end, expected):
    assert month_coverage(custom_period(start, end)) == pytest.approx(expected)


def test_filter_is_inclusive_at_day_resolution():
    period = custom_period(date(2024, 3, 1), date(2024, 3, 31))
    rows = [
        {"id": 1, "data_pedido": datetime(2024, 3, 31, 23, 59)},
        {"id": 2, "data_pedido": datetime(2024, 3, 1, 0, 0)},
        {"id": 3, "data_pedido": datetime(2024, 4, 1, 0, 0)},
        {"id": 4, "data_pedido": None},
        {"id": 5, "data_pedido": "2024-03-10"},
    ]
    assert [r["id"] for r in filter_by_period(rows, period)] == [1, 2, 5]
