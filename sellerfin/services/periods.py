"""
Reporting periods for the income statement (DRE).
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from .calculations import read_field

CURRENT_MONTH = "mes_atual"
PREVIOUS_MONTH = "mes_anterior"
LAST_3_MONTHS = "ultimos_3_meses"
LAST_6_MONTHS = "ultimos_6_meses"
CURRENT_YEAR = "ano_atual"
CUSTOM = "personalizado"


@dataclass(frozen=True)
class DREPeriod:
    start: date
    end: date
    label: str
    key: str = CUSTOM

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1


def _month_start(day: date) -> date:
    return day.replace(day=1)


def _month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def get_default_periods(today: Optional[date] = None) -> List[DREPeriod]:
    """Preset periods relative to today"""
    today = today or date.today()
    previous = today - relativedelta(months=1)
    return [
        DREPeriod(_month_start(today), _month_end(today), "Mês Atual", CURRENT_MONTH),
        DREPeriod(_month_start(previous), _month_end(previous), "Mês Anterior", PREVIOUS_MONTH),
        DREPeriod(_month_start(today - relativedelta(months=2)), _month_end(today), "Últimos 3 Meses", LAST_3_MONTHS),
        DREPeriod(_month_start(today - relativedelta(months=5)), _month_end(today), "Últimos 6 Meses", LAST_6_MONTHS),
        DREPeriod(date(today.year, 1, 1), date(today.year, 12, 31), "Ano Atual", CURRENT_YEAR),
    ]


def period_for(key: str, today: Optional[date] = None) -> DREPeriod:
    for period in get_default_periods(today):
        if period.key == key:
            return period
    raise ValueError(f"Unknown period: {key}")


def custom_period(start: date, end: date, label: Optional[str] = None) -> DREPeriod:
    if start > end:
        raise ValueError("Data inicial deve ser anterior à data final.")
    label = label or f"{start.strftime('%d/%m/%Y')} - {end.strftime('%d/%m/%Y')}"
    return DREPeriod(start, end, label, CUSTOM)


def month_coverage(period: DREPeriod) -> float:
    """
    Number of months the period represents: sum over every month it touches
    of covered days / days in that month. A full month is exactly 1.
    """
    factor = 0.0
    cursor = _month_start(period.start)
    while cursor <= period.end:
        month_end = _month_end(cursor)
        first = max(cursor, period.start)
        last = min(month_end, period.end)
        factor += ((last - first).days + 1) / month_end.day
        cursor = month_end + relativedelta(days=1)
    return factor


def to_date(value: Any) -> Optional[date]:
    """Day of a datetime/date/ISO string, None when absent or unparseable"""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.parse(str(value)).date()
    except (ValueError, OverflowError):
        return None


def in_period(value: Any, period: DREPeriod) -> bool:
    day = to_date(value)
    return day is not None and period.start <= day <= period.end


def filter_by_period(items: Iterable[Any], period: DREPeriod, date_field: str = "data_pedido") -> List[Any]:
    """Rows whose date_field falls in the period (inclusive, day resolution)"""
    return [item for item in items if in_period(read_field(item, date_field), period)]
