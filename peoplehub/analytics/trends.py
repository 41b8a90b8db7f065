# peoplehub/analytics/trends.py
#
# Monthly headcount series reconstructed from start_date alone.
#
# There is no history table: CUMULATIVE mode counts everyone who had started
# by the end of each month, grouped by their CURRENT category. A promotion
# today shows up in every past month of the series. Known approximation.

from datetime import date
from enum import Enum
from typing import Callable, Optional

import pandas as pd

from peoplehub.analytics.references import UNDEFINED

HEBREW_MONTHS = ["ינו", "פבר", "מרץ", "אפר", "מאי", "יונ", "יול", "אוג", "ספט", "אוק", "נוב", "דצמ"]


class TrendMode(str, Enum):
    POINT_IN_MONTH = "point_in_month"   # hires within the month
    CUMULATIVE     = "cumulative"       # started on or before the month's last day


def month_label(period: pd.Period) -> str:
    return f"{HEBREW_MONTHS[period.month - 1]} {str(period.year)[2:]}"


def _as_period(value) -> pd.Period:
    return pd.Period(value, freq="M")


def trailing_months(today: Optional[date] = None, count: int = 12) -> pd.PeriodIndex:
    """The last `count` calendar months, ending with today's month."""
    if count < 1:
        raise ValueError("count must be at least 1")
    end = _as_period(today or date.today())
    return pd.period_range(end=end, periods=count, freq="M")


def months_since(epoch: str, today: Optional[date] = None) -> pd.PeriodIndex:
    """Every month from the epoch month (e.g. '2025-01') through today's month."""
    start = _as_period(epoch)
    end = _as_period(today or date.today())
    if start > end:
        return pd.PeriodIndex([], freq="M")
    return pd.period_range(start=start, end=end, freq="M")


def _dated_frame(employees, date_field: str, category_fn: Optional[Callable]) -> pd.DataFrame:
    rows = []
    for emp in employees:
        raw = getattr(emp, date_field, None)
        if not raw:
            continue
        when = pd.to_datetime(raw, errors="coerce")
        if pd.isna(when):
            continue
        category = category_fn(emp) if category_fn else None
        rows.append({"period": when.to_period("M"), "category": category})
    return pd.DataFrame(rows, columns=["period", "category"])


def monthly_series(
    employees,
    months,
    date_field: str = "start_date",
    mode: TrendMode = TrendMode.POINT_IN_MONTH,
    category_fn: Optional[Callable] = None,
    categories: Optional[list[str]] = None,
    undefined_label: str = UNDEFINED,
) -> list[dict]:
    """
    One row per month in `months`:
      {"month_key": "2025-03", "month": "מרץ 25", "count": n}
    or, with category_fn:
      {"month_key": ..., "month": ..., "series": {category: n, ...}}
    Every declared category plus the undefined bucket is always present.
    Records without a parseable date_field are excluded from every month.
    """
    frame = _dated_frame(employees, date_field, category_fn)

    legend = None
    if category_fn is not None:
        legend = [c for c in (categories or []) if c != undefined_label]
        legend += [c for c in frame["category"].dropna().unique() if c not in legend and c != undefined_label]
        legend.append(undefined_label)
        frame["category"] = frame["category"].fillna(undefined_label)

    result = []
    for period in months:
        period = _as_period(period)
        if mode == TrendMode.CUMULATIVE:
            members = frame[frame["period"] <= period]
        else:
            members = frame[frame["period"] == period]

        row = {"month_key": str(period), "month": month_label(period)}
        if legend is None:
            row["count"] = int(len(members))
        else:
            counts = members.groupby("category").size().reindex(legend, fill_value=0)
            row["series"] = {label: int(n) for label, n in counts.items()}
        result.append(row)
    return result
