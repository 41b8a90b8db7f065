# peoplehub/analytics/scores.py

from datetime import date
from typing import Optional

import pandas as pd

# Employer burden decomposition: cost → gross salary.
# These are fixed statutory/overhead multipliers, do not tune.
EMPLOYER_TAX_FACTOR = 1.4
OVERHEAD_FACTOR     = 1.1
VAT_FACTOR          = 1.18


def attention_score(emp) -> int:
    """
    Criticality × attrition risk, 0-25.
    Unknown criticality or risk counts as 0, so the employee scores 0.
    """
    criticality    = emp.unit_criticality if emp.unit_criticality is not None else 0
    attrition_risk = emp.attrition_risk if emp.attrition_risk is not None else 0
    return int(criticality) * int(attrition_risk)


def estimated_salary(cost) -> Optional[float]:
    """Approximate gross salary from monthly employer cost; None without a cost."""
    if cost is None or pd.isna(cost) or cost == 0:
        return None
    return float(cost) / EMPLOYER_TAX_FACTOR / OVERHEAD_FACTOR / VAT_FACTOR


def salary_gap(emp) -> Optional[float]:
    """
    Market salary minus estimated salary; positive means the market pays more.
    None unless both cost and market salary are present.
    """
    salary = estimated_salary(emp.cost)
    market = emp.real_market_salary
    if salary is None or market is None or pd.isna(market) or market == 0:
        return None
    return float(market) - salary


def organization_experience_years(start_date: Optional[str], today: Optional[date] = None) -> float:
    """Years since start_date, one decimal, never negative."""
    if not start_date:
        return 0.0
    start = pd.to_datetime(start_date, errors="coerce")
    if pd.isna(start):
        return 0.0
    today = pd.Timestamp(today or date.today())
    years = (today - start).days / 365.25
    return max(0.0, round(years, 1))


def tenure_months(start_date: Optional[str], end_date: Optional[str]) -> Optional[int]:
    """Whole calendar months between two ISO dates, None if either is missing."""
    if not start_date or not end_date:
        return None
    start = pd.to_datetime(start_date, errors="coerce")
    end   = pd.to_datetime(end_date, errors="coerce")
    if pd.isna(start) or pd.isna(end):
        return None
    return (end.year - start.year) * 12 + (end.month - start.month)
