# peoplehub/analytics/aggregator.py
#
# Group employees by a label and reduce each group to one number.
# Output is a list of {"label", "value"} dicts in a well-defined order:
#   - fixed domain given → domain order, zeros included, undefined bucket last
#   - otherwise          → order of first occurrence
# Zero filtering and sorting are per call site (see dashboard.py).

from enum import Enum
from typing import Callable, Optional

import pandas as pd

from peoplehub.analytics.references import UNDEFINED


class Reduce(str, Enum):
    COUNT = "count"
    SUM   = "sum"
    MEAN  = "mean"


def _numeric(value) -> float:
    # Nulls reduce as 0 in SUM and MEAN
    if value is None or pd.isna(value):
        return 0.0
    return float(value)


def group_and_reduce(
    employees,
    key_fn: Callable,
    reduce: Reduce = Reduce.COUNT,
    field: Optional[str] = None,
    fixed_domain: Optional[list[str]] = None,
    undefined_label: str = UNDEFINED,
) -> list[dict]:
    """
    key_fn maps an employee to its (already resolved) group label.
    A key_fn returning None leaves the employee out of this aggregate.
    """
    if reduce != Reduce.COUNT and not field:
        raise ValueError(f"Reduce mode '{reduce.value}' needs a field to reduce")

    labels, values = [], []
    for emp in employees:
        label = key_fn(emp)
        if label is None:
            continue
        labels.append(label)
        values.append(_numeric(getattr(emp, field)) if field else 1.0)

    frame = pd.DataFrame({"label": labels, "value": values}, columns=["label", "value"])
    grouped = frame.groupby("label", sort=False)["value"]

    if reduce == Reduce.COUNT:
        series = grouped.size()
    elif reduce == Reduce.SUM:
        series = grouped.sum()
    else:
        series = grouped.mean().round(1)

    if fixed_domain is not None:
        series = _apply_domain(series, fixed_domain, undefined_label)

    return [
        {"label": str(label), "value": int(value) if reduce == Reduce.COUNT else float(value)}
        for label, value in series.items()
    ]


def _apply_domain(series: pd.Series, domain: list[str], undefined_label: str) -> pd.Series:
    """Every domain label, in domain order; stray labels before the undefined bucket."""
    ordered = [label for label in domain if label != undefined_label]
    ordered += [label for label in series.index if label not in domain and label != undefined_label]
    if undefined_label in domain or undefined_label in series.index:
        ordered.append(undefined_label)
    return series.reindex(ordered, fill_value=0)


# ── Call-site post-processing ──

def drop_zeros(points: list[dict]) -> list[dict]:
    return [p for p in points if p["value"] > 0]


def sort_by_value(points: list[dict], descending: bool = True) -> list[dict]:
    # sorted() is stable: ties keep first-occurrence order
    return sorted(points, key=lambda p: p["value"], reverse=descending)


def top_n(points: list[dict], limit: Optional[int]) -> list[dict]:
    return points if limit is None else points[:limit]
