# peoplehub/analytics/buckets.py
#
# Half-open numeric bands [min, max). A value sitting exactly on a boundary
# belongs to the upper band. The last band is always open-ended.

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class BucketRange:
    min: float
    max: float
    label: str

    @property
    def is_negative(self) -> bool:
        # Presentation hint: negative gap bands render red
        return self.max <= 0

    def contains(self, value: float) -> bool:
        return self.min <= value < self.max


# Estimated gross salary (₪)
SALARY_RANGES = (
    BucketRange(0,      10_000,   "עד 10K"),
    BucketRange(10_000, 15_000,   "10K-15K"),
    BucketRange(15_000, 20_000,   "15K-20K"),
    BucketRange(20_000, 25_000,   "20K-25K"),
    BucketRange(25_000, 30_000,   "25K-30K"),
    BucketRange(30_000, math.inf, "30K+"),
)

# Market salary minus estimated salary (₪); negative = we pay above market
SALARY_GAP_RANGES = (
    BucketRange(-math.inf, -5_000,   "משלמים יותר מ-5K"),
    BucketRange(-5_000,    -2_000,   "משלמים 2K-5K יותר"),
    BucketRange(-2_000,    0,        "משלמים עד 2K יותר"),
    BucketRange(0,         2_000,    "שוק גבוה עד 2K"),
    BucketRange(2_000,     5_000,    "שוק גבוה 2K-5K"),
    BucketRange(5_000,     math.inf, "שוק גבוה מעל 5K"),
)


def open_ended(ranges) -> tuple[BucketRange, ...]:
    """Validate contiguity and force the last band's max to +inf."""
    ranges = tuple(ranges)
    if not ranges:
        raise ValueError("At least one bucket range is required")
    for lower, upper in zip(ranges, ranges[1:]):
        if lower.max != upper.min:
            raise ValueError(
                f"Bucket ranges must be contiguous: '{lower.label}' ends at {lower.max} "
                f"but '{upper.label}' starts at {upper.min}"
            )
    last = ranges[-1]
    if last.max != math.inf:
        ranges = ranges[:-1] + (BucketRange(last.min, math.inf, last.label),)
    return ranges


def bucketize(values, ranges) -> list[dict]:
    """
    Count values per band. Values below the first band's min fall in no band.
    Empty bands are dropped; the rest keep band order.
    """
    ranges = open_ended(ranges)
    values = [v for v in values if v is not None and not pd.isna(v)]

    counts = np.zeros(len(ranges), dtype=int)
    if values:
        edges = [ranges[0].min] + [r.max for r in ranges]
        codes = pd.cut(np.asarray(values, dtype=float), bins=edges, right=False, labels=False)
        for code in codes:
            if not pd.isna(code):
                counts[int(code)] += 1

    return [
        {
            "label":       r.label,
            "value":       int(count),
            "min":         r.min,
            "max":         r.max,
            "is_negative": r.is_negative,
        }
        for r, count in zip(ranges, counts)
        if count > 0
    ]


def find_range(ranges, label: str) -> Optional[BucketRange]:
    for r in open_ended(ranges):
        if r.label == label:
            return r
    return None
