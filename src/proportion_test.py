"""
proportion_test.py
One-tailed proportion z-test of every category against a reference category

Each category's share of the total is compared with the reference category's
share. The standard error uses the reference proportion only:

    se = sqrt(p_ref * (1 - p_ref) / total)

so this is NOT a pooled two-proportion test. The p-value is the lower tail
Phi(z): small when a category is much rarer than the reference, above 0.5
when it is at least as common.
"""

import math
import numbers
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from scipy.stats import norm


# ── Errors ────────────────────────────────────────────────────────────────────

class ProportionTestError(ValueError):
    """Base class for every failure raised by the proportion test."""


class InvalidInput(ProportionTestError):
    """Zero total, missing reference, duplicate label or bad count."""


class DegenerateVariance(ProportionTestError):
    """Reference proportion is 0 or 1, so the standard error is zero."""


# ── Data Model ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CategoryCount:
    label: str
    count: int


@dataclass(frozen=True)
class ProportionTestResult:
    label: str
    count: int
    p_value: float


# P-value emitted for the reference category (no test performed)
REFERENCE_P_VALUE = 1.0


def _normalise(counts) -> list[CategoryCount]:
    if isinstance(counts, Mapping):
        items = [CategoryCount(label, count) for label, count in counts.items()]
    elif isinstance(counts, Iterable) and not isinstance(counts, str):
        items = [c if isinstance(c, CategoryCount) else CategoryCount(*c) for c in counts]
    else:
        raise InvalidInput(f"Expected a mapping or a sequence of counts, got {type(counts).__name__}")

    seen = set()
    for item in items:
        if item.label in seen:
            raise InvalidInput(f"Duplicate category label: {item.label!r}")
        seen.add(item.label)
        # bool is an Integral subclass but never a meaningful count
        if isinstance(item.count, bool) or not isinstance(item.count, numbers.Integral):
            raise InvalidInput(f"Count for {item.label!r} is not an integer: {item.count!r}")
        if item.count < 0:
            raise InvalidInput(f"Count for {item.label!r} is negative: {item.count}")
    return items


# ── Test Table ────────────────────────────────────────────────────────────────

def proportion_ztest_table(counts, reference) -> list[ProportionTestResult]:
    """
    Test each category's share against the reference category's share.

    Parameters
    ----------
    counts    : mapping label -> count, or an ordered sequence of
                CategoryCount / (label, count) pairs
    reference : label of the baseline category

    Returns
    -------
    One ProportionTestResult per category, in input order. The reference
    category gets p_value == 1.0.

    Raises
    ------
    InvalidInput       : total is zero, reference missing, duplicate label,
                         negative or non-integer count
    DegenerateVariance : reference proportion is 0 or 1
    """
    items = _normalise(counts)

    total = sum(int(c.count) for c in items)
    if total <= 0:
        raise InvalidInput("Total count must be positive")

    ref_count = next((int(c.count) for c in items if c.label == reference), None)
    if ref_count is None:
        raise InvalidInput(f"Reference category {reference!r} is not in the input")

    p_ref = ref_count / total
    if ref_count == 0 or ref_count == total:
        raise DegenerateVariance(
            f"Reference proportion is {p_ref:.0f}; standard error would be zero"
        )
    se = math.sqrt(p_ref * (1 - p_ref) / total)

    results = []
    for c in items:
        count = int(c.count)
        if c.label == reference:
            p_value = REFERENCE_P_VALUE
        else:
            z = (count / total - p_ref) / se
            p_value = float(norm.cdf(z))
        results.append(ProportionTestResult(c.label, count, p_value))
    return results


def significant_categories(results: list[ProportionTestResult], alpha: float = 0.05) -> list[str]:
    """Labels whose share is significantly lower than the reference at `alpha`."""
    return [r.label for r in results if r.p_value < alpha]
