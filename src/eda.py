"""
eda.py
Monthly incident report for the cleaned LAPD data

Design principles:
- Every plot answers a specific question
- Visuals are publication-ready (labeled, titled, sourced)
- The monthly seasonality question is tested, not eyeballed
- Conclusions are generated from the numbers, never hard-coded
"""

import logging
import warnings
from dataclasses import dataclass
from pathlib import Path

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import numpy as np
import pandas as pd
import seaborn as sns
from statsmodels.formula.api import ols

from data_cleaning import AGE_BRACKET_MIDPOINTS, MONTH_ABBR
from proportion_test import ProportionTestResult, proportion_ztest_table, significant_categories

warnings.filterwarnings("ignore")

log = logging.getLogger(__name__)

# ── Style ─────────────────────────────────────────────────────────────────────
ACCENT   = "#D62728"   # red — draws attention to key findings
NEUTRAL  = "#4C72B0"   # blue — standard bars
BG_GRAY  = "#F7F7F7"
FIG_DIR  = Path("data/processed/eda/plots")

ALPHA = 0.05
MIN_REGRESSION_POINTS = 3

plt.rcParams.update({
    "figure.facecolor": BG_GRAY,
    "axes.facecolor":   BG_GRAY,
    "axes.spines.top":  False,
    "axes.spines.right": False,
    "axes.labelsize":   11,
    "axes.titlesize":   13,
    "axes.titleweight": "bold",
    "xtick.labelsize":  9,
    "ytick.labelsize":  9,
    "font.family":      "sans-serif",
})


# ── Helpers ───────────────────────────────────────────────────────────────────

def _save(fig: plt.Figure, name: str, fig_dir=FIG_DIR) -> Path:
    fig_dir = Path(fig_dir)
    fig_dir.mkdir(parents=True, exist_ok=True)
    path = fig_dir / f"{name}.png"
    fig.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)
    print(f"  ✓ Saved → {path}")
    return path


def _source_note(ax, note="Source: LAPD Open Data / data.lacity.org"):
    ax.annotate(note, xy=(0, -0.12), xycoords="axes fraction",
                fontsize=7, color="gray")


def fmt_thousands(ax, axis="y"):
    fmt = mticker.FuncFormatter(lambda x, _: f"{x:,.0f}")
    if axis == "y":
        ax.yaxis.set_major_formatter(fmt)
    else:
        ax.xaxis.set_major_formatter(fmt)


def _header(title: str):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


def load_cleaned_data(filepath) -> pd.DataFrame:
    print(f"Loading cleaned data from: {filepath}")
    df = pd.read_csv(filepath, parse_dates=["DATE OCC"], low_memory=False)
    print(f"  Loaded {len(df):,} rows × {df.shape[1]} columns\n")
    return df


def monthly_counts(df: pd.DataFrame) -> dict[str, int]:
    """Incident count per month in calendar order, zero-filled for empty months."""
    counts = df["Month"].value_counts().reindex(list(MONTH_ABBR), fill_value=0)
    return {MONTH_ABBR[m]: int(n) for m, n in counts.items()}


def reference_month(counts: dict[str, int]) -> str:
    """Month with the most incidents; ties go to the earliest month."""
    return max(counts, key=counts.get)


def results_to_frame(results: list[ProportionTestResult]) -> pd.DataFrame:
    return pd.DataFrame(
        [(r.label, r.count, r.p_value) for r in results],
        columns=["Month", "Count", "P-Value"],
    )


# ── Report 1: Monthly Histogram ───────────────────────────────────────────────

def eda_monthly_histogram(df: pd.DataFrame, fig_dir=FIG_DIR) -> Path:
    """
    Q: Are incidents spread evenly across the calendar year?
    The busiest month is highlighted; it becomes the reference in the z-test.
    """
    _header("REPORT 1 | INCIDENTS BY MONTH")

    counts = monthly_counts(df)
    ref = reference_month(counts)

    fig, ax = plt.subplots(figsize=(11, 5))
    _, _, patches = ax.hist(df["Month"], bins=np.arange(0.5, 13.5, 1),
                            color=NEUTRAL, edgecolor="white", alpha=0.85)
    patches[list(counts).index(ref)].set_facecolor(ACCENT)
    ax.set_xticks(list(MONTH_ABBR))
    ax.set_xticklabels(list(MONTH_ABBR.values()))
    ax.set_title(f"Incidents by Month of Occurrence\n(Red = busiest month, {ref})")
    ax.set_xlabel("Month")
    ax.set_ylabel("Number of Incidents")
    fmt_thousands(ax)
    _source_note(ax)

    plt.tight_layout()
    path = _save(fig, "01_monthly_histogram", fig_dir)

    print(f"  Busiest month: {ref} ({counts[ref]:,} incidents)")
    print(f"  Quietest month: {min(counts, key=counts.get)} ({min(counts.values()):,} incidents)")
    return path


# ── Report 2: Victim Age Histogram ────────────────────────────────────────────

def eda_age_histogram(df: pd.DataFrame, fig_dir=FIG_DIR) -> Path:
    """
    Q: How old are the victims?
    Only known ages are plotted; unknowns are reported alongside.
    """
    _header("REPORT 2 | VICTIM AGE DISTRIBUTION")

    valid_ages = pd.to_numeric(df["Vict Age"], errors="coerce").dropna()

    fig, ax = plt.subplots(figsize=(11, 5))
    ax.hist(valid_ages, bins=30, color=NEUTRAL, edgecolor="white", alpha=0.85)
    if len(valid_ages):
        med_age = valid_ages.median()
        ax.axvline(med_age, color=ACCENT, linewidth=2, label=f"Median: {med_age:.0f} yrs")
        ax.legend()
    ax.set_title(f"Victim Age Distribution\n(Known ages only, n={len(valid_ages):,})")
    ax.set_xlabel("Age")
    ax.set_ylabel("Frequency")
    fmt_thousands(ax)
    _source_note(ax)

    plt.tight_layout()
    path = _save(fig, "02_age_histogram", fig_dir)

    print(f"  Known ages: {len(valid_ages):,} of {len(df):,} "
          f"({len(valid_ages) / max(len(df), 1) * 100:.1f}%)")
    if len(valid_ages):
        print(f"  Median victim age (known): {valid_ages.median():.1f}")
    return path


# ── Report 3: Monthly Proportion Test ─────────────────────────────────────────

def eda_month_proportion_test(df: pd.DataFrame, alpha: float = ALPHA) -> pd.DataFrame:
    """
    Q: Which months see a significantly smaller share of incidents than the busiest one?
    One-tailed z-test of each month's share against the busiest month's share.
    """
    _header("REPORT 3 | MONTHLY PROPORTION Z-TEST")

    counts = monthly_counts(df)
    ref = reference_month(counts)
    results = proportion_ztest_table(counts, ref)
    table = results_to_frame(results)

    print(f"  Reference month: {ref}  (α = {alpha})")
    print(table.to_string(index=False, formatters={"P-Value": "{:.4g}".format}))
    return table


# ── Report 4: Age Regression ──────────────────────────────────────────────────

@dataclass(frozen=True)
class RegressionSummary:
    slope: float
    intercept: float
    r_squared: float
    p_value: float
    n: int


def age_bracket_counts(df: pd.DataFrame) -> pd.DataFrame:
    """Incident count per victim age bracket, keyed by the bracket midpoint."""
    counts = df["Age Midpoint"].dropna().value_counts().sort_index()
    return pd.DataFrame({"Midpoint": counts.index.astype(float), "Count": counts.values})


def fit_age_regression(df: pd.DataFrame) -> RegressionSummary:
    """Ordinary least squares fit of incident count on age-bracket midpoint."""
    data = age_bracket_counts(df)
    if len(data) < MIN_REGRESSION_POINTS:
        raise ValueError(
            f"Need at least {MIN_REGRESSION_POINTS} age brackets with incidents, got {len(data)}"
        )

    model = ols("Count ~ Midpoint", data=data).fit()
    return RegressionSummary(
        slope=float(model.params["Midpoint"]),
        intercept=float(model.params["Intercept"]),
        r_squared=float(model.rsquared),
        p_value=float(model.pvalues["Midpoint"]),
        n=len(data),
    )


def eda_age_regression(df: pd.DataFrame, fig_dir=FIG_DIR) -> RegressionSummary:
    """
    Q: Do incidents become more or less frequent with victim age?
    Bracket counts are regressed on bracket midpoints.
    """
    _header("REPORT 4 | INCIDENTS vs VICTIM AGE (LINEAR REGRESSION)")

    data = age_bracket_counts(df)
    fit = fit_age_regression(df)

    fig, ax = plt.subplots(figsize=(10, 5))
    sns.scatterplot(data=data, x="Midpoint", y="Count", ax=ax, color=NEUTRAL, s=80)
    xs = np.linspace(min(AGE_BRACKET_MIDPOINTS.values()), max(AGE_BRACKET_MIDPOINTS.values()), 50)
    ax.plot(xs, fit.intercept + fit.slope * xs, color=ACCENT, linewidth=2,
            label=f"Fit: {fit.slope:+,.1f} per year (R² = {fit.r_squared:.2f})")
    ax.set_title("Incident Count by Victim Age Bracket")
    ax.set_xlabel("Age Bracket Midpoint (years)")
    ax.set_ylabel("Number of Incidents")
    ax.legend(fontsize=9)
    fmt_thousands(ax)
    _source_note(ax)

    plt.tight_layout()
    _save(fig, "03_age_regression", fig_dir)

    print(f"  Slope: {fit.slope:,.2f} incidents per year of age")
    print(f"  Intercept: {fit.intercept:,.1f}")
    print(f"  R²: {fit.r_squared:.3f}   p-value: {fit.p_value:.4g}   brackets: {fit.n}")
    return fit


# ── Conclusions ───────────────────────────────────────────────────────────────

def narrate_conclusions(ztest: pd.DataFrame, fit: RegressionSummary | None = None,
                        alpha: float = ALPHA) -> list[str]:
    """Turn the z-test table and regression fit into plain-language findings."""
    lines = []

    total = int(ztest["Count"].sum())
    # The busiest month is the reference; idxmax keeps the earliest on ties
    ref_row = ztest.loc[ztest["Count"].idxmax()]
    ref = ref_row["Month"]
    lines.append(
        f"{ref} is the busiest month with {int(ref_row['Count']):,} incidents "
        f"({ref_row['Count'] / total * 100:.1f}% of {total:,})."
    )

    results = [ProportionTestResult(m, int(c), float(p))
               for m, c, p in ztest[["Month", "Count", "P-Value"]].itertuples(index=False)]
    lower = significant_categories(results, alpha)
    if lower:
        lines.append(
            f"{len(lower)} of {len(results) - 1} other months have a significantly lower "
            f"share of incidents than {ref} (α = {alpha}): {', '.join(lower)}."
        )
    else:
        lines.append(f"No month has a significantly lower share of incidents than {ref} "
                     f"(α = {alpha}); incidents look evenly spread across the year.")

    if fit is not None:
        direction = "fall" if fit.slope < 0 else "rise"
        verdict = "significant" if fit.p_value < alpha else "not significant"
        lines.append(
            f"Incident counts {direction} by {abs(fit.slope):,.1f} per year of victim age "
            f"across {fit.n} age brackets (R² = {fit.r_squared:.2f}); "
            f"the trend is {verdict} (p = {fit.p_value:.3g})."
        )
    return lines


# ── Pipeline Orchestrator ─────────────────────────────────────────────────────

def run_eda(data, fig_dir=FIG_DIR, alpha: float = ALPHA) -> dict:
    """
    Run the full report in one call.

    `data` is a cleaned DataFrame or the path of a cleaned CSV.
    Figures are saved under `fig_dir`.
    """
    df = data if isinstance(data, pd.DataFrame) else load_cleaned_data(data)

    eda_monthly_histogram(df, fig_dir)
    eda_age_histogram(df, fig_dir)
    ztest = eda_month_proportion_test(df, alpha)
    try:
        fit = eda_age_regression(df, fig_dir)
    except ValueError as e:
        log.warning(f"Skipping age regression: {e}")
        fit = None

    conclusions = narrate_conclusions(ztest, fit, alpha)
    _header("CONCLUSIONS")
    for line in conclusions:
        print(f"  • {line}")

    print("\n" + "=" * 60)
    print(f"✓ REPORT COMPLETE — figures saved to {fig_dir}/")
    print("=" * 60)
    return {"ztest": ztest, "regression": fit, "conclusions": conclusions}


# ── Entry Point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    run_eda("data/processed/crime_data_cleaned.csv")
