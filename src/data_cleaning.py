"""
data_cleaning.py
Cleaning pipeline for the LAPD incident data feeding the monthly report

Design principles:
- Every transformation is logged with before/after counts
- Only the handful of columns the report uses survive pruning
- Functions are pure (input → output), no global state
- A single `run_pipeline()` call reproduces results end-to-end
"""

import json
import logging
from pathlib import Path

import numpy as np
import pandas as pd

from data_collection import load_raw_data

log = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

# Columns the report needs; everything else is pruned on load
REQUIRED_COLUMNS = ["DATE OCC", "Vict Age"]
OPTIONAL_COLUMNS = ["DR_NO", "AREA NAME", "Crm Cd Desc"]

# Victim age: 0 = unknown in LAPD encoding; >100 = data entry error
AGE_MIN, AGE_MAX = 1, 100

MONTH_ABBR = {
    1: "Jan", 2: "Feb", 3: "Mar", 4: "Apr", 5: "May", 6: "Jun",
    7: "Jul", 8: "Aug", 9: "Sep", 10: "Oct", 11: "Nov", 12: "Dec",
}

# Brackets are [lower, upper) — the last edge is AGE_MAX + 1 so 100 is kept
AGE_BINS   = [0,   12,  18,  25,  35,  45,  55,  65,  AGE_MAX + 1]
AGE_LABELS = ["Child (0-11)", "Teen (12-17)", "Young Adult (18-24)",
              "Adult (25-34)", "Adult (35-44)", "Middle-Aged (45-54)",
              "Senior (55-64)", "Elderly (65+)"]

AGE_BRACKET_MIDPOINTS = {
    "Child (0-11)":        6.0,
    "Teen (12-17)":        15.0,
    "Young Adult (18-24)": 21.5,
    "Adult (25-34)":       30.0,
    "Adult (35-44)":       40.0,
    "Middle-Aged (45-54)": 50.0,
    "Senior (55-64)":      60.0,
    "Elderly (65+)":       83.0,
}


# ── Audit Trail ───────────────────────────────────────────────────────────────

class AuditTrail:
    """Tracks every cleaning decision with before/after row counts and change stats."""

    def __init__(self, total_rows: int):
        self.total_rows = total_rows
        self.steps: list[dict] = []

    def record(self, step: str, description: str, changed: int, detail: str = ""):
        changed = int(changed)
        pct = changed / self.total_rows * 100 if self.total_rows else 0.0
        self.steps.append({
            "step": step,
            "description": description,
            "rows_affected": changed,
            "pct_affected": round(pct, 2),
            "detail": detail,
        })
        log.info(f"[{step}] {description} → {changed:,} rows affected ({pct:.1f}%) {detail}")

    def save(self, path):
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump({"total_rows": self.total_rows, "steps": self.steps}, f, indent=2)
        log.info(f"Audit trail saved → {path}")

    def summary(self):
        print("\n" + "=" * 65)
        print("CLEANING AUDIT SUMMARY")
        print("=" * 65)
        print(f"{'Step':<22} {'Affected':>10} {'%':>7}  Description")
        print("-" * 65)
        for s in self.steps:
            print(f"{s['step']:<22} {s['rows_affected']:>10,} {s['pct_affected']:>6.1f}%  {s['description']}")
        print("=" * 65)


# ── Step 1: Prune Columns ─────────────────────────────────────────────────────

def prune_columns(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    missing_cols = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing_cols:
        raise ValueError(f"Dataset is missing expected columns: {sorted(missing_cols)}")

    keep = [c for c in OPTIONAL_COLUMNS + REQUIRED_COLUMNS if c in df.columns]
    dropped = len(df.columns) - len(keep)
    df = df[keep].copy()
    audit.record("Columns pruned", f"Kept {len(keep)} report columns", dropped,
                 f"({dropped} columns dropped)")
    return df


# ── Step 2: Deduplicate ───────────────────────────────────────────────────────

def drop_duplicates(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    before = len(df)
    # DR_NO is the unique report number — exact duplicates on it are true dupes
    df = df.drop_duplicates(subset=["DR_NO"] if "DR_NO" in df.columns else None)
    audit.record("Deduplication", "Duplicate reports removed", before - len(df))
    return df


# ── Step 3: Occurrence Date → Month ───────────────────────────────────────────

def parse_occurrence_dates(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    df = df.copy()
    df["DATE OCC"] = pd.to_datetime(df["DATE OCC"], errors="coerce")

    unparseable = df["DATE OCC"].isna()
    audit.record("Date parse: DATE OCC", "Unparseable dates dropped", unparseable.sum())
    df = df[~unparseable].copy()

    df["Year"]      = df["DATE OCC"].dt.year.astype(int)
    df["Month"]     = df["DATE OCC"].dt.month.astype(int)
    df["MonthName"] = df["Month"].map(MONTH_ABBR)
    return df


# ── Step 4: Victim Age ────────────────────────────────────────────────────────

def clean_victim_age(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    df = df.copy()
    df["Vict Age"] = pd.to_numeric(df["Vict Age"], errors="coerce").astype(float)

    # Age = 0 in LAPD data means "unknown", not actually zero years old
    zero_age = (df["Vict Age"] == 0).sum()
    df.loc[df["Vict Age"] == 0, "Vict Age"] = np.nan
    audit.record("Age: zeros → NaN", "LAPD encodes unknown age as 0", zero_age)

    # Ages outside human range are data entry errors
    out_of_range = (df["Vict Age"] < AGE_MIN) | (df["Vict Age"] > AGE_MAX)
    df.loc[out_of_range, "Vict Age"] = np.nan
    audit.record("Age: out-of-range → NaN", f"Ages outside [{AGE_MIN}, {AGE_MAX}] nulled",
                 out_of_range.sum())
    return df


# ── Step 5: Age Brackets ──────────────────────────────────────────────────────

def bracket_victim_age(df: pd.DataFrame, audit: AuditTrail) -> pd.DataFrame:
    df = df.copy()
    df["Age Group"] = pd.cut(df["Vict Age"], bins=AGE_BINS, labels=AGE_LABELS, right=False)
    df["Age Midpoint"] = df["Age Group"].astype(object).map(AGE_BRACKET_MIDPOINTS).astype(float)

    bracketed = df["Age Group"].notna().sum()
    audit.record("Age brackets", f"Known ages → {len(AGE_LABELS)} brackets", bracketed,
                 f"({len(df) - bracketed:,} rows without a known age)")
    return df


# ── Pipeline Orchestrator ─────────────────────────────────────────────────────

def clean(df: pd.DataFrame, audit: AuditTrail | None = None) -> pd.DataFrame:
    """Run every cleaning step on an already-loaded DataFrame."""
    audit = audit or AuditTrail(total_rows=len(df))
    df = prune_columns(df, audit)
    df = drop_duplicates(df, audit)
    df = parse_occurrence_dates(df, audit)
    df = clean_victim_age(df, audit)
    df = bracket_victim_age(df, audit)
    return df.reset_index(drop=True)


def run_pipeline(
    input_path,
    output_path=None,
    audit_path=None,
) -> pd.DataFrame:
    """
    End-to-end cleaning pipeline. Call this to fully reproduce cleaned data.

    Parameters
    ----------
    input_path  : path to raw CSV from data.lacity.org
    output_path : optional path for cleaned CSV output
    audit_path  : optional path for JSON audit log (records every decision)

    Returns
    -------
    Cleaned DataFrame
    """
    log.info("=" * 60)
    log.info("LAPD INCIDENT DATA — CLEANING PIPELINE START")
    log.info("=" * 60)

    df = load_raw_data(input_path)

    audit = AuditTrail(total_rows=len(df))
    df = clean(df, audit)

    if output_path:
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(output_path, index=False)
        log.info(f"Cleaned data saved → {output_path}")
    log.info(f"Final shape: {df.shape[0]:,} rows × {df.shape[1]} columns")

    if audit_path:
        audit.save(audit_path)
    audit.summary()

    return df
