"""
run_report.py
Download → clean → report, in one command

    python src/run_report.py --skip-download --raw-path data/raw/crime_data.csv
"""

import argparse
import logging
import sys

import requests

from data_cleaning import run_pipeline
from data_collection import DATA_URL, RAW_PATH, download_dataset
from eda import ALPHA, FIG_DIR, run_eda
from proportion_test import ProportionTestError

log = logging.getLogger(__name__)

CLEANED_PATH = "data/processed/crime_data_cleaned.csv"
AUDIT_PATH = "data/cleaning_audit.json"


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Monthly incident proportion report for LAPD crime data")
    parser.add_argument("--url", default=DATA_URL, help="CSV export to download")
    parser.add_argument("--raw-path", default=str(RAW_PATH), help="Where the raw CSV is stored")
    parser.add_argument("--output-path", default=CLEANED_PATH, help="Cleaned CSV output")
    parser.add_argument("--audit-path", default=AUDIT_PATH, help="JSON cleaning audit output")
    parser.add_argument("--fig-dir", default=str(FIG_DIR), help="Directory for report figures")
    parser.add_argument("--alpha", type=float, default=ALPHA, help="Significance level")
    parser.add_argument("--skip-download", action="store_true", help="Use the raw CSV already on disk")
    parser.add_argument("--overwrite", action="store_true", help="Re-download even if the raw CSV exists")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)
    if not 0 < args.alpha < 1:
        parser.error("--alpha must be between 0 and 1")
    return args


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        if not args.skip_download:
            download_dataset(args.url, args.raw_path, overwrite=args.overwrite)
        df = run_pipeline(args.raw_path, args.output_path, args.audit_path)
        run_eda(df, fig_dir=args.fig_dir, alpha=args.alpha)
    except requests.RequestException as e:
        log.error(f"Download failed: {e}")
        return 1
    except ProportionTestError as e:
        log.error(f"Monthly proportion test failed: {e}")
        return 1
    except (FileNotFoundError, ValueError) as e:
        log.error(f"Report aborted: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
