"""
data_collection.py
Download and load the raw LAPD incident CSV
"""

import logging
from pathlib import Path

import pandas as pd
import requests

log = logging.getLogger(__name__)


# ── Constants ─────────────────────────────────────────────────────────────────

# LAPD "Crime Data from 2020 to Present" (data.lacity.org, Socrata CSV export)
DATA_URL = "https://data.lacity.org/api/views/2nrs-mtv8/rows.csv?accessType=DOWNLOAD"
RAW_PATH = Path("data/raw/crime_data.csv")

CHUNK_SIZE = 1 << 20


# ── Download ──────────────────────────────────────────────────────────────────

def download_dataset(url: str = DATA_URL, dest=RAW_PATH, timeout: int = 60,
                     overwrite: bool = False) -> Path:
    """
    Stream the CSV at `url` to `dest`.

    An existing file is reused unless `overwrite` is set. Non-2xx responses
    raise requests.HTTPError and leave no partial file behind.
    """
    dest = Path(dest)
    if dest.exists() and not overwrite:
        log.info(f"Using cached download: {dest}")
        return dest

    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_suffix(dest.suffix + ".part")
    log.info(f"Downloading: {url}")
    with requests.get(url, stream=True, timeout=timeout) as r:
        r.raise_for_status()
        written = 0
        with open(tmp, "wb") as f:
            for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
                    written += len(chunk)
    tmp.replace(dest)
    log.info(f"Saved {written:,} bytes → {dest}")
    return dest


# ── Load ──────────────────────────────────────────────────────────────────────

def load_raw_data(filepath=RAW_PATH, nrows: int | None = None) -> pd.DataFrame:
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {filepath}")

    df = pd.read_csv(path, nrows=nrows, low_memory=False)
    log.info(f"Loaded {len(df):,} rows × {len(df.columns)} columns")
    log.debug(f"Columns: {list(df.columns)}")
    return df
