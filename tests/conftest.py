"""
Pytest fixtures for the report tests.
"""
import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest


# Incidents per month in the synthetic raw extract; July is the busiest
MONTH_ROWS = {1: 10, 2: 12, 3: 20, 4: 22, 5: 30, 6: 40,
              7: 60, 8: 45, 9: 30, 10: 25, 11: 15, 12: 11}

# Victim ages cycled through the rows, including LAPD's "unknown" 0 and bad entries
AGE_CYCLE = [0, 8, 15, 22, 22, 30, 30, 30, 40, 40, 50, 60, 70, 120, -1]


@pytest.fixture
def raw_df():
    """Raw extract shaped like the data.lacity.org CSV export."""
    rows = []
    dr_no = 200100000
    for month, n in MONTH_ROWS.items():
        for i in range(n):
            dr_no += 1
            rows.append({
                "DR_NO": dr_no,
                "Date Rptd": f"2024-{month:02d}-{i % 28 + 1:02d}",
                "DATE OCC": f"2024-{month:02d}-{i % 28 + 1:02d}",
                "AREA NAME": "Central" if i % 2 else "Hollywood",
                "Crm Cd Desc": "BURGLARY",
                "Vict Age": AGE_CYCLE[dr_no % len(AGE_CYCLE)],
                "Crm Cd 2": None,
            })
    return pd.DataFrame(rows)


@pytest.fixture
def cleaned_df(raw_df):
    from data_cleaning import clean
    return clean(raw_df)


@pytest.fixture
def raw_csv(tmp_path, raw_df):
    path = tmp_path / "raw" / "crime_data.csv"
    path.parent.mkdir(parents=True)
    raw_df.to_csv(path, index=False)
    return path
