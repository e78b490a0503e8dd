"""
Shared fixtures: synthetic data shaped like the raw liver patient file.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


def make_raw_liver_frame(n_samples: int = 300, seed: int = 42) -> pd.DataFrame:
    """
    Headerless raw table: 11 positional columns, outcome coded 1/2.

    Mirrors the real panel's structure: bilirubin and enzymes are elevated
    for liver patients (code 1), and the three known redundant pairs are
    strongly correlated.
    """
    rng = np.random.default_rng(seed)

    outcome = rng.choice([1, 2], n_samples, p=[0.7, 0.3])
    care = outcome == 1

    age = rng.integers(10, 80, n_samples)
    sex = rng.choice(["Male", "Female"], n_samples, p=[0.75, 0.25])
    total_bilirubin = rng.lognormal(0.0, 0.4, n_samples) + np.where(care, 1.5, 0.0)
    direct_bilirubin = np.abs(total_bilirubin * 0.45 + rng.normal(0, 0.05, n_samples))
    alkaline_phosphatase = rng.lognormal(5.3, 0.3, n_samples)
    alt = rng.lognormal(3.3, 0.4, n_samples) * np.where(care, 1.8, 1.0)
    ast = np.abs(alt * 1.1 + rng.normal(0, 3, n_samples))
    total_protein = rng.normal(6.5, 0.8, n_samples)
    albumin = np.abs(total_protein * 0.48 + rng.normal(0, 0.15, n_samples))
    ag_ratio = np.clip(rng.normal(1.0, 0.3, n_samples), 0.3, None)

    return pd.DataFrame({
        0: age,
        1: sex,
        2: total_bilirubin.round(2),
        3: direct_bilirubin.round(2),
        4: alkaline_phosphatase.round(0),
        5: alt.round(0),
        6: ast.round(0),
        7: total_protein.round(2),
        8: albumin.round(2),
        9: ag_ratio.round(2),
        10: outcome,
    })


def write_raw_csv(frame: pd.DataFrame, path: Path) -> Path:
    frame.to_csv(path, header=False, index=False)
    return path


@pytest.fixture
def raw_frame():
    """Synthetic raw table with 300 complete rows."""
    return make_raw_liver_frame()


@pytest.fixture
def raw_csv(raw_frame, tmp_path):
    """Synthetic raw table written as a headerless CSV."""
    return write_raw_csv(raw_frame, tmp_path / "ilpd.csv")


@pytest.fixture
def liver_df(raw_csv):
    """Loaded and validated patient records."""
    from liver_analysis.data_ingestion import load_liver_data
    return load_liver_data(raw_csv)
