"""
Liver Patient Classification - Feature Selection Module
========================================================
Removal of redundant, highly correlated numeric predictors.

Three pairs in the liver panel are strongly correlated on the training
data: total/direct bilirubin, the two aminotransferases, and albumin with
total protein (and with the albumin/globulin ratio). The reviewed choice
keeps the broader marker of each pair:

- total_bilirubin over direct_bilirubin
- alanine_aminotransferase (liver specific) over aspartate_aminotransferase
- total_protein and albumin_globulin_ratio over albumin

Those drops are applied first. An automatic elimination pass then runs on
whatever remains, so the final predictor set never contains a pair with
|r| above the cutoff, whatever data it is given.

Author: Healthcare AI Team
Project: Healthcare AI - Liver Patient Classification
"""

from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .eda_report import CORRELATION_CUTOFF, compute_correlation_matrix
from .preprocessing_pipeline import get_numerical_features


PREFERRED_DROPS = [
    'direct_bilirubin',
    'aspartate_aminotransferase',
    'albumin',
]


def _abs_correlation(X: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """Absolute correlation matrix with a zeroed diagonal. Constant columns read as 0."""
    corr = compute_correlation_matrix(X, columns).abs().fillna(0.0)
    values = corr.to_numpy(copy=True)
    np.fill_diagonal(values, 0.0)
    return pd.DataFrame(values, index=corr.index, columns=corr.columns)


def max_abs_correlation(X: pd.DataFrame, columns: Optional[List[str]] = None) -> float:
    """
    Largest off-diagonal absolute correlation among numeric predictors.

    Returns 0.0 when fewer than two numeric predictors remain.
    """
    if columns is None:
        columns = get_numerical_features(X)
    if len(columns) < 2:
        return 0.0
    return float(_abs_correlation(X, columns).to_numpy().max())


def find_correlated_features(
    X: pd.DataFrame,
    cutoff: float = CORRELATION_CUTOFF,
    columns: Optional[List[str]] = None
) -> List[str]:
    """
    Automatic highly-correlated-pair elimination.

    Repeatedly takes the most correlated remaining pair and drops the
    member whose mean absolute correlation with all remaining columns is
    larger (the later column on a tie), until no pair exceeds the cutoff.

    Args:
        X: Training predictors
        cutoff: Absolute correlation above which a pair is redundant
        columns: Candidate columns (default: numeric predictors of X)

    Returns:
        Column names to drop, in the order they were eliminated
    """
    if columns is None:
        columns = get_numerical_features(X)
    remaining = list(columns)
    dropped = []

    while len(remaining) > 1:
        corr = _abs_correlation(X, remaining)
        values = corr.to_numpy()
        if values.max() <= cutoff:
            break

        i, j = np.unravel_index(np.argmax(values), values.shape)
        first, second = sorted((i, j))
        mean_corr = corr.mean(axis=1)
        if mean_corr.iloc[first] > mean_corr.iloc[second]:
            victim = remaining[first]
        else:
            victim = remaining[second]

        dropped.append(victim)
        remaining.remove(victim)

    return dropped


def select_features_to_drop(
    X_train: pd.DataFrame,
    cutoff: float = CORRELATION_CUTOFF,
    preferred: Sequence[str] = PREFERRED_DROPS
) -> List[str]:
    """
    Decide which numeric predictors to remove, using training data only.

    Reviewed drops present in X_train come first; the automatic pass then
    resolves any pair still above the cutoff.

    Args:
        X_train: Training predictors
        cutoff: Absolute correlation threshold
        preferred: Reviewed columns to drop when present

    Returns:
        Column names to drop
    """
    numerical = get_numerical_features(X_train)
    drop = [col for col in preferred if col in numerical]

    remaining = [col for col in numerical if col not in drop]
    drop.extend(find_correlated_features(X_train, cutoff, remaining))

    return drop


def apply_feature_reduction(
    X_train: pd.DataFrame,
    X_test: pd.DataFrame,
    drop: Sequence[str]
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Drop the same columns from both sets so their schemas stay aligned.

    Raises:
        KeyError: If a column to drop is missing from either set
    """
    drop = list(drop)
    return X_train.drop(columns=drop), X_test.drop(columns=drop)


def reduce_features(
    X_train: pd.DataFrame,
    X_test: pd.DataFrame,
    cutoff: float = CORRELATION_CUTOFF,
    preferred: Sequence[str] = PREFERRED_DROPS,
    verbose: int = 1
) -> Tuple[pd.DataFrame, pd.DataFrame, List[str]]:
    """
    Select and apply the correlation-based reduction.

    Returns:
        Tuple of (X_train_reduced, X_test_reduced, dropped_columns)
    """
    drop = select_features_to_drop(X_train, cutoff, preferred)
    X_train_reduced, X_test_reduced = apply_feature_reduction(X_train, X_test, drop)

    if verbose:
        print(f"Feature reduction (|r| > {cutoff}):")
        print(f"  Dropped:   {', '.join(drop) if drop else 'none'}")
        print(f"  Remaining: {', '.join(X_train_reduced.columns)}")
        print(f"  Max |r| after reduction: {max_abs_correlation(X_train_reduced):.4f}")

    return X_train_reduced, X_test_reduced, drop
